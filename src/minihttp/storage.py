"""
=============================================================================
FILE STORAGE
=============================================================================

The filesystem operations behind /files/, behind one small class so that
handlers never call open() or os.* directly.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        FileStorage API                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   exists(path)          → bool                                      │
    │   open_for_read(path)   → binary file handle                        │
    │   open_for_write(path)  → binary file handle (create, NO truncate)  │
    │   read_lines(handle)    → iterator of lines without "\n" / "\r\n"   │
    │   read_all(handle)      → bytes                                     │
    │   write(handle, data)   → None                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every OSError is re-raised as StorageError, with the original attached
as __cause__. Handlers catch StorageError and turn it into 404 or 500.

=============================================================================
NO TRUNCATE ON WRITE
=============================================================================

open_for_write() uses O_CREAT | O_WRONLY without O_TRUNC. Writing "hi"
over a file containing "hello" leaves "hillo" behind:

    before:  h e l l o
    write:   h i
    after:   h i l l o

=============================================================================
"""

import os
from typing import BinaryIO, Iterator

# rw-r--r--
DEFAULT_FILE_MODE = 0o644


class StorageError(Exception):
    """
    A filesystem operation failed.

    Attributes:
        path: The path involved.
    """

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class FileStorage:
    """
    Thin wrapper over the local filesystem.

    Stateless. The serve directory is not known here: callers pass full
    paths, already joined with the directory.
    """

    def __init__(self, file_mode: int = DEFAULT_FILE_MODE):
        """
        Args:
            file_mode: Permission bits for newly created files.
        """
        self.file_mode = file_mode

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def open_for_read(self, path: str) -> BinaryIO:
        """
        Open a file for binary reading.

        Raises:
            StorageError: If the file can't be opened.
        """
        try:
            return open(path, "rb")
        except OSError as e:
            raise StorageError(f"Cannot open {path} for reading: {e}", path) from e

    def open_for_write(self, path: str) -> BinaryIO:
        """
        Open (creating if needed) a file for binary writing, WITHOUT truncating.

        Raises:
            StorageError: If the file can't be opened or created.
        """
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT, self.file_mode)
        except OSError as e:
            raise StorageError(f"Cannot open {path} for writing: {e}", path) from e
        return os.fdopen(fd, "wb")

    def read_lines(self, handle: BinaryIO) -> Iterator[bytes]:
        """
        Iterate over the lines of a file with their terminators removed.

        Strips the trailing "\\n" and then one trailing "\\r", so both Unix
        and Windows line endings disappear:

            b"a\\nb\\r\\nc"  →  b"a", b"b", b"c"

        Raises:
            StorageError: If reading fails part way.
        """
        path = getattr(handle, "name", "<handle>")
        try:
            for line in handle:
                if line.endswith(b"\n"):
                    line = line[:-1]
                if line.endswith(b"\r"):
                    line = line[:-1]
                yield line
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}", str(path)) from e

    def read_all(self, handle: BinaryIO) -> bytes:
        """
        Read the rest of a file as raw bytes.

        Raises:
            StorageError: If reading fails.
        """
        path = getattr(handle, "name", "<handle>")
        try:
            return handle.read()
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}", str(path)) from e

    def write(self, handle: BinaryIO, data: bytes) -> None:
        """
        Write all of data to the handle and flush it.

        Raises:
            StorageError: If the write fails.
        """
        path = getattr(handle, "name", "<handle>")
        try:
            handle.write(data)
            handle.flush()
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}", str(path)) from e
