"""
=============================================================================
FILE HANDLER
=============================================================================

Serves and stores files under the configured directory:

    GET  /files/{name}   → read {directory}{name}
    POST /files/{name}   → write the request body to {directory}{name}
    anything else        → 405 Method Not Allowed

=============================================================================
FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /files/notes.txt                                              │
    │        │                                                             │
    │        ├── exists? ── no ──────────────────────► 404 Not Found      │
    │        │                                                             │
    │        ├── open ───── fails ───────────────────► 500               │
    │        │                                                             │
    │        └── read lines, join without newlines ──► 200 octet-stream  │
    │                                                                      │
    │   POST /files/notes.txt                                             │
    │        │                                                             │
    │        ├── open/create (no truncate) ─ fails ──► 500               │
    │        │                                                             │
    │        ├── write body ─────────────── fails ──► 500               │
    │        │                                                             │
    │        └───────────────────────────────────────► 201 Created       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THINGS THIS HANDLER DELIBERATELY DOES NOT DO
=============================================================================

1. PATH SANITIZATION
   The file path is plain string concatenation: directory + name.
   "/files/../etc/passwd" with directory "/tmp/" reads "/tmp/../etc/passwd".
   Nothing stops a client from leaving the serve directory. Do not expose
   this server to untrusted clients.

2. RAW BYTE SERVING
   GET reads the file line by line and joins the lines WITHOUT their line
   terminators. A file containing "a\nb\n" is served as "ab". Binary files
   lose every 0x0A byte (and a 0x0D right before one).

3. LOCKING
   Two connections writing the same file race; the last write wins. A GET
   running alongside a POST may see a half-written file.

4. PARTIAL READS
   A GET on a directory, or a read that fails partway through the file,
   is answered with 500. Whatever lines were read before the failure are
   thrown away, not served.

=============================================================================
"""

import logging
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    created, not_found, method_not_allowed, internal_error,
)
from ..storage import FileStorage, StorageError


logger = logging.getLogger(__name__)

FILES_PREFIX = "/files/"


class FileHandler:
    """
    Handler for /files/{name}.

    Usage:
        files = FileHandler("/tmp/")
        router.add_route("files", "/files/*", path_prefix("/files/"), files.handle)
    """

    def __init__(
        self,
        directory: str,
        storage: Optional[FileStorage] = None,
        url_prefix: str = FILES_PREFIX,
    ):
        """
        Args:
            directory: Serve directory. Joined to file names by plain
                       concatenation, so it normally ends with "/".
            storage: Filesystem collaborator. Defaults to FileStorage().
            url_prefix: Path prefix stripped to get the file name.
        """
        self.directory = directory
        self.storage = storage or FileStorage()
        self.url_prefix = url_prefix

    def resolve(self, request_path: str) -> str:
        """
        Turn a request path into a filesystem path.

            directory="/tmp/", path="/files/a.txt"  →  "/tmp/a.txt"
        """
        file_name = request_path[len(self.url_prefix):]
        return self.directory + file_name

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch on method: GET serves, POST stores, others get 405."""
        file_path = self.resolve(request.path)

        if request.is_get:
            return self._serve_file(file_path)
        if request.is_post:
            return self._store_file(file_path, request.body)

        return method_not_allowed()

    def _serve_file(self, file_path: str) -> HTTPResponse:
        if not self.storage.exists(file_path):
            return not_found()

        try:
            handle = self.storage.open_for_read(file_path)
        except StorageError as e:
            logger.error(f"Error opening {file_path}: {e}")
            return internal_error()

        try:
            with handle:
                content = b"".join(self.storage.read_lines(handle))
        except StorageError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return internal_error()

        return ResponseBuilder().octet_stream(content).build()

    def _store_file(self, file_path: str, body: Optional[bytes]) -> HTTPResponse:
        """
        Write the body at the start of the file, without truncating it.

        A request with no (valid) Content-Length has no body; the file is
        still created and the answer is still 201.
        """
        try:
            handle = self.storage.open_for_write(file_path)
        except StorageError as e:
            logger.error(f"Error opening {file_path} for writing: {e}")
            return internal_error()

        try:
            with handle:
                self.storage.write(handle, body or b"")
        except StorageError as e:
            logger.error(f"Error writing {file_path}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(body or b'')} bytes to {file_path}")
        return created()
