"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for the lifetime of exactly one
request/response exchange.

=============================================================================
WHAT THE PARSER NEEDS FROM A SOCKET
=============================================================================

TCP delivers bytes in arbitrary chunks. A request line might arrive in
three recv() calls, or the headers and the body might arrive in one. The
parser doesn't want to care, so the connection offers the two blocking
primitives it reads with:

    readline()   - bytes up to and including the next "\n"
    read(n)      - up to n bytes

Both come from socket.makefile("rb"), a buffered reader that does the
recv()-and-stitch work for us.

=============================================================================
ONE REQUEST, ONE RESPONSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Lifecycle                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED            │
    │               │                                      ▲               │
    │               └──── parse error ─────────────────────┘               │
    │                     (nothing written)                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive. After one response, or after a parse error,
the connection is closed. send_response() refuses to run twice.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, BinaryIO


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and the send guard."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Reading the request
    PROCESSING = "processing"  # Request parsed, handler running
    WRITING = "writing"        # Response being sent
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short random identifier for log correlation.
        state: Current ConnectionState.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds, None for fully blocking.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _response_sent: bool = field(default=False, repr=False)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's accept timeout
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb")

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def readline(self) -> bytes:
        """
        Read one line, including its "\\n".

        Returns fewer bytes without a trailing "\\n" (possibly b"") if the
        peer closed the connection first.
        """
        self.state = ConnectionState.READING
        return self._reader.readline()

    def read(self, size: int) -> bytes:
        """Read up to size bytes, blocking until they arrive or EOF."""
        self.state = ConnectionState.READING
        return self._reader.read(size)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the (single) response.

        Uses sendall() so the whole buffer goes out, not just what fits
        in the kernel buffer on the first try.

        Args:
            data: Serialized response bytes.

        Returns:
            True if sent, False if the peer went away.

        Raises:
            RuntimeError: If a response was already sent on this connection.
        """
        if self._response_sent:
            raise RuntimeError(f"[{self.id}] Response already sent")
        self._response_sent = True

        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    @property
    def response_sent(self) -> bool:
        return self._response_sent

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. drain whatever the client still sends (briefly)
        3. close the reader and the socket
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self._reader.close()
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
