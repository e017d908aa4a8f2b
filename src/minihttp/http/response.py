"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to wire bytes, gzipping the
body on the way out when asked to.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │        │     │   │                                              │ │
    │  │   Protocol  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Encoding: gzip\r\n                                  │ │
    │  │    Content-Length: 23\r\n       ← length AFTER gzip           │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    <23 bytes of gzip data>                                     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHO OWNS CONTENT-LENGTH?
=============================================================================

The serializer, always. Handlers may set Content-Length, but whenever a
body is present to_bytes() recomputes it from the bytes that will really
hit the wire:

    body = b"abc"                   Content-Length: 3
    body = b"abc" + gzip            Content-Length: 23   (compressed size)
    body = None                     no Content-Length at all

Getting this wrong is the classic gzip bug: the client trusts a
Content-Length of 3, reads 3 bytes of gzip header and hangs or chokes.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .text("abc")
        .gzip()
        .build())

build() hands out a fresh snapshot each time. Headers are copied, so
calling builder.header(...) after build() never changes a response that
was already built, and two handlers can't end up mutating the same
response state.

=============================================================================
"""

import gzip
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus, status_text


CRLF = b"\r\n"
DEFAULT_PROTOCOL = "HTTP/1.1"


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be written to the client.

    Immutable. Use ResponseBuilder to make one.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                   (gzip here)                  │
        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n    socket.sendall(
          status=200,              Content-Length: 3\\r\\n    response_bytes
          headers={...},           \\r\\n                   )
          body=b"abc"              abc"
        )

    =========================================================================
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    protocol: str = DEFAULT_PROTOCOL

    @property
    def status_line(self) -> str:
        """
        Get the status line (without CRLF).

        Example: "HTTP/1.1 404 Not Found"
        Unmapped codes get the phrase "Unknown".
        """
        return f"{self.protocol} {int(self.status)} {status_text(self.status)}"

    @property
    def is_gzip(self) -> bool:
        """True if the body will be gzip-compressed on serialization."""
        return self.headers.get("Content-Encoding") == "gzip"

    def encoded_body(self) -> Optional[bytes]:
        """
        The body exactly as it will go on the wire.

        Returns:
            gzip-compressed body when Content-Encoding is "gzip",
            the body as-is otherwise, or None when there is no body.
        """
        if self.body is None:
            return None
        if self.is_gzip:
            return gzip.compress(self.body)
        return self.body

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over a socket.

        =====================================================================
        SERIALIZATION ORDER
        =====================================================================

            1. Status line + CRLF
            2. Encode body (gzip if Content-Encoding: gzip),
               then overwrite Content-Length with the encoded size
            3. "Name: value" + CRLF for every header
            4. CRLF
            5. Encoded body bytes

        Header order follows dict iteration and carries no meaning.

        =====================================================================

        Returns:
            Complete HTTP response as bytes.
        """
        # Work on a copy, the snapshot itself never changes
        response_headers = dict(self.headers)

        payload = self.encoded_body()
        if payload is not None:
            response_headers["Content-Length"] = str(len(payload))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        head = "\r\n".join(lines).encode("latin-1") + CRLF
        return head + (payload or b"")

    def write_to(self, sink) -> int:
        """
        Serialize and write the response to a binary sink.

        Args:
            sink: Anything with write(bytes), e.g. a BytesIO or a
                  socket's makefile("wb").

        Returns:
            Number of bytes written.
        """
        data = self.to_bytes()
        sink.write(data)
        return len(data)


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

    Each setter returns self for chaining; build() returns a new
    HTTPResponse snapshot.

    ==========================================================================
    USAGE EXAMPLES
    ==========================================================================

    # 200 with no body at all (no Content-Length header on the wire)
    response = ResponseBuilder().build()

    # Plain text
    response = ResponseBuilder().text("hello").build()

    # Plain text, compressed when serialized
    response = ResponseBuilder().text("hello").gzip().build()

    # File download
    response = ResponseBuilder().octet_stream(data).build()

    # Another protocol token on the status line
    response = ResponseBuilder(protocol="HTTP/1.0").status(HTTPStatus.NOT_FOUND).build()

    ==========================================================================
    """

    def __init__(self, protocol: str = DEFAULT_PROTOCOL):
        """
        Initialize the response builder.

        Args:
            protocol: Protocol token for the status line ("HTTP/1.1").
        """
        self._protocol = protocol
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: Optional[bytes] = None

    # =========================================================================
    # STATUS / PROTOCOL
    # =========================================================================

    def protocol(self, protocol: str) -> "ResponseBuilder":
        """Set the protocol token of the status line."""
        self._protocol = protocol
        return self

    def status(self, status: int) -> "ResponseBuilder":
        """
        Set the status code.

        Accepts HTTPStatus members or plain integers; codes outside the
        HTTPStatus table are allowed and render as "Unknown".
        """
        self._status = status
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Set a header. Setting the same name again replaces the value."""
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        """Set several headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def gzip(self) -> "ResponseBuilder":
        """
        Mark the body for gzip compression.

        Only sets Content-Encoding: gzip. The actual compression happens in
        HTTPResponse.to_bytes(), which also fixes up Content-Length.
        """
        return self.header("Content-Encoding", "gzip")

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes, None]) -> "ResponseBuilder":
        """
        Set the response body.

        Strings are encoded as UTF-8. None removes the body entirely,
        which also means no Content-Length header.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = "text/plain") -> "ResponseBuilder":
        """Set a plain text body with Content-Type text/plain."""
        self._headers["Content-Type"] = content_type
        return self.body(text)

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        """Set a binary body with Content-Type application/octet-stream."""
        self._headers["Content-Type"] = "application/octet-stream"
        return self.body(data)

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """
        Build an HTTPResponse snapshot.

        The headers dict is copied, so the builder can keep being used
        without touching responses it already produced.
        """
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
            protocol=self._protocol,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Bodiless responses, the way the routes answer when there is nothing to
# say beyond the status line:
#
#     return not_found()       → b"HTTP/1.1 404 Not Found\r\n\r\n"
#
# =============================================================================

def ok() -> HTTPResponse:
    """200 OK with no body."""
    return ResponseBuilder().status(HTTPStatus.OK).build()


def created() -> HTTPResponse:
    """201 Created with no body. Sent after a file upload succeeds."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def not_found() -> HTTPResponse:
    """404 Not Found with no body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def method_not_allowed() -> HTTPResponse:
    """405 Method Not Allowed with no body."""
    return ResponseBuilder().status(HTTPStatus.METHOD_NOT_ALLOWED).build()


def internal_error() -> HTTPResponse:
    """500 Internal Server Error with no body."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
