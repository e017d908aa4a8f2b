"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request off a byte stream and turns it into an
immutable HTTPRequest value.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬─────── ───┬────                              │ │
    │  │     │           │           │                                   │ │
    │  │   Method       Path      Protocol                               │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    Content-Type: application/octet-stream\r\n                  │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (exactly Content-Length bytes) ──────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAMING, NOT BUFFERING
=============================================================================

The parser never sees "the whole request". It pulls from a blocking
byte stream with two primitives only:

    stream.readline()   → one line, including its trailing "\n"
    stream.read(n)      → up to n bytes (we loop until we have all n)

Anything that offers those works: a socket's makefile("rb"), a
Connection, or an io.BytesIO in tests.

=============================================================================
WHAT IS FATAL AND WHAT IS NOT
=============================================================================

    ┌───────────────────────────────┬───────────────────────────────────┐
    │ Problem                       │ Outcome                           │
    ├───────────────────────────────┼───────────────────────────────────┤
    │ request line not 3 tokens     │ HTTPParseError(REQUEST_LINE)      │
    │ stream ends in request line   │ HTTPParseError(REQUEST_LINE)      │
    │ unknown method token          │ HTTPParseError(METHOD)            │
    │ stream ends in headers        │ HTTPParseError(HEADER)            │
    │ header line without ":"       │ logged, line skipped              │
    │ Content-Length not a number   │ logged, body not read             │
    │ body shorter than declared    │ HTTPParseError(BODY)              │
    └───────────────────────────────┴───────────────────────────────────┘

A parse error means the connection is dropped without any response.

A malformed Content-Length does NOT abort the request: the request goes
on to routing with no body, even if the client did send one.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "How do you know when the headers end?"
A: "An empty line. We read line by line and stop at the first line that
   is empty once the CRLF is stripped."

Q: "How do you know where the body ends?"
A: "Content-Length. We read exactly that many bytes. There's no chunked
   encoding here, so no Content-Length means no body."

Q: "Why decode headers as ISO-8859-1?"
A: "Every byte maps to exactly one character, so decoding can never fail
   on odd bytes. UTF-8 would throw on invalid sequences."

=============================================================================
"""

import io
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


logger = logging.getLogger(__name__)

CRLF = "\r\n"

# Header section is bytes on the wire; latin-1 decodes any byte sequence
HEADER_ENCODING = "iso-8859-1"

# Only space and tab separate fields; str.split() would also break on \x85 and \xa0
HTTP_WHITESPACE = " \t"
_FIELD_SEPARATOR = re.compile(r"[ \t]+")


def split_fields(text: str) -> list[str]:
    """Split on runs of spaces and tabs, dropping empty fields."""
    return [part for part in _FIELD_SEPARATOR.split(text) if part]


class ParseStage(Enum):
    """Which part of the request the parser was reading when it failed."""
    REQUEST_LINE = "request line"
    METHOD = "method"
    HEADER = "header"
    BODY = "body"


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the stage that failed so the server can log something useful.
    There is no status code attached: a request that fails to parse gets
    no response at all, the connection is simply closed.

    Attributes:
        stage: ParseStage where parsing stopped.
    """

    def __init__(self, message: str, stage: ParseStage):
        super().__init__(message)
        self.stage = stage


class Method(Enum):
    """
    The request methods this server understands.

    Wire tokens are matched case-insensitively, so "get", "Get" and "GET"
    all map to Method.GET. Anything else is rejected; there is no default.

        >>> Method.from_string("post")
        <Method.POST: 'POST'>
        >>> str(Method.DELETE)
        'DELETE'
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def from_string(cls, token: str) -> "Method":
        """
        Look up a method by its wire token.

        Args:
            token: Method token as received ("GET", "post", ...).

        Returns:
            Matching Method member.

        Raises:
            ValueError: If the token is not a supported method.
        """
        try:
            return cls(token.upper())
        except ValueError:
            raise ValueError(f"Invalid method: {token!r}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Created once per connection by RequestParser and never modified
    afterwards (frozen dataclass).

    =========================================================================
    ATTRIBUTES EXPLAINED
    =========================================================================

        method:         Method enum member (GET, POST, PUT, DELETE)

        path:           Request target exactly as received.
                        NOT percent-decoded, NOT normalized:
                        "/files/a%20b" stays "/files/a%20b"

        protocol:       Protocol token as received ("HTTP/1.1").
                        Kept verbatim, never validated.

        headers:        Dictionary with LOWERCASE keys.
                        A repeated header keeps only its last value.

        body:           Raw body bytes, or None when no valid
                        Content-Length was sent.

        client_address: (ip, port) of the peer, for logging.

    =========================================================================
    """

    method: Method
    path: str
    protocol: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    client_address: tuple[str, int] = ("", 0)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("User-Agent")  # same as "user-agent"
        """
        return self.headers.get(name.lower(), default)

    def has_header(self, name: str) -> bool:
        """Check whether a header was sent (case-insensitive)."""
        return name.lower() in self.headers

    def routes_to(self, prefix: str) -> bool:
        """Check whether the path starts with the given prefix."""
        return self.path.startswith(prefix)

    @property
    def is_get(self) -> bool:
        return self.method is Method.GET

    @property
    def is_post(self) -> bool:
        return self.method is Method.POST

    @property
    def user_agent(self) -> str:
        """User-Agent header value, empty string if absent."""
        return self.headers.get("user-agent", "")

    @property
    def content_length(self) -> int:
        """
        Content-Length header as an integer.

        Returns 0 if the header is missing or not a valid number.
        """
        value = self.headers.get("content-length", "")
        if not RequestParser.CONTENT_LENGTH_PATTERN.fullmatch(value):
            return 0
        return int(value)

    def accepts_encoding(self, encoding: str) -> bool:
        """
        Check whether the client listed an encoding in Accept-Encoding.

        The header is a comma-separated list. Each entry is trimmed and
        compared case-insensitively as a whole token:

            Accept-Encoding: deflate, GZIP    → accepts_encoding("gzip") is True
            Accept-Encoding: gzipped          → accepts_encoding("gzip") is False

        Args:
            encoding: Encoding name, e.g. "gzip".

        Returns:
            True if the encoding appears in the list.
        """
        value = self.headers.get("accept-encoding")
        if value is None:
            return False

        wanted = encoding.strip(HTTP_WHITESPACE).lower()
        return any(token.strip(HTTP_WHITESPACE).lower() == wanted for token in value.split(","))


class RequestParser:
    """
    Parses one request from a blocking byte stream.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        byte stream
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  REQUEST PARSER                                                   │
        ├───────────────────────────────────────────────────────────────────┤
        │                                                                    │
        │  1. readline() → request line ──────────────────────────────────►│
        │     │  not 3 tokens / EOF?  → HTTPParseError(REQUEST_LINE)       │
        │     ▼                                                             │
        │  2. Method.from_string() ───────────────────────────────────────►│
        │     │  unknown?             → HTTPParseError(METHOD)             │
        │     ▼                                                             │
        │  3. readline() until blank line ────────────────────────────────►│
        │     │  "Name: Value", names lowercased, last one wins            │
        │     │  EOF?                 → HTTPParseError(HEADER)             │
        │     ▼                                                             │
        │  4. read(Content-Length) ───────────────────────────────────────►│
        │     │  short read?          → HTTPParseError(BODY)               │
        │     ▼                                                             │
        │  5. Build HTTPRequest ──────────────────────────────────────────►│
        │                                                                    │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest (frozen)

    ==========================================================================
    """

    # Only plain decimal digits. int() alone would also take "+5", " 5" or "5_0".
    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")

    def __init__(self, max_body_size: Optional[int] = None):
        """
        Initialize the request parser.

        Args:
            max_body_size: Largest Content-Length we are willing to read.
                           None (the default) means no limit.
        """
        self.max_body_size = max_body_size

    def parse(
        self,
        stream,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Read and parse exactly one request from the stream.

        Args:
            stream: Object with blocking readline() and read(n) returning bytes.
            client_address: Peer (ip, port), stored on the request for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request line, method, headers or body
                            cannot be read.
        """
        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        line = self._read_line(stream, ParseStage.REQUEST_LINE)
        method, path, protocol = self._parse_request_line(line)

        # =====================================================================
        # STEP 2: Headers
        # =====================================================================
        headers = self._parse_headers(stream)

        # =====================================================================
        # STEP 3: Body (only with a valid Content-Length)
        # =====================================================================
        body = self._read_body(stream, headers)

        return HTTPRequest(
            method=method,
            path=path,
            protocol=protocol,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _read_line(self, stream, stage: ParseStage) -> str:
        """
        Read one LF-terminated line and decode it.

        A line that comes back without its "\\n" means the peer closed the
        connection mid-line, which is as fatal as a socket error.
        """
        try:
            raw = stream.readline()
        except OSError as e:
            raise HTTPParseError(f"Error reading {stage.value}: {e}", stage) from e

        if not raw.endswith(b"\n"):
            raise HTTPParseError(
                f"Connection closed while reading {stage.value}",
                stage,
            )

        return raw.decode(HEADER_ENCODING)

    def _parse_request_line(self, line: str) -> tuple[Method, str, str]:
        """
        Split the request line into (method, path, protocol).

            "GET /echo/abc HTTP/1.1\\r\\n"  →  (Method.GET, "/echo/abc", "HTTP/1.1")

        Raises:
            HTTPParseError: REQUEST_LINE for a wrong token count,
                            METHOD for an unknown method.
        """
        parts = split_fields(line.rstrip(CRLF))
        if len(parts) != 3:
            raise HTTPParseError(
                f"Invalid request line: {line.rstrip(CRLF)!r}",
                ParseStage.REQUEST_LINE,
            )

        method_token, path, protocol = parts

        try:
            method = Method.from_string(method_token)
        except ValueError as e:
            raise HTTPParseError(str(e), ParseStage.METHOD) from e

        return method, path, protocol

    def _parse_headers(self, stream) -> Dict[str, str]:
        """
        Read header lines up to and including the blank line.

        =====================================================================
        HEADER FORMAT
        =====================================================================

            "Content-Type: text/plain"      → {"content-type": "text/plain"}
            "  X-Thing  :   spaced out  "   → {"x-thing": "spaced out"}
            "Host: a:4221"                  → {"host": "a:4221"}   (first ":" only)
            "garbage"                       → skipped

        =====================================================================
        """
        headers: Dict[str, str] = {}

        while True:
            line = self._read_line(stream, ParseStage.HEADER).rstrip(CRLF)
            if not line:
                break

            name, sep, value = line.partition(":")
            if not sep:
                logger.warning(f"Skipping invalid header line: {line!r}")
                continue

            # Last occurrence wins, no comma-joining of repeated headers
            headers[name.strip(HTTP_WHITESPACE).lower()] = value.strip(HTTP_WHITESPACE)

        return headers

    def _read_body(self, stream, headers: Dict[str, str]) -> Optional[bytes]:
        """
        Read exactly Content-Length bytes, if a usable Content-Length exists.

        Returns:
            Body bytes, or None when Content-Length is missing or malformed.
        """
        raw_length = headers.get("content-length")
        if raw_length is None:
            return None

        if not self.CONTENT_LENGTH_PATTERN.fullmatch(raw_length):
            logger.warning(f"Ignoring invalid Content-Length: {raw_length!r}")
            return None

        length = int(raw_length)
        if self.max_body_size is not None and length > self.max_body_size:
            raise HTTPParseError(
                f"Body too large: {length} bytes (limit {self.max_body_size})",
                ParseStage.BODY,
            )

        # read(n) may return fewer bytes than asked (BytesIO, partial recv),
        # so keep pulling until we have them all or the stream runs dry
        chunks = []
        remaining = length
        try:
            while remaining > 0:
                chunk = stream.read(remaining)
                if not chunk:
                    raise HTTPParseError(
                        f"Incomplete body: expected {length} bytes, "
                        f"got {length - remaining}",
                        ParseStage.BODY,
                    )
                chunks.append(chunk)
                remaining -= len(chunk)
        except OSError as e:
            raise HTTPParseError(f"Error reading body: {e}", ParseStage.BODY) from e

        return b"".join(chunks)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_body_size: Optional[int] = None
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Wraps the bytes in a BytesIO and runs RequestParser over it. Handy in
    tests and anywhere the request is already buffered.

    Args:
        data: Raw HTTP request bytes.
        client_address: Client's (ip, port) tuple.
        max_body_size: Optional body size limit.

    Returns:
        Parsed HTTPRequest object.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(io.BytesIO(data), client_address)
