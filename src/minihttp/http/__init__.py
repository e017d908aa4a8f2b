"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything that knows what HTTP looks like on the wire:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request.py       bytes → HTTPRequest          (RequestParser)     │
    │   response.py      HTTPResponse → bytes         (ResponseBuilder)   │
    │   router.py        HTTPRequest → handler        (Router)            │
    │   status_codes.py  200 → "OK"                   (HTTPStatus)        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HTTP MESSAGE FORMAT
=============================================================================

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Header: Value\r\n
    \r\n                              \r\n
    [body]                            [body]

- Lines end with CRLF (\r\n)
- Headers and body separated by an empty line
- Header names are case-insensitive
- Body length given by Content-Length, nothing else

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    ParseStage,
    Method,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    created,             # 201 Created
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .router import Router, Route, exact_path, path_prefix
from .status_codes import HTTPStatus, status_text

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "ParseStage",
    "Method",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "exact_path",
    "path_prefix",

    # Status codes
    "HTTPStatus",
    "status_text",
]
