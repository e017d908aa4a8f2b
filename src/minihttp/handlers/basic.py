"""
Handlers for the routes that need nothing but the request itself:

    GET /               → 200, no body
    GET /echo/{text}    → 200, text/plain "{text}", gzip if accepted
    GET /user-agent     → 200, text/plain User-Agent value

None of these look at the method; any method on these paths gets the
same answer.
"""

from ..http.request import HTTPRequest, HEADER_ENCODING, split_fields
from ..http.response import HTTPResponse, ResponseBuilder, ok


ECHO_PREFIX = "/echo/"


def root(request: HTTPRequest) -> HTTPResponse:
    """GET / - status line only."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the rest of the path back as text/plain.

    Only the first token after /echo/ (up to a space or tab) is echoed.
    Paths coming off the wire never contain spaces or tabs (the request
    line is split on them), so in practice this is the whole remainder:

        /echo/abc        → "abc"
        /echo/a/b/c      → "a/b/c"
        /echo/           → ""

    If the client's Accept-Encoding lists gzip, the response is marked
    Content-Encoding: gzip and compressed when serialized.
    """
    remainder = request.path[len(ECHO_PREFIX):]
    tokens = split_fields(remainder)
    text = tokens[0] if tokens else ""

    builder = (ResponseBuilder()
        .content_type("text/plain")
        .body(text.encode(HEADER_ENCODING)))

    if request.accepts_encoding("gzip"):
        builder.gzip()

    return builder.build()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the User-Agent header (empty body if the header is missing)."""
    return (ResponseBuilder()
        .content_type("text/plain")
        .body(request.user_agent.encode(HEADER_ENCODING))
        .build())
