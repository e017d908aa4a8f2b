"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, plus the reason phrases
that go on the status line.

=============================================================================
WHICH CODES WE ACTUALLY SEND
=============================================================================

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ Where it comes from                                       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ /, /echo/..., /user-agent, GET /files/...                 │
    │  201   │ POST /files/... after the body hit the disk               │
    │  404   │ unknown path, GET of a missing file                       │
    │  405   │ /files/... with a method other than GET or POST           │
    │  500   │ file could not be opened / written, handler crashed       │
    └────────┴───────────────────────────────────────────────────────────┘

Only these five are members. Any other code, say from a response built
by hand, renders as "Unknown" instead of blowing up the status line:

    HTTP/1.1 299 Unknown

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Standard success response
    CREATED = 201                   # File written (POST /files/...)

    NOT_FOUND = 404                 # Unknown route or missing file
    METHOD_NOT_ALLOWED = 405        # Wrong method for /files/...

    INTERNAL_SERVER_ERROR = 500     # Storage failure or handler crash

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",

    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def status_text(status: int) -> str:
    """
    Get the reason phrase for any integer status code.

    Unlike HTTPStatus(code), this never raises: codes outside the table
    come back as "Unknown".

    Args:
        status: Status code as int or HTTPStatus.

    Returns:
        Reason phrase, or "Unknown".

    Example:
        status_text(201)  # "Created"
        status_text(299)  # "Unknown"
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"
