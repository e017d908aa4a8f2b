"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler is a plain callable:

    def handler(request: HTTPRequest) -> HTTPResponse

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   basic.py                                                          │
    │   ├── root          GET /                                           │
    │   ├── echo          GET /echo/{text}                                │
    │   └── user_agent    GET /user-agent                                 │
    │                                                                      │
    │   files.py                                                          │
    │   └── FileHandler   GET|POST /files/{name}                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

FileHandler is a class because it carries configuration (the serve
directory and the storage backend); the others need nothing but the
request, so they are functions.

=============================================================================
"""

from .basic import root, echo, user_agent
from .files import FileHandler

__all__ = [
    "root",
    "echo",
    "user_agent",
    "FileHandler",
]
