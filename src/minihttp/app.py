"""
Route table for the server.

    ┌──────┬──────────────────┬───────────────┐
    │  #   │ Match            │ Handler       │
    ├──────┼──────────────────┼───────────────┤
    │  1   │ == "/"           │ root          │
    │  2   │ starts "/echo/"  │ echo          │
    │  3   │ == "/user-agent" │ user_agent    │
    │  4   │ starts "/files/" │ FileHandler   │
    │  -   │ anything else    │ 404           │
    └──────┴──────────────────┴───────────────┘

First match wins, so the order above is the priority order.
"""

from typing import Optional

from .http.router import Router, exact_path, path_prefix
from .handlers import root, echo, user_agent, FileHandler
from .handlers.basic import ECHO_PREFIX
from .handlers.files import FILES_PREFIX
from .storage import FileStorage


def create_router(directory: str, storage: Optional[FileStorage] = None) -> Router:
    """
    Build the router with all routes registered in priority order.

    Args:
        directory: Serve directory for /files/.
        storage: Filesystem collaborator (defaults to FileStorage()).

    Returns:
        Router ready to handle requests.
    """
    router = Router()
    files = FileHandler(directory, storage)

    router.add_route("root", "/", exact_path("/"), root)
    router.add_route("echo", ECHO_PREFIX + "*", path_prefix(ECHO_PREFIX), echo)
    router.add_route("user_agent", "/user-agent", exact_path("/user-agent"), user_agent)
    router.add_route("files", FILES_PREFIX + "*", path_prefix(FILES_PREFIX), files.handle)

    return router
