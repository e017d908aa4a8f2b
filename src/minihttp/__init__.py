"""
=============================================================================
MINIHTTP - Small HTTP/1.1 Server on Raw Sockets
=============================================================================

A thread-per-connection HTTP/1.1 server with a fixed set of routes:

    GET  /                 200, no body
    *    /echo/{text}      200, text/plain echo (gzip when accepted)
    *    /user-agent       200, text/plain User-Agent
    GET  /files/{name}     200 file content, 404 if missing
    POST /files/{name}     201 after writing the body
    anything else          404

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: one thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── app.py               # create_router(): the route table
    ├── storage.py           # FileStorage filesystem wrapper
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP listen/accept loop
    │   └── connection.py    # Connection wrapper
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Request model and streaming parser
    │   ├── response.py      # Response model, builder, serializer
    │   ├── router.py        # First-match-wins router
    │   └── status_codes.py  # HTTP status enum
    └── handlers/            # Request handlers
        ├── basic.py         # /, /echo/, /user-agent
        └── files.py         # /files/

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/srv/files/"))
    server.run()

Or from a shell:

    python -m minihttp --directory /srv/files/

=============================================================================
WHAT IT DOES NOT DO
=============================================================================

- Keep-alive: one request per connection, then close
- Chunked transfer encoding: bodies are framed by Content-Length only
- TLS, HTTP/2
- Path sanitization under /files/ (trusted clients only)

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig
from .app import create_router

__all__ = ["HTTPServer", "ServerConfig", "create_app", "create_router", "__version__"]
