"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

The orchestrator: ties the socket server, the parser, the router and the
response writer together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │RequestParser │    │    Router    │        │
    │    │ (Networking) │    │  (Framing)   │    │ (Dispatching)│        │
    │    └──────┬───────┘    └──────────────┘    └──────┬───────┘        │
    │           ▼                                       ▼                 │
    │    ┌──────────────┐                        ┌──────────────┐        │
    │    │  Connection  │  one thread each       │   Handlers   │        │
    │    └──────────────┘                        └──────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts, wraps the socket in a Connection

    2. NEW THREAD
       └── threading.Thread(daemon=True) per connection, no pool

    3. PARSE REQUEST
       └── RequestParser reads the request line, headers, body
       └── On HTTPParseError: log, send NOTHING, close

    4. ROUTE DISPATCH
       └── Router picks the first matching route (404 otherwise)
       └── Handler crash: log traceback, answer 500

    5. SEND RESPONSE
       └── HTTPResponse.to_bytes() (gzip + Content-Length), sendall

    6. CLOSE
       └── Always. No keep-alive: one request, one response.

=============================================================================
INTERVIEW QUESTIONS ABOUT THIS SERVER
=============================================================================

Q: "Why a thread per connection instead of a pool?"
A: "Each connection does one blocking exchange and goes away. A thread
   is the simplest thing that keeps one slow client from stalling the
   others. The cost is unbounded thread count under load, so this is a
   server for trusted, moderate traffic."

Q: "Why is nothing sent back for a malformed request?"
A: "The server can't trust anything it read, not even the protocol
   version, so it hangs up. The client sees the connection close."

Q: "What state is shared between threads?"
A: "Only the configuration and the route table, both read-only after
   startup. No locks are needed."

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .config import ServerConfig
from .app import create_router
from .core import SocketServer, Connection, ConnectionState
from .http import (
    HTTPRequest, HTTPResponse, RequestParser, HTTPParseError,
    Router, internal_error,
)


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("minihttp.access")


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(directory="/srv/files/"))
        server.run()  # Blocks until Ctrl+C / SIGTERM / shutdown()

    Routes come from create_router(config.directory) unless a Router is
    passed in.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            router: Route table. Defaults to create_router(config.directory).

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = router or create_router(self.config.directory)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: If the address can't be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}, "
            f"serving files from {self.config.directory}"
        )
        for route in self._router.routes():
            logger.debug(f"Route {route.name}: {route.pattern}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connections finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = self.config.log_level_number

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer for each accepted connection."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.

        Runs on the connection's own thread.
        """
        with conn:
            start = time.perf_counter()

            try:
                request = self._parser.parse(conn, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                return

            conn.state = ConnectionState.PROCESSING
            response = self.handle(request)

            try:
                data = response.to_bytes()
            except Exception as e:
                # e.g. a header value outside latin-1
                logger.exception(f"Could not serialize response for {request.method} {request.path}: {e}")
                response = internal_error()
                data = response.to_bytes()

            if not conn.send_response(data):
                return

            self._log_access(conn, request, response, data, start)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a parsed request to its route.

        Never raises: a handler crash is logged and answered with 500.
        """
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()

    def _log_access(
        self,
        conn: Connection,
        request: HTTPRequest,
        response: HTTPResponse,
        data: bytes,
        start: float,
    ):
        duration_ms = (time.perf_counter() - start) * 1000
        content_length = len(data) - data.index(b"\r\n\r\n") - 4

        access_logger.info(
            f'{conn.client_ip} "{request.method} {request.path}" '
            f"{int(response.status)} {content_length} {duration_ms:.1f}ms"
        )


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the default route table.

    Example:
        app = create_app(ServerConfig(port=8080, directory="/srv/files/"))
        app.run()
    """
    return HTTPServer(config)
