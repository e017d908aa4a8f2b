"""
=============================================================================
URL ROUTER
=============================================================================

Ordered, first-match-wins dispatch from a parsed request to a handler.

=============================================================================
ROUTING ARCHITECTURE
=============================================================================

A route is a (predicate, handler) pair. The router walks its routes in
registration order and hands the request to the first handler whose
predicate says yes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /echo/abc                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER                                                      │   │
    │   │                                                              │   │
    │   │  1. path == "/"             → root         ✗                 │   │
    │   │  2. path starts "/echo/"    → echo         ✓ ← MATCH, stop   │   │
    │   │  3. path == "/user-agent"   → user_agent   (not tried)       │   │
    │   │  4. path starts "/files/"   → files        (not tried)       │   │
    │   │                                                              │   │
    │   │  nothing matched            → 404 Not Found                  │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Order is the whole priority scheme. A prefix route registered early will
shadow any later route that shares the prefix.

Routing never raises: every route ends in a response, and "no route" is
itself a response (404).

=============================================================================
INTERVIEW QUESTIONS
=============================================================================

Q: "Why predicates instead of path patterns?"
A: "The routes here are either exact paths or prefixes, and method checks
   belong to the handler (GET vs POST on /files/ share one route and a 405
   for the rest). A predicate covers both shapes without a pattern language."

Q: "What's the complexity of matching?"
A: "O(R) predicate calls for R routes. With five routes that is nothing."

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIASES
# =============================================================================

# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]

# Predicate: decides whether a route wants this request
Predicate = Callable[[HTTPRequest], bool]


def exact_path(path: str) -> Predicate:
    """Predicate matching one path exactly."""
    def matches(request: HTTPRequest) -> bool:
        return request.path == path
    return matches


def path_prefix(prefix: str) -> Predicate:
    """Predicate matching every path that starts with prefix."""
    def matches(request: HTTPRequest) -> bool:
        return request.routes_to(prefix)
    return matches


@dataclass(frozen=True)
class Route:
    """
    A registered route.

        Route(
            name="echo",                  # For logs and debugging
            pattern="/echo/*",            # Human-readable description
            matches=path_prefix("/echo/"),
            handler=echo,
        )
    """

    name: str
    pattern: str
    matches: Predicate
    handler: Handler


class Router:
    """
    First-match-wins request router.

    ==========================================================================
    DECORATOR-BASED API
    ==========================================================================

        router = Router()

        @router.exact("/")
        def root(request):
            return ok()

        @router.prefix("/echo/")
        def echo(request):
            ...

    Routes can also be registered directly:

        router.add_route("files", "/files/*", path_prefix("/files/"), handler)

    ==========================================================================
    """

    def __init__(self, fallback: Optional[Handler] = None):
        """
        Initialize the router.

        Args:
            fallback: Handler for requests no route accepts.
                      Defaults to a bodiless 404.
        """
        self._routes: List[Route] = []
        self._fallback = fallback or (lambda request: not_found())

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        name: str,
        pattern: str,
        matches: Predicate,
        handler: Handler
    ) -> Route:
        """
        Append a route. Routes are tried in the order they were added.

        Args:
            name: Route name for logging.
            pattern: Human-readable description ("/", "/files/*").
            matches: Predicate deciding if the route takes the request.
            handler: Handler producing the response.

        Returns:
            The registered Route.
        """
        route = Route(name=name, pattern=pattern, matches=matches, handler=handler)
        self._routes.append(route)
        return route

    def exact(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator registering a handler for one exact path."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(name or handler.__name__, path, exact_path(path), handler)
            return handler
        return decorator

    def prefix(self, prefix: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator registering a handler for every path under prefix."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(name or handler.__name__, prefix + "*", path_prefix(prefix), handler)
            return handler
        return decorator

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, request: HTTPRequest) -> Optional[Route]:
        """
        Find the first route that accepts the request.

        Returns:
            The matching Route, or None.
        """
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request and return the handler's response.

        Falls back to 404 Not Found when nothing matches.
        """
        route = self.match(request)
        if route is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return self._fallback(request)

        logger.debug(f"{request.method} {request.path} -> {route.name}")
        return route.handler(request)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in matching order."""
        return list(self._routes)
