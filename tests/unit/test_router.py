"""
Unit tests for the router and the default route table.
"""

import gzip

import pytest

from minihttp.app import create_router
from minihttp.http.router import Router, exact_path, path_prefix
from minihttp.http.request import HTTPRequest, Method, parse_request
from minihttp.http.response import HTTPResponse, ResponseBuilder, ok


def make_request(method: Method, path: str, **headers) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(
        method=method,
        path=path,
        headers={name.replace("_", "-").lower(): value for name, value in headers.items()},
    )


def tagged(tag: str):
    """Handler that answers with a fixed text body, to tell routes apart."""
    def handler(request: HTTPRequest) -> HTTPResponse:
        return ResponseBuilder().text(tag).build()
    return handler


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        router = Router()
        route = router.add_route("root", "/", exact_path("/"), tagged("root"))

        assert router.routes() == [route]
        assert route.name == "root"
        assert route.pattern == "/"

    def test_exact_match(self):
        router = Router()
        router.add_route("root", "/", exact_path("/"), tagged("root"))

        assert router.match(make_request(Method.GET, "/")).name == "root"
        assert router.match(make_request(Method.GET, "/x")) is None

    def test_prefix_match(self):
        router = Router()
        router.add_route("echo", "/echo/*", path_prefix("/echo/"), tagged("echo"))

        assert router.match(make_request(Method.GET, "/echo/")) is not None
        assert router.match(make_request(Method.GET, "/echo/a/b")) is not None
        assert router.match(make_request(Method.GET, "/echo")) is None

    def test_first_match_wins(self):
        router = Router()
        router.add_route("first", "/a/*", path_prefix("/a/"), tagged("first"))
        router.add_route("second", "/a/b", exact_path("/a/b"), tagged("second"))

        response = router.handle(make_request(Method.GET, "/a/b"))
        assert response.body == b"first"

    def test_no_match_is_404(self):
        router = Router()
        response = router.handle(make_request(Method.GET, "/nothing"))

        assert response.status == 404
        assert response.body is None

    def test_custom_fallback(self):
        router = Router(fallback=tagged("fallback"))
        assert router.handle(make_request(Method.GET, "/nothing")).body == b"fallback"

    def test_decorators(self):
        router = Router()

        @router.exact("/")
        def index(request):
            return ok()

        @router.prefix("/echo/")
        def echo(request):
            return ResponseBuilder().text(request.path).build()

        assert [r.name for r in router.routes()] == ["index", "echo"]
        assert [r.pattern for r in router.routes()] == ["/", "/echo/*"]
        assert router.handle(make_request(Method.GET, "/echo/z")).body == b"/echo/z"

    def test_routes_returns_copy(self):
        router = Router()
        router.routes().append("junk")
        assert router.routes() == []


class TestDefaultRoutes:
    """Tests for the route table built by create_router()."""

    @pytest.fixture
    def router(self, serve_dir: str) -> Router:
        return create_router(serve_dir)

    def test_route_order(self, router: Router):
        assert [r.name for r in router.routes()] == ["root", "echo", "user_agent", "files"]

    def test_root(self, router: Router):
        response = router.handle(make_request(Method.GET, "/"))

        assert response.status == 200
        assert response.body is None
        assert response.headers == {}
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_echo(self, router: Router):
        response = router.handle(make_request(Method.GET, "/echo/abc"))

        assert response.status == 200
        assert response.headers == {"Content-Type": "text/plain"}
        assert response.body == b"abc"

    def test_echo_empty(self, router: Router):
        assert router.handle(make_request(Method.GET, "/echo/")).body == b""

    def test_echo_keeps_slashes(self, router: Router):
        assert router.handle(make_request(Method.GET, "/echo/a/b")).body == b"a/b"

    def test_echo_utf8_from_wire(self, router: Router):
        request = parse_request("GET /echo/\u00e0 HTTP/1.1\r\n\r\n".encode("utf-8"))
        response = router.handle(request)

        assert response.body == b"\xc3\xa0"
        assert response.to_bytes().endswith(b"Content-Length: 2\r\n\r\n\xc3\xa0")

    def test_echo_gzip(self, router: Router):
        request = make_request(Method.GET, "/echo/abc", accept_encoding="deflate, gzip")
        response = router.handle(request)

        assert response.headers["Content-Encoding"] == "gzip"
        body = response.to_bytes().partition(b"\r\n\r\n")[2]
        assert gzip.decompress(body) == b"abc"

    def test_echo_unsupported_encoding(self, router: Router):
        request = make_request(Method.GET, "/echo/abc", accept_encoding="br")
        response = router.handle(request)

        assert "Content-Encoding" not in response.headers

    def test_user_agent(self, router: Router):
        request = make_request(Method.GET, "/user-agent", user_agent="curl/8.4.0")
        response = router.handle(request)

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"curl/8.4.0"

    def test_user_agent_missing(self, router: Router):
        response = router.handle(make_request(Method.GET, "/user-agent"))

        assert response.status == 200
        assert response.body == b""

    def test_user_agent_utf8_from_wire(self, router: Router):
        raw = b"GET /user-agent HTTP/1.1\r\nUser-Agent: " + "voil\u00e0".encode("utf-8") + b"\r\n\r\n"
        response = router.handle(parse_request(raw))

        assert response.body == "voil\u00e0".encode("utf-8")

    def test_user_agent_is_exact(self, router: Router):
        assert router.handle(make_request(Method.GET, "/user-agent/x")).status == 404

    def test_unknown_path(self, router: Router):
        assert router.handle(make_request(Method.GET, "/does/not/exist")).status == 404

    def test_root_is_exact(self, router: Router):
        assert router.handle(make_request(Method.GET, "/index.html")).status == 404
