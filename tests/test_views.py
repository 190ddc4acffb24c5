"""Tests for request view adapters."""

from email.message import Message
from types import SimpleNamespace
from urllib.parse import urlparse

import pytest
from starlette.requests import Request

from authhmac.errors import UnsupportedRequestShape
from authhmac.views import (
    ClientRequestView,
    EnvironRequestView,
    HandlerRequestView,
    MappingRequestView,
    StarletteRequestView,
    find_header,
    request_view,
)


def _starlette_request(**overrides):
    scope = {
        "type": "http",
        "method": "PUT",
        "path": "/notify",
        "raw_path": b"/notify",
        "query_string": b"x=1",
        "headers": [(b"content-type", b"text/plain")],
    }
    scope.update(overrides)
    return Request(scope)


class TestAdapterSelection:
    """Tests for adapter resolution order."""

    def test_starlette_request(self):
        assert isinstance(request_view(_starlette_request()), StarletteRequestView)

    def test_handler(self):
        handler = SimpleNamespace(command="GET", path="/x", headers=Message())
        assert isinstance(request_view(handler), HandlerRequestView)

    def test_mapping_with_method(self):
        assert isinstance(request_view({"method": "GET"}), MappingRequestView)

    def test_mapping_method_preferred_over_environ(self):
        view = request_view({"method": "GET", "REQUEST_METHOD": "POST"})
        assert isinstance(view, MappingRequestView)
        assert view.method() == "GET"

    def test_environ_mapping(self):
        assert isinstance(request_view({"REQUEST_METHOD": "GET"}), EnvironRequestView)

    def test_wrapped_environ(self):
        request = SimpleNamespace(environ={"REQUEST_METHOD": "DELETE", "PATH_INFO": "/a"})
        view = request_view(request)
        assert isinstance(view, EnvironRequestView)
        assert view.method() == "DELETE"

    def test_client_request(self):
        request = SimpleNamespace(method="POST", url="https://example.com/a", headers={})
        assert isinstance(request_view(request), ClientRequestView)

    def test_view_passes_through(self):
        view = MappingRequestView.match({"method": "GET"})
        assert request_view(view) is view

    @pytest.mark.parametrize("request_obj", [object(), {"PATH_INFO": "/"}, "GET /", 42])
    def test_unsupported(self, request_obj):
        with pytest.raises(UnsupportedRequestShape):
            request_view(request_obj)


class TestMappingRequestView:
    """Tests for plain mapping requests."""

    def test_headers_under_request_headers(self):
        view = request_view({"method": "GET", "request_headers": {"Date": "d"}})
        assert view.header_value(("Date",)) == "d"

    def test_mapping_is_its_own_header_map(self):
        request = {"method": "GET", "Date": "d"}
        view = request_view(request)
        view.set_header("Authorization", "x")
        assert view.header_value(("Date",)) == "d"
        assert request["Authorization"] == "x"

    def test_method_coerced_to_string(self):
        class Verb:
            def __str__(self):
                return "PATCH"

        assert request_view({"method": Verb()}).method() == "PATCH"

    def test_url_preferred_over_path_info(self):
        view = request_view({"method": "GET", "url": "http://h/from-url?q=1", "PATH_INFO": "/info"})
        assert view.path() == "/from-url"

    def test_parsed_url(self):
        view = request_view({"method": "GET", "url": urlparse("http://h/parsed")})
        assert view.path() == "/parsed"

    def test_path_info_then_path(self):
        assert request_view({"method": "GET", "PATH_INFO": "/info", "path": "/p"}).path() == "/info"
        assert request_view({"method": "GET", "path": "/p"}).path() == "/p"


class TestEnvironRequestView:
    """Tests for WSGI/CGI environ requests."""

    def test_raw_uri_preferred(self):
        view = request_view({"REQUEST_METHOD": "GET", "RAW_URI": "/raw?x=1", "PATH_INFO": "/info"})
        assert view.raw_unparsed_uri() == "/raw?x=1"
        assert view.path() == "/info"

    def test_request_uri(self):
        view = request_view({"REQUEST_METHOD": "GET", "REQUEST_URI": "/req"})
        assert view.raw_unparsed_uri() == "/req"

    def test_set_header_uses_cgi_names(self):
        environ = {"REQUEST_METHOD": "GET"}
        view = request_view(environ)
        view.set_header("Date", "d")
        view.set_header("Content-Type", "text/plain")
        view.set_header("Authorization", "a")
        assert environ["HTTP_DATE"] == "d"
        assert environ["CONTENT_TYPE"] == "text/plain"
        assert environ["HTTP_AUTHORIZATION"] == "a"

    def test_missing_path(self):
        with pytest.raises(UnsupportedRequestShape):
            request_view({"REQUEST_METHOD": "GET"}).path()


class TestHandlerRequestView:
    """Tests for http.server style handlers."""

    def test_raw_request_target(self):
        handler = SimpleNamespace(command="GET", path="/raw?x=1", headers=Message())
        assert request_view(handler).raw_unparsed_uri() == "/raw?x=1"

    def test_unparsed_uri_accessor(self):
        request = SimpleNamespace(
            request_method="POST",
            unparsed_uri="/unparsed?q",
            path="/parsed",
            headers={},
        )
        view = request_view(request)
        assert view.method() == "POST"
        assert view.raw_unparsed_uri() == "/unparsed?q"

    def test_message_headers_case_insensitive(self):
        headers = Message()
        headers["content-type"] = "text/plain"
        view = request_view(SimpleNamespace(command="GET", path="/", headers=headers))
        assert view.header_value(("Content-Type",)) == "text/plain"

    def test_set_header_replaces(self):
        headers = Message()
        headers["Date"] = "old"
        view = request_view(SimpleNamespace(command="GET", path="/", headers=headers))
        view.set_header("Date", "new")
        assert headers.get_all("Date") == ["new"]


class TestStarletteRequestView:
    """Tests for Starlette requests."""

    def test_method_and_headers(self):
        view = request_view(_starlette_request())
        assert view.method() == "PUT"
        assert view.header_value(("Content-Type",)) == "text/plain"

    def test_raw_path(self):
        view = request_view(_starlette_request())
        assert view.raw_unparsed_uri() == "/notify"
        assert view.path() == "/notify"

    def test_missing_raw_path(self):
        request = _starlette_request()
        del request.scope["raw_path"]
        assert request_view(request).raw_unparsed_uri() is None

    def test_set_header_updates_scope(self):
        request = _starlette_request()
        request_view(request).set_header("Date", "d")
        assert Request(request.scope).headers["date"] == "d"
        assert request_view(request).header_value(("Date",)) == "d"


class TestClientRequestView:
    """Tests for outgoing client requests."""

    def test_url_path(self):
        request = SimpleNamespace(method="GET", url="https://example.com/a/b?c=d", headers={})
        assert request_view(request).path() == "/a/b"

    def test_url_object(self):
        url = SimpleNamespace(path="/from-object")
        request = SimpleNamespace(method="GET", url=url, headers={})
        assert request_view(request).path() == "/from-object"

    def test_encoded_raw_path_preferred(self):
        url = SimpleNamespace(raw_path=b"/files/a%20b?x=1", path="/files/a b")
        request = SimpleNamespace(method="GET", url=url, headers={})
        assert request_view(request).path() == "/files/a%20b"

    def test_string_raw_path(self):
        url = SimpleNamespace(raw_path="/files/a%20b", path="/files/a b")
        request = SimpleNamespace(method="GET", url=url, headers={})
        assert request_view(request).path() == "/files/a%20b"

    def test_string_url_keeps_encoding(self):
        request = SimpleNamespace(method="GET", url="https://example.com/files/a%20b", headers={})
        assert request_view(request).path() == "/files/a%20b"

    def test_path_attribute(self):
        request = SimpleNamespace(method="GET", path="/p", headers={})
        assert request_view(request).path() == "/p"

    def test_set_header(self):
        request = SimpleNamespace(method="GET", url="/", headers={})
        request_view(request).set_header("Authorization", "x")
        assert request.headers == {"Authorization": "x"}


def test_find_header_skips_none():
    assert find_header({"A": None, "b": "2"}, ("A", "b")) == "2"


def test_find_header_missing():
    assert find_header({}, ("A", "B")) is None
