"""
Request views.

A request view is the small, fixed interface the canonical string builder
reads through: method, header lookup/assignment and path. One adapter
exists per supported request shape; ``request_view`` tries them in order
and the first adapter that accepts the request wins. Representations are
never merged.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping, Sequence
from email.message import Message
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlsplit

from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import Request

from authhmac.errors import UnsupportedRequestShape


@runtime_checkable
class RequestView(Protocol):
    """Read/write access to the parts of a request that get signed."""

    def method(self) -> str: ...

    def header_value(self, candidates: Sequence[str]) -> str | None: ...

    def set_header(self, key: str, value: str) -> None: ...

    def path(self) -> str: ...

    def raw_unparsed_uri(self) -> str | None: ...


def find_header(headers: Any, candidates: Sequence[str]) -> str | None:
    """Return the first candidate key present in ``headers``."""
    for key in candidates:
        try:
            value = headers[key]
        except (KeyError, IndexError):
            continue
        if value is not None:
            return str(value)
    return None


def _assign_header(headers: Any, key: str, value: str) -> None:
    if isinstance(headers, Message):
        # Message.__setitem__ appends instead of replacing
        del headers[key]
    headers[key] = value


def _url_path(url: Any) -> str | None:
    """Path of a URL as sent on the wire, percent-encoding preserved."""
    if url is None:
        return None
    # httpx.URL.raw_path is bytes with the query, yarl.URL.raw_path is str
    raw_path = getattr(url, "raw_path", None)
    if isinstance(raw_path, bytes):
        raw_path = raw_path.decode("ascii")
    if isinstance(raw_path, str):
        return raw_path.split("?", 1)[0]
    path = getattr(url, "path", None)
    if isinstance(path, str):
        return path
    if isinstance(url, str):
        return urlsplit(url).path
    return None


class _HeaderView:
    """Shared header handling for adapters holding a header container."""

    def __init__(self, request: Any, headers: Any) -> None:
        self._request = request
        self._headers = headers

    def header_value(self, candidates: Sequence[str]) -> str | None:
        return find_header(self._headers, candidates)

    def set_header(self, key: str, value: str) -> None:
        _assign_header(self._headers, key, value)

    def raw_unparsed_uri(self) -> str | None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._request!r})"


class StarletteRequestView:
    """View over a Starlette (ASGI) request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    @classmethod
    def match(cls, request: Any) -> StarletteRequestView | None:
        if isinstance(request, Request):
            return cls(request)
        return None

    def method(self) -> str:
        return self._request.method

    def header_value(self, candidates: Sequence[str]) -> str | None:
        # Read from the scope so writes made through set_header are visible
        return find_header(Headers(scope=self._request.scope), candidates)

    def set_header(self, key: str, value: str) -> None:
        MutableHeaders(scope=self._request.scope)[key] = value

    def path(self) -> str:
        return self._request.url.path

    def raw_unparsed_uri(self) -> str | None:
        raw_path = self._request.scope.get("raw_path")
        if raw_path is None:
            return None
        return raw_path.decode("latin-1")

    def __repr__(self) -> str:
        return f"StarletteRequestView({self.method()} {self.path()})"


class HandlerRequestView(_HeaderView):
    """
    View over server-side request objects exposing the literal request line.

    Covers ``http.server.BaseHTTPRequestHandler`` (``command`` plus the raw
    request target in ``path``) and objects with ``request_method`` and
    ``unparsed_uri`` accessors.
    """

    @classmethod
    def match(cls, request: Any) -> HandlerRequestView | None:
        method = getattr(request, "request_method", None)
        if not isinstance(method, str):
            method = getattr(request, "command", None)
        if not isinstance(method, str):
            return None
        headers = getattr(request, "headers", None)
        if headers is None:
            return None
        return cls(request, headers)

    def method(self) -> str:
        method = getattr(self._request, "request_method", None)
        if isinstance(method, str):
            return method
        return self._request.command

    def raw_unparsed_uri(self) -> str | None:
        uri = getattr(self._request, "unparsed_uri", None)
        if isinstance(uri, str):
            return uri
        if isinstance(getattr(self._request, "command", None), str):
            path = getattr(self._request, "path", None)
            if isinstance(path, str):
                return path
        return None

    def path(self) -> str:
        path = getattr(self._request, "path", None)
        if not isinstance(path, str):
            raise UnsupportedRequestShape(self._request, "request path")
        return path


class MappingRequestView(_HeaderView):
    """
    View over a plain mapping with a ``method`` key.

    Headers live under ``request_headers`` when present, otherwise in the
    mapping itself. The path comes from ``url``, then ``PATH_INFO``, then
    ``path``.
    """

    @classmethod
    def match(cls, request: Any) -> MappingRequestView | None:
        if not isinstance(request, Mapping) or "method" not in request:
            return None
        headers = request.get("request_headers")
        if not isinstance(headers, Mapping):
            headers = request
        return cls(request, headers)

    def method(self) -> str:
        method = self._request["method"]
        if method is None:
            raise UnsupportedRequestShape(self._request, "request method")
        return str(method)

    def path(self) -> str:
        path = _url_path(self._request.get("url"))
        if path is None:
            path = self._request.get("PATH_INFO")
        if path is None:
            path = self._request.get("path")
        if not isinstance(path, str):
            raise UnsupportedRequestShape(self._request, "request path")
        return path


def _environ_key(key: str) -> str:
    name = key.upper().replace("-", "_")
    if name in ("CONTENT_TYPE", "CONTENT_LENGTH") or name.startswith("HTTP_"):
        return name
    return f"HTTP_{name}"


class EnvironRequestView(_HeaderView):
    """
    View over a WSGI/CGI environ.

    Header writes are stored under their CGI names (``Date`` becomes
    ``HTTP_DATE``) so WSGI header accessors see them.
    """

    def __init__(self, request: Any, environ: MutableMapping[str, Any]) -> None:
        super().__init__(request, environ)

    @classmethod
    def match(cls, request: Any) -> EnvironRequestView | None:
        if isinstance(request, Mapping) and isinstance(request.get("REQUEST_METHOD"), str):
            return cls(request, request)  # type: ignore[arg-type]
        return None

    @classmethod
    def match_wrapped(cls, request: Any) -> EnvironRequestView | None:
        """Accept framework request objects carrying an ``environ``/``env``."""
        if isinstance(request, Mapping):
            return None
        for attr in ("environ", "env"):
            environ = getattr(request, attr, None)
            if isinstance(environ, Mapping) and isinstance(environ.get("REQUEST_METHOD"), str):
                return cls(request, environ)  # type: ignore[arg-type]
        return None

    def method(self) -> str:
        return self._headers["REQUEST_METHOD"]

    def set_header(self, key: str, value: str) -> None:
        self._headers[_environ_key(key)] = value

    def raw_unparsed_uri(self) -> str | None:
        for key in ("RAW_URI", "REQUEST_URI"):
            value = self._headers.get(key)
            if isinstance(value, str):
                return value
        return None

    def path(self) -> str:
        path = self._headers.get("PATH_INFO")
        if not isinstance(path, str):
            raise UnsupportedRequestShape(self._request, "request path")
        return path


class ClientRequestView(_HeaderView):
    """
    View over outgoing HTTP client requests.

    Anything with a string ``method``, a ``headers`` container and a ``url``
    or ``path``: ``requests.PreparedRequest``, ``httpx.Request``,
    ``aiohttp.ClientRequest`` and similar.
    """

    @classmethod
    def match(cls, request: Any) -> ClientRequestView | None:
        if not isinstance(getattr(request, "method", None), str):
            return None
        headers = getattr(request, "headers", None)
        if headers is None:
            return None
        return cls(request, headers)

    def method(self) -> str:
        return self._request.method

    def path(self) -> str:
        path = _url_path(getattr(self._request, "url", None))
        if path is None:
            path = getattr(self._request, "path", None)
        if not isinstance(path, str):
            raise UnsupportedRequestShape(self._request, "request path")
        return path


ViewFactory = Callable[[Any], RequestView | None]

# Resolution order; the first factory returning a view wins.
VIEW_FACTORIES: tuple[ViewFactory, ...] = (
    StarletteRequestView.match,
    HandlerRequestView.match,
    MappingRequestView.match,
    EnvironRequestView.match_wrapped,
    EnvironRequestView.match,
    ClientRequestView.match,
)


def request_view(request: Any) -> RequestView:
    """
    Adapt ``request`` to a RequestView.

    Raises:
        UnsupportedRequestShape: If no adapter accepts the request
    """
    if isinstance(request, RequestView):
        return request
    for factory in VIEW_FACTORIES:
        view = factory(request)
        if view is not None:
            return view
    raise UnsupportedRequestShape(request)
