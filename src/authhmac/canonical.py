"""
Canonical string construction.

A canonical string has the following format::

    CanonicalString = HTTP-Verb    + "\\n" +
                      Content-Type + "\\n" +
                      Content-MD5  + "\\n" +
                      Date         + "\\n" +
                      request-uri

If the request carries no Date header, one is generated and written back
into the request's headers. HTTP clients add a Date header when none is
set and servers authenticate against the value they receive, so the signed
value must be the one that gets sent.
"""

from __future__ import annotations

from email.utils import formatdate
from typing import Any

from authhmac.errors import UnsupportedRequestShape
from authhmac.logging import get_logger
from authhmac.views import RequestView, request_view

logger = get_logger(__name__)

CONTENT_TYPE_KEYS = ("Content-Type", "CONTENT-TYPE", "CONTENT_TYPE", "HTTP_CONTENT_TYPE", "content-type")
CONTENT_MD5_KEYS = ("Content-MD5", "CONTENT-MD5", "CONTENT_MD5", "HTTP_CONTENT_MD5", "content-md5")
DATE_KEYS = ("Date", "DATE", "HTTP_DATE", "date")


def http_date(timestamp: float | None = None) -> str:
    """Format a timestamp (default: now) as an RFC 7231 HTTP date in GMT."""
    return formatdate(timestamp, usegmt=True)


def strip_query(path: str) -> str:
    """Drop everything from the first ``?`` onward."""
    return path.split("?", 1)[0]


def request_method(view: RequestView) -> str:
    method = view.method()
    if not method:
        raise UnsupportedRequestShape(view, "request method")
    return method


def header_values(view: RequestView) -> str:
    """Content-Type, Content-MD5 and Date joined by newlines, defaulting Date."""
    date = view.header_value(DATE_KEYS)
    if date is None:
        date = http_date()
        view.set_header("Date", date)
        logger.debug("Defaulted missing Date header", date=date)
    return "\n".join(
        [
            view.header_value(CONTENT_TYPE_KEYS) or "",
            view.header_value(CONTENT_MD5_KEYS) or "",
            date,
        ]
    )


def request_path(view: RequestView) -> str:
    path = view.raw_unparsed_uri()
    if path is None:
        path = view.path()
    path = strip_query(path)
    if not path:
        raise UnsupportedRequestShape(view, "request path")
    return path


def canonical_string(request: Any) -> str:
    """
    Build the canonical string for a request.

    Args:
        request: Any request shape accepted by ``request_view``

    Returns:
        Method, Content-Type, Content-MD5, Date and path joined by newlines

    Raises:
        UnsupportedRequestShape: If method, headers or path cannot be resolved
    """
    view = request_view(request)
    return "\n".join([request_method(view), header_values(view), request_path(view)])
