"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from authhmac.signer import AuthHMAC


@pytest.fixture
def credentials() -> dict[str, str]:
    """Credential store mapping."""
    return {"my-key-id": "secret", "other-key-id": "other-secret"}


@pytest.fixture
def signer(credentials: dict[str, str]) -> AuthHMAC:
    """Signer with the default service id."""
    return AuthHMAC(credentials)


@pytest.fixture
def header_request() -> dict[str, Any]:
    """PUT /notify as a header-map request."""
    return {
        "method": "PUT",
        "path": "/notify",
        "request_headers": {
            "content-type": "text/plain",
            "content-md5": "blahblah",
            "date": "Thu, 10 Jul 2008 03:29:56 GMT",
        },
    }


@pytest.fixture
def environ_request() -> dict[str, Any]:
    """PUT /notify as a CGI-style environment map."""
    return {
        "REQUEST_METHOD": "PUT",
        "content-type": "text/plain",
        "content-md5": "blahblah",
        "date": "Thu, 10 Jul 2008 03:29:56 GMT",
        "PATH_INFO": "/notify",
    }
