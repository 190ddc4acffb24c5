"""Error types and HTTP error helpers."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse


class AuthHMACError(Exception):
    """Base class for authhmac errors."""


class UnsupportedRequestShape(AuthHMACError, TypeError):
    """The method, headers or path of a request could not be resolved."""

    def __init__(self, request: Any, what: str = "request view") -> None:
        super().__init__(f"Don't know how to get the {what} from {request!r}")
        self.request = request
        self.what = what


class UnknownCredential(AuthHMACError, KeyError):
    """No secret is registered for an access key id."""

    def __init__(self, access_key_id: str) -> None:
        super().__init__(access_key_id)
        self.access_key_id = access_key_id

    def __str__(self) -> str:
        return f"No secret found for key id '{self.access_key_id}'"


class ErrorCode:
    UNAUTHORIZED = "unauthorized"
    UNSUPPORTED_REQUEST = "unsupported_request"


def error_response(
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        payload["error"]["details"] = details
    return JSONResponse(payload, status_code=status_code)
