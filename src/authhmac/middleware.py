"""Starlette middleware verifying HMAC-signed requests."""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from authhmac.errors import ErrorCode, UnsupportedRequestShape, error_response
from authhmac.logging import get_logger
from authhmac.settings import Settings
from authhmac.signer import AuthHMAC

logger = get_logger(__name__)


class HmacAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Authorization header does not verify."""

    def __init__(
        self,
        app: ASGIApp,
        signer: AuthHMAC,
        exempt_paths: Iterable[str] = ("/health",),
    ) -> None:
        super().__init__(app)
        self._signer = signer
        self._exempt_paths = set(exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        try:
            authenticated = self._signer.authenticated(request)
        except UnsupportedRequestShape as exc:
            logger.warning("Cannot canonicalize request", error=str(exc))
            return error_response(
                ErrorCode.UNSUPPORTED_REQUEST,
                "Unsupported request",
                400,
                details={"missing": exc.what},
            )

        if not authenticated:
            logger.info(
                "Rejected unauthenticated request",
                method=request.method,
                path=request.url.path,
            )
            return error_response(ErrorCode.UNAUTHORIZED, "Invalid HMAC signature", 401)

        access_key_id = self._signer.access_key_id(request)
        request.state.access_key_id = access_key_id
        structlog.contextvars.bind_contextvars(access_key_id=access_key_id)
        return await call_next(request)


def create_hmac_middleware(settings: Settings) -> type[HmacAuthMiddleware]:
    """
    Build a middleware class configured from settings.

    Args:
        settings: Settings providing credentials, service id and exempt paths

    Returns:
        Middleware class taking only the ASGI app
    """
    signer = AuthHMAC.from_settings(settings)
    exempt_paths = settings.exempt_paths

    class ConfiguredHmacAuthMiddleware(HmacAuthMiddleware):
        def __init__(self, app: ASGIApp) -> None:
            super().__init__(app, signer=signer, exempt_paths=exempt_paths)

    return ConfiguredHmacAuthMiddleware
