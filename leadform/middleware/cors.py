# leadform/middleware/cors.py
from __future__ import annotations

from typing import Iterable

import sentry_sdk
from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from leadform.core.exceptions import INTERNAL_ERROR_BODY
from leadform.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)

ALLOW_HEADERS = "Content-Type"
ALLOW_METHODS = "GET, POST, OPTIONS"


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """
    Echo the request Origin back only when it exactly matches the allow-list.

    Disallowed origins are not rejected; the response simply lacks
    Access-Control-Allow-Origin. Preflight OPTIONS requests are answered
    here with an empty 200 and never reach a route. Unhandled errors are
    rendered here too, so browsers can read the 500 body.
    """

    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as e:
                response = self._internal_error(request, e)

        origin = request.headers.get("origin")
        if origin and origin in self.allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        return response

    def _internal_error(self, request: Request, exc: Exception) -> Response:
        sentry_sdk.capture_exception(exc)
        logger.error(
            "unhandled.exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=request.url.path,
            method=request.method,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=dict(INTERNAL_ERROR_BODY),
        )
