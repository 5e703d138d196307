# leadform/middleware/request_id.py
from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from leadform.core.logging import set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id that shows up in logs and the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get("X-Correlation-ID")
            or uuid.uuid4().hex
        )
        request.state.request_id = request_id
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            set_request_id(None)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
