# leadform/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from leadform.core.config import Settings, get_settings
from leadform.core.exceptions import INTERNAL_ERROR_BODY, BaseAPIException
from leadform.core.logging import configure_structlog, get_structlog_logger
from leadform.middleware.cors import OriginAllowListMiddleware
from leadform.middleware.logging import LoggingMiddleware
from leadform.middleware.request_id import RequestIdMiddleware
from leadform.routes import health_router, submissions_router
from leadform.schemas.responses import ServiceInfoResponse

logger = get_structlog_logger(__name__)


def _init_sentry(settings: Settings) -> None:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        integrations=[
            AsyncioIntegration(),
            FastApiIntegration(),
            StarletteIntegration(),
        ],
        traces_sample_rate=1.0 if settings.is_development else 0.1,
        send_default_pii=False,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    explicit_settings = settings is not None
    settings = settings or get_settings()
    configure_structlog(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application.started",
            service=settings.service_name,
            environment=settings.environment,
            port=settings.port,
            url=f"http://localhost:{settings.port}",
            email_service="Resend configured" if settings.resend_api_key else "NOT CONFIGURED",
            sheets_configured=bool(settings.google_sheets_id),
        )
        if not settings.resend_api_key:
            logger.warning(
                "application.email_key_missing",
                hint="RESEND_API_KEY not set; get one at https://resend.com/api-keys",
            )
        if settings.sentry_dsn:
            _init_sentry(settings)
            logger.info("sentry.initialized")
        yield
        logger.info("application.shutdown_complete")

    app = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        description="Contact-form lead capture: sales email notification plus spreadsheet log",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    # Last added runs first: CORS, then request id, then logging.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(OriginAllowListMiddleware, allowed_origins=settings.origins())

    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        logger.warning(
            "api.exception",
            status_code=exc.status_code,
            code=exc.code,
            error=exc.error,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(include_details=settings.is_development),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled.exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=dict(INTERNAL_ERROR_BODY),
        )

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(submissions_router, prefix="/api", tags=["leads"])

    @app.get("/", response_model=ServiceInfoResponse)
    async def root() -> ServiceInfoResponse:
        """Static service descriptor."""
        return ServiceInfoResponse(
            message=settings.service_name,
            version=settings.service_version,
            endpoints={
                "health": "/api/health",
                "sendEmail": "/api/send-email",
            },
        )

    if settings.metrics_enabled and not settings.is_testing:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    logger.info("application.configured", environment=settings.environment)
    return app


app = create_app()
