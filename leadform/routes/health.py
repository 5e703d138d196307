# leadform/routes/health.py
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from leadform.core.config import Settings, get_settings
from leadform.core.logging import get_structlog_logger
from leadform.schemas.responses import HealthResponse

logger = get_structlog_logger()

router = APIRouter(tags=["health"])


def _utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Liveness plus a flag for whether the email provider key is present."""
    email_service = "Resend configured ✅" if settings.resend_api_key else "Not configured ❌"
    logger.debug("health.check", email_configured=bool(settings.resend_api_key))
    return HealthResponse(
        status="ok",
        message=f"{settings.service_name} is running",
        emailService=email_service,
        timestamp=_utc_now_iso(),
    )
