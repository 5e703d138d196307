from __future__ import annotations

import json
import re
from typing import Any, Dict

import pydantic
from fastapi import Request

from leadform.core.config import Settings
from leadform.core.exceptions import EmailError, EmailNotConfigured, ValidationError
from leadform.core.logging import get_structlog_logger
from leadform.schemas.lead import LeadSubmission
from leadform.schemas.responses import SubmissionResponse
from leadform.services.email import EmailNotifier
from leadform.services.sheets import SheetAppender
from leadform.utils.identifiers import generate_lead_id

logger = get_structlog_logger(__name__)

SUCCESS_MESSAGE = "Email sent successfully! We will contact you soon."

_BRACKETED_KEY = re.compile(r"^(\w+)\[(\w+)\]$")


def _nest_form_fields(items) -> Dict[str, Any]:
    """Fold ``utm[utm_source]=x`` style form keys into nested dicts."""
    data: Dict[str, Any] = {}
    for key, value in items:
        match = _BRACKETED_KEY.match(key)
        if match:
            parent, child = match.groups()
            nested = data.get(parent)
            if not isinstance(nested, dict):
                nested = {}
                data[parent] = nested
            nested[child] = value
        else:
            data[key] = value
    return data


async def read_submission(request: Request) -> LeadSubmission:
    """Parse a JSON or URL-encoded body into a LeadSubmission."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        data: Any = _nest_form_fields(form.multi_items())
    else:
        raw = await request.body()
        if not raw.strip():
            data = {}
        else:
            try:
                data = json.loads(raw)
            except ValueError as e:
                logger.warning("submission.invalid_body", error=str(e))
                raise ValidationError("Invalid request body") from e

    if not isinstance(data, dict):
        logger.warning("submission.invalid_body", body_type=type(data).__name__)
        raise ValidationError("Invalid request body")

    try:
        return LeadSubmission.model_validate(data)
    except pydantic.ValidationError as e:
        logger.warning("submission.invalid_body", errors=e.error_count())
        raise ValidationError("Invalid request body") from e


def validate_submission(lead: LeadSubmission) -> None:
    if not lead.name.strip() or not lead.email.strip():
        logger.warning(
            "submission.validation_failed",
            name_present=bool(lead.name.strip()),
            email_present=bool(lead.email.strip()),
        )
        raise ValidationError("Name and email are required")


async def handle_submission(
    lead: LeadSubmission,
    *,
    settings: Settings,
    notifier: EmailNotifier,
    appender: SheetAppender,
) -> SubmissionResponse:
    """
    Validate, notify sales, then record the lead in the spreadsheet.

    Email failures propagate as EmailError/ConfigurationError and end the
    request. The spreadsheet outcome is only reported back in the response.
    """
    logger.info("submission.received", **lead.log_context())

    validate_submission(lead)

    if not settings.email_configured:
        logger.error("email.not_configured", hint="Set RESEND_API_KEY")
        raise EmailNotConfigured()

    logger.info("submission.validated")

    try:
        sent = await notifier.send(lead)
    except EmailError as e:
        logger.error("submission.email_failed", code=e.code, error=e.error)
        raise

    sheet_result = await appender.append(lead)
    if sheet_result.success:
        logger.info("submission.sheet_recorded", updated_cells=sheet_result.updated_cells)
    else:
        logger.error(
            "submission.sheet_failed",
            reason=sheet_result.reason.value if sheet_result.reason else None,
            error=sheet_result.message,
            code=sheet_result.code,
        )

    return SubmissionResponse(
        success=True,
        message=SUCCESS_MESSAGE,
        emailId=sent.email_id,
        leadId=generate_lead_id(settings.lead_id_prefix),
        googleSheets=sheet_result.success,
        googleSheetsError=None if sheet_result.success else (sheet_result.message or "Unknown error"),
    )
