from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from leadform.core.config import Settings, get_settings
from leadform.schemas.responses import ErrorResponse, SubmissionResponse
from leadform.services.email import EmailNotifier
from leadform.services.sheets import SheetAppender
from leadform.services.submission import handle_submission, read_submission

router = APIRouter()


def get_email_notifier(settings: Settings = Depends(get_settings)) -> EmailNotifier:
    return EmailNotifier(settings)


def get_sheet_appender(settings: Settings = Depends(get_settings)) -> SheetAppender:
    return SheetAppender(settings)


@router.post(
    "/send-email",
    response_model=SubmissionResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit a contact-form lead",
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def send_email(
    request: Request,
    settings: Settings = Depends(get_settings),
    notifier: EmailNotifier = Depends(get_email_notifier),
    appender: SheetAppender = Depends(get_sheet_appender),
) -> SubmissionResponse:
    lead = await read_submission(request)
    return await handle_submission(
        lead,
        settings=settings,
        notifier=notifier,
        appender=appender,
    )
