from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import gspread
from google.oauth2.service_account import Credentials

from leadform.core.config import Settings
from leadform.core.logging import get_structlog_logger
from leadform.schemas.lead import LeadSubmission
from leadform.services.credentials import (
    CredentialError,
    CredentialsNotConfigured,
    load_service_account_info,
)
from leadform.utils.identifiers import format_india_time, generate_lead_id

logger = get_structlog_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetFailureReason(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CREDENTIAL_ERROR = "credential_error"
    RANGE_MALFORMED = "range_malformed"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SheetAppendResult:
    success: bool
    updated_cells: Optional[int] = None
    updated_range: Optional[str] = None
    reason: Optional[SheetFailureReason] = None
    message: Optional[str] = None
    code: Optional[Any] = None

    @classmethod
    def failed(
        cls,
        reason: SheetFailureReason,
        message: str,
        code: Optional[Any] = None,
    ) -> "SheetAppendResult":
        return cls(success=False, reason=reason, message=message, code=code)


def build_sheet_row(
    lead: LeadSubmission,
    *,
    lead_id_prefix: str = "FS-",
    now: Optional[datetime] = None,
) -> List[str]:
    """Sixteen columns: received time, contact fields, UTM fields, lead ID."""
    utm = lead.attribution
    return [
        format_india_time(now),
        lead.name,
        lead.email,
        lead.phone,
        lead.city,
        lead.company,
        lead.message,
        utm.utm_source,
        utm.utm_medium,
        utm.utm_campaign,
        utm.utm_term,
        utm.utm_content,
        utm.gclid,
        utm.referrer,
        utm.landing_page,
        generate_lead_id(lead_id_prefix),
    ]


def classify_append_error(message: str) -> SheetFailureReason:
    """Best-effort mapping of Sheets API error text to an operator hint."""
    if "Unable to parse range" in message:
        return SheetFailureReason.RANGE_MALFORMED
    if "Requested entity was not found" in message:
        return SheetFailureReason.NOT_FOUND
    if "does not have permission" in message:
        return SheetFailureReason.PERMISSION_DENIED
    return SheetFailureReason.UNKNOWN


def _api_error_message(error: Optional[BaseException]) -> Optional[str]:
    """The Sheets API's own message from an APIError, if there is one."""
    if not isinstance(error, gspread.exceptions.APIError):
        return None
    details = getattr(error, "error", None)
    if isinstance(details, dict) and details.get("message"):
        return str(details["message"])
    return None


class SheetAppender:
    """Appends one lead row per call to the configured spreadsheet range."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _open_spreadsheet(self, info: Dict[str, Any]) -> gspread.Spreadsheet:
        credentials = Credentials.from_service_account_info(info, scopes=SCOPES)
        client = gspread.authorize(credentials)
        return client.open_by_key(self.settings.google_sheets_id)

    def _append_row(self, info: Dict[str, Any], row: List[str]) -> Dict[str, Any]:
        spreadsheet = self._open_spreadsheet(info)
        return spreadsheet.values_append(
            self.settings.google_sheet_range,
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            body={"values": [row]},
        )

    async def append(self, lead: LeadSubmission) -> SheetAppendResult:
        log = logger.bind(spreadsheet_range=self.settings.google_sheet_range)
        log.info("sheets.append_started", name=lead.name, email=lead.email, city=lead.city)

        if not self.settings.google_sheets_id:
            log.warning("sheets.not_configured", missing="GOOGLE_SHEETS_ID")
            return SheetAppendResult.failed(
                SheetFailureReason.NOT_CONFIGURED,
                "Google Sheets not configured (missing GOOGLE_SHEETS_ID)",
            )

        try:
            info = load_service_account_info(self.settings)
        except CredentialsNotConfigured as e:
            return SheetAppendResult.failed(SheetFailureReason.NOT_CONFIGURED, e.message)
        except CredentialError as e:
            return SheetAppendResult.failed(SheetFailureReason.CREDENTIAL_ERROR, e.message, e.code)

        row = build_sheet_row(lead, lead_id_prefix=self.settings.lead_id_prefix)
        log.info("sheets.appending", preview=row[:5], columns=len(row))

        try:
            response = await asyncio.to_thread(self._append_row, info, row)
        except gspread.exceptions.SpreadsheetNotFound as e:
            # gspread wraps the 404 APIError; str(e) is only the Response repr.
            return self._opening_failed(
                log, info, e, SheetFailureReason.NOT_FOUND, 404, "Requested entity was not found."
            )
        except PermissionError as e:
            # open_by_key raises a bare PermissionError from the 403 APIError.
            return self._opening_failed(
                log, info, e, SheetFailureReason.PERMISSION_DENIED, 403,
                "The caller does not have permission",
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            code = getattr(e, "code", None)
            reason = classify_append_error(message)
            log.error(
                "sheets.append_failed",
                reason=reason.value,
                error_type=type(e).__name__,
                error=message,
                code=code,
            )
            self._log_hint(log, reason, info)
            return SheetAppendResult.failed(reason, message, code)

        updates = response.get("updates", {}) if isinstance(response, dict) else {}
        result = SheetAppendResult(
            success=True,
            updated_cells=updates.get("updatedCells"),
            updated_range=updates.get("updatedRange"),
        )
        log.info(
            "sheets.appended",
            updated_cells=result.updated_cells,
            updated_range=result.updated_range,
        )
        return result

    def _opening_failed(
        self,
        log,
        info: Dict[str, Any],
        error: Exception,
        reason: SheetFailureReason,
        code: int,
        default_message: str,
    ) -> SheetAppendResult:
        message = _api_error_message(error.__cause__) or default_message
        log.error(
            "sheets.append_failed",
            reason=reason.value,
            error_type=type(error).__name__,
            error=message,
            code=code,
        )
        self._log_hint(log, reason, info)
        return SheetAppendResult.failed(reason, message, code)

    def _log_hint(self, log, reason: SheetFailureReason, info: Dict[str, Any]) -> None:
        if reason is SheetFailureReason.RANGE_MALFORMED:
            log.info("sheets.hint", tip='Check GOOGLE_SHEET_NAME format, e.g. "SheetName!A:P"')
        elif reason is SheetFailureReason.NOT_FOUND:
            log.info("sheets.hint", tip="Check that GOOGLE_SHEETS_ID is correct and the sheet exists")
        elif reason is SheetFailureReason.PERMISSION_DENIED:
            log.info(
                "sheets.hint",
                tip="Share the spreadsheet with the service account",
                share_with=info.get("client_email") or "service account email",
            )
