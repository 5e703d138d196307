# leadform/services/__init__.py
"""
Business logic services: credentials, email notification, spreadsheet
recording and the submission workflow that ties them together.
"""

from leadform.services.credentials import (
    CredentialDecodeError,
    CredentialError,
    CredentialParseError,
    CredentialsNotConfigured,
    load_service_account_info,
)
from leadform.services.email import EmailNotifier, EmailSentInfo
from leadform.services.sheets import SheetAppender, SheetAppendResult, SheetFailureReason
from leadform.services.submission import handle_submission, read_submission

__all__ = [
    # Credentials
    "CredentialDecodeError",
    "CredentialError",
    "CredentialParseError",
    "CredentialsNotConfigured",
    "load_service_account_info",
    # Email
    "EmailNotifier",
    "EmailSentInfo",
    # Sheets
    "SheetAppender",
    "SheetAppendResult",
    "SheetFailureReason",
    # Submissions
    "handle_submission",
    "read_submission",
]
