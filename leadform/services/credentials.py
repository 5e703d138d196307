from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict

from leadform.core.config import Settings
from leadform.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)


class CredentialError(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class CredentialsNotConfigured(CredentialError):
    def __init__(self) -> None:
        super().__init__(
            "not_configured",
            "Google Service Account not configured (no credentials found)",
        )


class CredentialDecodeError(CredentialError):
    def __init__(self, cause: Exception) -> None:
        super().__init__("decode_failed", f"Failed to decode Base64 credentials: {cause}")


class CredentialParseError(CredentialError):
    def __init__(self, cause: Exception) -> None:
        super().__init__("parse_failed", f"Failed to parse JSON credentials: {cause}")


def _parse_service_account(text: str) -> Dict[str, Any]:
    info = json.loads(text)
    if not isinstance(info, dict):
        raise ValueError("service account key must be a JSON object")
    return info


def load_service_account_info(settings: Settings) -> Dict[str, Any]:
    """
    Resolve the service-account key from settings.

    GOOGLE_SERVICE_ACCOUNT_KEY_BASE64 wins over GOOGLE_SERVICE_ACCOUNT_KEY.
    Raises a CredentialError subclass when neither is usable.
    """
    if settings.google_service_account_key_base64:
        logger.info("credentials.loading", source="GOOGLE_SERVICE_ACCOUNT_KEY_BASE64")
        try:
            decoded = base64.b64decode(settings.google_service_account_key_base64).decode("utf-8")
            info = _parse_service_account(decoded)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            logger.error("credentials.decode_failed", error_type=type(e).__name__)
            raise CredentialDecodeError(e) from e
    elif settings.google_service_account_key:
        logger.info("credentials.loading", source="GOOGLE_SERVICE_ACCOUNT_KEY")
        try:
            info = _parse_service_account(settings.google_service_account_key)
        except ValueError as e:
            logger.error("credentials.parse_failed", error_type=type(e).__name__)
            raise CredentialParseError(e) from e
    else:
        logger.warning(
            "credentials.missing",
            hint="Set GOOGLE_SERVICE_ACCOUNT_KEY_BASE64 or GOOGLE_SERVICE_ACCOUNT_KEY",
        )
        raise CredentialsNotConfigured()

    logger.info("credentials.loaded", client_email=info.get("client_email"))
    return info
