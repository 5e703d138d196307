from __future__ import annotations

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        error: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.error = error
        self.details = details
        super().__init__(self.message)

    def to_response(self, include_details: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        if include_details and self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(BaseAPIException):
    """Submission is missing a required field or could not be parsed."""
    def __init__(self, message: str = "Name and email are required", **kwargs):
        super().__init__(message, status_code=400, **kwargs)


class ConfigurationError(BaseAPIException):
    """A required secret or setting is absent."""
    def __init__(self, message: str = "Service not configured", **kwargs):
        super().__init__(message, status_code=500, **kwargs)


class EmailError(BaseAPIException):
    """Base class for email delivery failures."""
    def __init__(self, message: str = "Failed to send email", **kwargs):
        super().__init__(message, status_code=500, **kwargs)


class EmailNotConfigured(ConfigurationError):
    def __init__(self, message: str = "Email service not configured. Please contact administrator.", **kwargs):
        super().__init__(message, **kwargs)


class ProviderRejected(EmailError):
    """The email provider answered with a structured error."""
    def __init__(
        self,
        provider_message: Optional[str] = None,
        provider_status: Optional[int] = None,
        **kwargs,
    ):
        self.provider_message = provider_message or "Unknown Resend error"
        self.provider_status = provider_status
        super().__init__(
            "Failed to send email via Resend.",
            error=self.provider_message,
            **kwargs,
        )


class SendFailed(EmailError):
    """Transport failure or unexpected exception while sending."""
    def __init__(self, error: str, **kwargs):
        super().__init__(
            "Failed to send email. Please try again later.",
            error=error,
            **kwargs,
        )


INTERNAL_ERROR_BODY: Dict[str, Any] = {"success": False, "message": "Internal server error"}
