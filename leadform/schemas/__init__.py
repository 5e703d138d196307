# leadform/schemas/__init__.py
"""
Pydantic schemas for request/response validation and serialization.
"""

from leadform.schemas.lead import LeadSubmission, UtmAttribution
from leadform.schemas.responses import (
    ErrorResponse,
    HealthResponse,
    ServiceInfoResponse,
    SubmissionResponse,
)

__all__ = [
    "LeadSubmission",
    "UtmAttribution",
    "ErrorResponse",
    "HealthResponse",
    "ServiceInfoResponse",
    "SubmissionResponse",
]
