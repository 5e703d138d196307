from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel


class SubmissionResponse(BaseModel):
    success: bool
    message: str
    emailId: str
    leadId: str
    googleSheets: bool
    googleSheetsError: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    emailService: str
    timestamp: str


class ServiceInfoResponse(BaseModel):
    message: str
    version: str
    endpoints: Dict[str, str]
