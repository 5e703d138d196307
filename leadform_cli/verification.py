# leadform_cli/verification.py
"""
Checks used by the operator CLI.
All functions return a VerificationResult: (success, message, data).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from leadform.core.config import Settings
from leadform.services.credentials import CredentialError, load_service_account_info


@dataclass
class VerificationResult:
    """Structured result from verification functions."""
    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


def _json_object(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Decoded body when it is a JSON object, else None."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def check_config(settings: Settings) -> VerificationResult:
    """
    Report which settings are present without revealing any secret values.
    Fails when email is unusable or configured credentials cannot be loaded.
    """
    data: Dict[str, Any] = {
        "environment": settings.environment,
        "port": settings.port,
        "email_configured": settings.email_configured,
        "email_to": settings.email_to,
        "sheets_id_configured": bool(settings.google_sheets_id),
        "sheet_range": settings.google_sheet_range,
        "allowed_origins": settings.origins(),
    }
    problems = []

    if not settings.email_configured:
        problems.append("RESEND_API_KEY missing or placeholder")

    if settings.google_service_account_key_base64:
        data["credentials_source"] = "GOOGLE_SERVICE_ACCOUNT_KEY_BASE64"
    elif settings.google_service_account_key:
        data["credentials_source"] = "GOOGLE_SERVICE_ACCOUNT_KEY"
    else:
        data["credentials_source"] = None

    if data["credentials_source"]:
        try:
            info = load_service_account_info(settings)
            data["service_account"] = info.get("client_email")
        except CredentialError as e:
            problems.append(e.message)

    if problems:
        return VerificationResult(
            success=False,
            message=f"{len(problems)} configuration problem(s): " + "; ".join(problems),
            data=data,
        )
    return VerificationResult(success=True, message="Configuration looks usable", data=data)


async def check_api_health(api_url: str = "http://localhost:5000", timeout: float = 5.0) -> VerificationResult:
    """Call GET /api/health on a running instance."""
    url = f"{api_url.rstrip('/')}/api/health"
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url)
    except httpx.RequestError as e:
        return VerificationResult(
            success=False,
            message=f"API not reachable at {url}: {e}",
            data={"url": url},
        )

    if response.status_code != 200:
        return VerificationResult(
            success=False,
            message=f"API health check failed with status {response.status_code}",
            data={"url": url, "status_code": response.status_code},
        )

    body = _json_object(response)
    if body is None:
        return VerificationResult(
            success=False,
            message="API health check did not return a JSON object",
            data={"url": url, "raw": response.text[:200]},
        )

    return VerificationResult(
        success=True,
        message="API health check passed",
        data={"url": url, **body},
    )


async def send_test_lead(
    api_url: str = "http://localhost:5000",
    *,
    name: str = "Test Lead",
    email: str = "test@example.com",
    city: str = "Pune",
    timeout: float = 30.0,
) -> VerificationResult:
    """POST a sample lead to /api/send-email and report the outcome."""
    url = f"{api_url.rstrip('/')}/api/send-email"
    payload = {
        "name": name,
        "email": email,
        "city": city,
        "message": "Test submission from the leadform CLI",
    }
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload)
    except httpx.RequestError as e:
        return VerificationResult(success=False, message=f"API not reachable at {url}: {e}")

    body = _json_object(response) or {"raw": response.text[:200]}

    if response.status_code == 200 and body.get("success"):
        return VerificationResult(
            success=True,
            message=f"Lead accepted (email {body.get('emailId')}, lead {body.get('leadId')})",
            data=body,
        )
    return VerificationResult(
        success=False,
        message=f"Lead rejected with status {response.status_code}: {body.get('message')}",
        data=body,
    )
