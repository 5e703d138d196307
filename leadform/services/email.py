from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import aiohttp

from leadform.core.config import Settings
from leadform.core.exceptions import EmailNotConfigured, ProviderRejected, SendFailed
from leadform.core.logging import get_structlog_logger
from leadform.schemas.lead import LeadSubmission
from leadform.services.email_render import render_lead_alert
from leadform.utils.identifiers import generate_lead_id

logger = get_structlog_logger(__name__)


@dataclass(frozen=True)
class EmailSentInfo:
    email_id: str
    lead_id: str


class EmailNotifier:
    """Sends the sales lead alert through the Resend REST API."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def build_payload(self, lead: LeadSubmission, *, lead_id: str) -> Dict[str, Any]:
        subject, html = render_lead_alert(lead, lead_id=lead_id, settings=self.settings)
        return {
            "from": self.settings.email_from,
            "to": [self.settings.email_to],
            "reply_to": lead.email,
            "subject": subject,
            "html": html,
        }

    async def _post(self, payload: Dict[str, Any]) -> Tuple[int, Any]:
        """POST to Resend; returns (http_status, decoded body)."""
        headers = {
            "Authorization": f"Bearer {self.settings.resend_api_key}",
            "Content-Type": "application/json",
            "User-Agent": "LeadForm-Notifier/1.0",
        }
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.settings.resend_api_url,
                json=payload,
                headers=headers,
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = {"message": (await response.text())[:200]}
                return response.status, body

    async def send(self, lead: LeadSubmission) -> EmailSentInfo:
        if not self.settings.email_configured:
            logger.error("email.not_configured", hint="Get an API key at https://resend.com/api-keys")
            raise EmailNotConfigured()

        lead_id = generate_lead_id(self.settings.lead_id_prefix)
        log = logger.bind(lead_id=lead_id, to=self.settings.email_to, reply_to=lead.email)

        try:
            payload = self.build_payload(lead, lead_id=lead_id)
            log.info("email.sending", subject=payload["subject"])
            status, body = await self._post(payload)
        except asyncio.TimeoutError as e:
            log.error("email.send_failed", error_type="TimeoutError", error="Request timeout")
            raise SendFailed("Request timeout", details=repr(e)) from e
        except aiohttp.ClientError as e:
            log.error("email.send_failed", error_type=type(e).__name__, error=str(e))
            raise SendFailed(str(e), details=repr(e)) from e
        except Exception as e:
            log.error("email.send_failed", error_type=type(e).__name__, error=str(e), exc_info=True)
            raise SendFailed(str(e), details=repr(e)) from e

        if not 200 <= status < 300:
            provider_message = body.get("message") if isinstance(body, dict) else None
            log.error(
                "email.provider_rejected",
                http_status=status,
                provider_error=body.get("name") if isinstance(body, dict) else None,
                provider_message=provider_message,
            )
            raise ProviderRejected(provider_message, provider_status=status)

        email_id = body.get("id") if isinstance(body, dict) else None
        if not email_id:
            log.error("email.send_failed", error="Provider response carried no message id", http_status=status)
            raise SendFailed("Email provider response did not include a message id")

        log.info("email.sent", email_id=email_id)
        return EmailSentInfo(email_id=str(email_id), lead_id=lead_id)
