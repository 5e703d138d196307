from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

UTM_FIELDS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "gclid",
    "referrer",
    "landing_page",
)


def _as_text(value: Any) -> Any:
    # Missing and null both become "", scalars are stringified.
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class UtmAttribution(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_term: str = ""
    utm_content: str = ""
    gclid: str = ""
    referrer: str = ""
    landing_page: str = ""

    @field_validator(*UTM_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, v):
        return _as_text(v)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, field) for field in UTM_FIELDS)


class LeadSubmission(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""
    company: str = ""
    message: str = ""
    utm: Optional[UtmAttribution] = None
    timestamp: str = ""
    user_agent: str = ""

    @field_validator(
        "name", "email", "phone", "city", "company", "message", "timestamp", "user_agent",
        mode="before",
    )
    @classmethod
    def normalize_text(cls, v):
        return _as_text(v)

    @field_validator("utm", mode="before")
    @classmethod
    def normalize_utm(cls, v):
        if v is None or v == "":
            return None
        return v

    @property
    def attribution(self) -> UtmAttribution:
        """The UTM record, or an empty one when the form sent none."""
        return self.utm or UtmAttribution()

    def log_context(self) -> Dict[str, Any]:
        utm = self.attribution
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone or "Not provided",
            "company": self.company or "Not provided",
            "city": self.city or "Not provided",
            "message_length": len(self.message),
            "utm_received": self.utm is not None,
            "gclid": utm.gclid or None,
            "utm_source": utm.utm_source or None,
            "utm_medium": utm.utm_medium or None,
            "utm_campaign": utm.utm_campaign or None,
            "utm_term": utm.utm_term or None,
            "utm_content": utm.utm_content or None,
            "referrer": utm.referrer or "Direct Visit",
            "landing_page": utm.landing_page or None,
            "client_timestamp": self.timestamp or None,
        }
