# leadform/services/email_render.py
from __future__ import annotations

from pathlib import Path
from typing import Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from leadform.core.config import Settings
from leadform.schemas.lead import LeadSubmission
from leadform.utils.identifiers import format_india_time, parse_client_timestamp

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


def build_subject(lead: LeadSubmission) -> str:
    campaign = lead.attribution.utm_campaign or "Direct Visit"
    return f"🎯 New Lead: {lead.name} from {campaign} - {lead.city}"


def submitted_at(lead: LeadSubmission) -> str:
    """Client timestamp in India time; the raw text when it does not parse."""
    if not lead.timestamp:
        return "Not provided"
    parsed = parse_client_timestamp(lead.timestamp)
    if parsed is None:
        return lead.timestamp
    try:
        return format_india_time(parsed)
    except OverflowError:
        # Year 9999 and similar cannot be shifted into IST.
        return lead.timestamp


def render_lead_alert(lead: LeadSubmission, *, lead_id: str, settings: Settings) -> Tuple[str, str]:
    """
    Returns (subject, html_body) for the sales notification.

    The attribution table is rendered only when at least one UTM field
    is non-empty; otherwise the "Direct Visit" block is shown.
    """
    utm = lead.attribution
    tmpl = _env.get_template("email/lead_alert.html")
    html = tmpl.render(
        lead=lead,
        utm=utm,
        has_attribution=not utm.is_empty,
        submitted_at=submitted_at(lead),
        lead_id=lead_id,
        brand_name=settings.brand_name,
        estimated_lead_value=settings.estimated_lead_value,
    )
    return build_subject(lead), html
