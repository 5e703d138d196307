from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

INDIA_TZ = ZoneInfo("Asia/Kolkata")


def generate_lead_id(prefix: str = "FS-") -> str:
    """
    Prefix plus the current epoch in milliseconds.

    Two calls within the same millisecond return the same value.
    """
    return f"{prefix}{int(time.time() * 1000)}"


def format_india_time(moment: Optional[datetime] = None) -> str:
    """Render a moment the way en-IN locales do, e.g. ``18/10/2026, 3:05:09 pm``."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(INDIA_TZ)
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return (
        f"{local.day}/{local.month}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


def parse_client_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp sent by the browser; None if it does not parse."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
