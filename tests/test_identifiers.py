import re
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from leadform.utils.identifiers import format_india_time, generate_lead_id, parse_client_timestamp


def test_lead_id_uses_millisecond_epoch():
    with patch("leadform.utils.identifiers.time.time", return_value=1700000000.1234):
        assert generate_lead_id() == "FS-1700000000123"


def test_lead_id_prefix():
    assert re.fullmatch(r"LF-\d{13}", generate_lead_id("LF-"))


@pytest.mark.parametrize(
    "moment,expected",
    [
        (datetime(2026, 1, 5, 9, 30, 15, tzinfo=timezone.utc), "5/1/2026, 3:00:15 pm"),
        (datetime(2026, 10, 17, 18, 35, 0, tzinfo=timezone.utc), "18/10/2026, 12:05:00 am"),
        (datetime(2026, 3, 1, 6, 30, 0, tzinfo=timezone.utc), "1/3/2026, 12:00:00 pm"),
        (datetime(2026, 3, 1, 0, 0, 9), "1/3/2026, 5:30:09 am"),
    ],
)
def test_format_india_time(moment, expected):
    assert format_india_time(moment) == expected


def test_format_india_time_respects_source_offset():
    moment = datetime(2026, 1, 5, 4, 30, 15, tzinfo=timezone(timedelta(hours=-5)))
    assert format_india_time(moment) == "5/1/2026, 3:00:15 pm"


def test_parse_client_timestamp():
    parsed = parse_client_timestamp("2026-01-05T09:30:15.000Z")
    assert parsed == datetime(2026, 1, 5, 9, 30, 15, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", "   ", "yesterday", "2026-13-45"])
def test_parse_client_timestamp_rejects_garbage(value):
    assert parse_client_timestamp(value) is None
