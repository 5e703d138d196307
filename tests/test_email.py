import asyncio
import re
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from leadform.core.exceptions import EmailNotConfigured, ProviderRejected, SendFailed
from leadform.schemas.lead import LeadSubmission
from leadform.services.email import EmailNotifier
from leadform.services.email_render import build_subject, render_lead_alert, submitted_at


def _lead(**fields) -> LeadSubmission:
    data = {"name": "Asha", "email": "a@b.com", "city": "Pune"}
    data.update(fields)
    return LeadSubmission.model_validate(data)


def test_subject_defaults_to_direct_visit():
    assert build_subject(_lead()) == "🎯 New Lead: Asha from Direct Visit - Pune"


def test_subject_names_campaign():
    lead = _lead(utm={"utm_campaign": "vo-pune"})
    assert build_subject(lead) == "🎯 New Lead: Asha from vo-pune - Pune"


def test_render_without_utm_shows_direct_visit_block(settings):
    _, html = render_lead_alert(_lead(), lead_id="FS-1", settings=settings)
    assert "Direct Visit (No UTM parameters)" in html
    assert "Marketing Tracking Data" not in html


def test_render_with_all_empty_utm_shows_direct_visit_block(settings):
    lead = _lead(utm={"utm_source": "", "gclid": None, "referrer": ""})
    _, html = render_lead_alert(lead, lead_id="FS-1", settings=settings)
    assert "Direct Visit (No UTM parameters)" in html
    assert "Marketing Tracking Data" not in html


def test_render_with_single_utm_field_shows_full_table(settings):
    lead = _lead(utm={"gclid": "Cj0KCQ"})
    _, html = render_lead_alert(lead, lead_id="FS-1", settings=settings)
    assert "Marketing Tracking Data" in html
    assert "Cj0KCQ" in html
    assert "Google Click ID" in html
    assert "Direct Visit (No UTM parameters)" not in html


def test_render_message_block_only_when_message_present(settings):
    _, without = render_lead_alert(_lead(), lead_id="FS-1", settings=settings)
    _, with_message = render_lead_alert(_lead(message="Need a GST address"), lead_id="FS-1", settings=settings)
    assert "Customer Message" not in without
    assert "Customer Message" in with_message
    assert "Need a GST address" in with_message


def test_render_campaign_value_banner(settings):
    _, html = render_lead_alert(_lead(utm={"utm_campaign": "vo-pune"}), lead_id="FS-1", settings=settings)
    assert "Estimated Lead Value" in html
    assert "₹2,500" in html


def test_render_includes_lead_id_and_next_steps(settings):
    _, html = render_lead_alert(_lead(), lead_id="FS-1700000000000", settings=settings)
    assert "FS-1700000000000" in html
    assert "Next Steps - Act Fast!" in html
    assert "virtual office packages for Pune" in html


def test_render_escapes_submitted_markup(settings):
    _, html = render_lead_alert(_lead(name="<script>alert(1)</script>"), lead_id="FS-1", settings=settings)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_submitted_at_formats_client_timestamp():
    assert submitted_at(_lead(timestamp="2026-01-05T09:30:15.000Z")) == "5/1/2026, 3:00:15 pm"
    assert submitted_at(_lead(timestamp="yesterday")) == "yesterday"
    assert submitted_at(_lead()) == "Not provided"


def test_build_payload(settings):
    payload = EmailNotifier(settings).build_payload(_lead(), lead_id="FS-1")
    assert payload["from"] == "FlashSpace Virtual Office <onboarding@resend.dev>"
    assert payload["to"] == ["sales@flashspace.co"]
    assert payload["reply_to"] == "a@b.com"
    assert "Asha" in payload["subject"]


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", [None, "re_your_api_key_here"])
async def test_send_refuses_without_usable_key(settings_factory, api_key):
    notifier = EmailNotifier(settings_factory(resend_api_key=api_key))
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock) as post:
        with pytest.raises(EmailNotConfigured):
            await notifier.send(_lead())
    post.assert_not_called()


@pytest.mark.asyncio
async def test_send_returns_provider_id(settings):
    notifier = EmailNotifier(settings)
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock, return_value=(200, {"id": "re_abc"})) as post:
        info = await notifier.send(_lead())

    assert info.email_id == "re_abc"
    assert re.fullmatch(r"FS-\d+", info.lead_id)
    payload = post.call_args.args[0]
    assert info.lead_id in payload["html"]


@pytest.mark.asyncio
async def test_send_provider_rejection(settings):
    notifier = EmailNotifier(settings)
    body = {"statusCode": 422, "name": "validation_error", "message": "Invalid `to` field."}
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock, return_value=(422, body)):
        with pytest.raises(ProviderRejected) as exc_info:
            await notifier.send(_lead())

    assert exc_info.value.status_code == 500
    assert exc_info.value.error == "Invalid `to` field."
    assert exc_info.value.provider_status == 422


@pytest.mark.asyncio
async def test_send_provider_rejection_without_message(settings):
    notifier = EmailNotifier(settings)
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock, return_value=(500, {})):
        with pytest.raises(ProviderRejected) as exc_info:
            await notifier.send(_lead())
    assert exc_info.value.error == "Unknown Resend error"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("connection refused"), asyncio.TimeoutError(), RuntimeError("boom")],
)
async def test_send_transport_failures(settings, error):
    notifier = EmailNotifier(settings)
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock, side_effect=error):
        with pytest.raises(SendFailed) as exc_info:
            await notifier.send(_lead())
    assert exc_info.value.message == "Failed to send email. Please try again later."


@pytest.mark.asyncio
async def test_send_without_message_id_is_a_failure(settings):
    notifier = EmailNotifier(settings)
    with patch.object(EmailNotifier, "_post", new_callable=AsyncMock, return_value=(200, {})):
        with pytest.raises(SendFailed):
            await notifier.send(_lead())


@pytest.mark.parametrize("value", ["9999-12-31T23:59:59Z", "0001-01-01T00:00:00+14:00"])
def test_submitted_at_keeps_out_of_range_timestamps(value):
    assert submitted_at(_lead(timestamp=value)) == value


@pytest.mark.asyncio
async def test_render_failure_becomes_send_failure(settings):
    notifier = EmailNotifier(settings)
    with patch("leadform.services.email.render_lead_alert", side_effect=RuntimeError("template missing")), \
            patch.object(EmailNotifier, "_post", new_callable=AsyncMock) as post:
        with pytest.raises(SendFailed) as exc_info:
            await notifier.send(_lead())
    assert exc_info.value.error == "template missing"
    post.assert_not_called()
