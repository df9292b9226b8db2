import asyncio
from datetime import date, time

import fastapi
import pytest

from agent_crm import email_service
from agent_crm.email_templates import appointment_confirmation_template
from agent_crm.services.notification_service import (
    format_appointment_time,
    send_appointment_confirmation_safely,
)


def _send(**overrides):
    kwargs = {
        "client_email": "jane@example.com",
        "client_name": "Jane Wanjiru",
        "title": "Policy review",
        "appointment_date": date(2025, 1, 6),
        "start_time": time(9, 30),
        "location": None,
    }
    kwargs.update(overrides)
    return asyncio.run(send_appointment_confirmation_safely(**kwargs))


def test_format_appointment_time():
    assert format_appointment_time(date(2025, 1, 6), time(9, 30)) == "Monday, 06 January 2025 at 09:30"


def test_confirmation_template_escapes_input():
    mjml = appointment_confirmation_template(
        client_name="<b>Jane</b>", title="Review & renew", formatted_time="Monday", location=None
    )
    assert "&lt;b&gt;Jane&lt;/b&gt;" in mjml
    assert "Review &amp; renew" in mjml
    assert "Not specified" in mjml


def test_no_email_address_skips_send(sent_emails):
    assert _send(client_email=None) is False
    assert sent_emails == []


def test_successful_send(sent_emails):
    assert _send() is True
    assert sent_emails[0]["formatted_time"] == "Monday, 06 January 2025 at 09:30"
    assert sent_emails[0]["client_name"] == "Jane Wanjiru"


def test_missing_name_falls_back(sent_emails):
    _send(client_name=None)
    assert sent_emails[0]["client_name"] == "there"


def test_provider_failure_is_swallowed(monkeypatch):
    async def failing_send(**kwargs):
        raise email_service.EmailDeliveryError("provider down")

    monkeypatch.setattr(email_service, "send_appointment_confirmation", failing_send)
    assert _send() is False


def test_unconfigured_provider_is_reported(monkeypatch):
    monkeypatch.setattr(email_service, "RESEND_API_KEY", None)
    with pytest.raises(email_service.EmailDeliveryError, match="not configured"):
        asyncio.run(email_service.send_email("jane@example.com", "Hi", "<mjml></mjml>"))


def test_fastapi_releases_request_session_before_background_email():
    # Older releases ran yield-dependency teardown after background tasks
    major, minor = (int(part) for part in fastapi.__version__.split(".")[:2])
    assert (major, minor) >= (0, 106)
