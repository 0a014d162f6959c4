import pytest

from ecomhub.config.settings import Settings
from ecomhub.utils.notifications import DeliveryReport, OtpNotifier, format_phone


def test_format_phone():
    assert format_phone("9876543210", "+91") == "+919876543210"
    assert format_phone(" +14155550100 ", "+91") == "+14155550100"


def test_delivery_report():
    assert not DeliveryReport().delivered
    assert DeliveryReport(email_sent=True).delivered


@pytest.mark.asyncio
async def test_unconfigured_channels_report_errors():
    notifier = OtpNotifier(Settings(
        twilio_account_sid=None, twilio_auth_token=None, twilio_phone_number=None,
        email_host=None, email_user=None, email_pass=None,
    ))

    report = await notifier.send("9876543210", "123456", "asha@example.com")
    assert not report.delivered
    assert report.sms_error == "SMS gateway not configured"
    assert report.email_error == "SMTP not configured"

    report = await notifier.send("9876543210", "123456", None)
    assert report.email_error == "no email address"
