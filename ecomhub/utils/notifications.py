"""
OTP delivery over SMS (Twilio REST API) and email (SMTP).

Either channel may be left unconfigured; a send only fails when no channel
delivered the code.
"""
import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

import httpx

from ..config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


@dataclass
class DeliveryReport:
    sms_sent: bool = False
    email_sent: bool = False
    sms_error: Optional[str] = None
    email_error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.sms_sent or self.email_sent


def format_phone(phone: str, country_code: str) -> str:
    phone = phone.strip()
    return phone if phone.startswith("+") else f"{country_code}{phone}"


class OtpNotifier:
    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(self, phone: str, otp: str, email: Optional[str]) -> DeliveryReport:
        report = DeliveryReport()

        try:
            await self._send_sms(format_phone(phone, self.settings.default_country_code), otp)
            report.sms_sent = True
            logger.info(f"📱 OTP SMS sent to {phone}")
        except Exception as e:
            logger.error(f"SMS delivery failed for {phone}: {e}")
            report.sms_error = str(e)

        if email:
            try:
                await asyncio.to_thread(self._send_email, email, otp)
                report.email_sent = True
                logger.info(f"📧 OTP email sent to {email}")
            except Exception as e:
                logger.error(f"Email delivery failed for {email}: {e}")
                report.email_error = str(e)
        else:
            report.email_error = "no email address"

        return report

    async def _send_sms(self, phone: str, otp: str) -> None:
        s = self.settings
        if not (s.twilio_account_sid and s.twilio_auth_token and s.twilio_phone_number):
            raise RuntimeError("SMS gateway not configured")

        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(
                TWILIO_MESSAGES_URL.format(sid=s.twilio_account_sid),
                auth=(s.twilio_account_sid, s.twilio_auth_token),
                data={"To": phone, "From": s.twilio_phone_number, "Body": f"Your OTP is: {otp}"},
            )
            response.raise_for_status()

    def _send_email(self, to_address: str, otp: str) -> None:
        s = self.settings
        if not (s.email_host and s.email_user and s.email_pass):
            raise RuntimeError("SMTP not configured")

        message = EmailMessage()
        message["Subject"] = "Your OTP Code"
        message["From"] = s.email_user
        message["To"] = to_address
        message.set_content(f"Your OTP is: {otp}")

        with smtplib.SMTP(s.email_host, s.email_port, timeout=15) as server:
            server.starttls()
            server.login(s.email_user, s.email_pass)
            server.send_message(message)


def get_otp_notifier() -> OtpNotifier:
    """FastAPI dependency for OTP delivery."""
    return OtpNotifier(get_settings())
