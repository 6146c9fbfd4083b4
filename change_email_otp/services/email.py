"""Notifiers that deliver change-email codes."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import anyio

from change_email_otp.core.config import Settings

logger = logging.getLogger(__name__)


class SmtpNotifier:
    """Send the code to the new address over SMTP.

    Blocking SMTP calls run in a worker thread so the async request is not
    blocked. Delivery errors are raised to the caller unchanged.
    """

    def __init__(self, config: Settings):
        self.config = config

    def _build_message(self, email: str, otp: str) -> MIMEMultipart:
        message = MIMEMultipart()
        message["From"] = self.config.FROM_EMAIL
        message["To"] = email
        message["Subject"] = "Confirm your new email address"

        body = f"""
        <div>
            <h2>Email change code</h2>
            <p>Use the following one-time code to confirm this address for your account:</p>
            <h3 style="color: #2563eb; font-size: 24px; text-align: center;">{otp}</h3>
            <p>The code expires in {self.config.CHANGE_EMAIL_OTP_EXPIRE_MINUTES} minutes.</p>
            <p>If you did not ask to change your email, you can ignore this message.</p>
        </div>
        """
        message.attach(MIMEText(body, "html"))
        return message

    def _send(self, email: str, otp: str) -> None:
        config = self.config
        if not all([config.SMTP_SERVER, config.SMTP_USERNAME, config.SMTP_PASSWORD, config.FROM_EMAIL]):
            raise RuntimeError("SMTP settings are incomplete.")

        message = self._build_message(email, otp)
        with smtplib.SMTP(config.SMTP_SERVER, int(config.SMTP_PORT), timeout=20) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
            server.send_message(message)

    async def notify(self, email: str, otp: str) -> None:
        try:
            await anyio.to_thread.run_sync(self._send, email, otp)
        except Exception:
            logger.exception("Failed to send change-email OTP to %s", email)
            raise
        logger.info("Change-email OTP sent to %s", email)


class ConsoleNotifier:
    """Log the code instead of sending it; local development only."""

    async def notify(self, email: str, otp: str) -> None:
        logger.warning("Change-email OTP for %s: %s", email, otp)
