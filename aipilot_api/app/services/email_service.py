"""
Outgoing e-mail over SMTP.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
Failures building or delivering a mail are logged and reported as
``False``; registration does not fail because a mail could not be sent.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urlencode

from ..core.config import settings

logger = logging.getLogger(__name__)


def build_verification_email(to: str, verification_code: str) -> EmailMessage:
    link = f"{settings.verify_email_base_url}?{urlencode({'code': verification_code, 'email': to})}"
    msg = EmailMessage()
    msg["Subject"] = "Ai Master Email Verification"
    msg["From"] = settings.email_user
    msg["To"] = to
    msg.set_content(
        f"Thank you for registering for Ai Master.\n\n"
        f"Your verification code is: {verification_code}\n"
        f"Verify your email: {link}\n\n"
        "If you did not request this, please ignore this email."
    )
    msg.add_alternative(
        f"""\
<h3>Thank you for registering for Ai Master</h3>
<p>Your verification code is: <strong>{verification_code}</strong></p>
<p>Please click the link below to verify your email:</p>
<a href="{link}">Verify Email</a>
<p>If you did not request this, please ignore this email.</p>
<footer><p>&copy; Ai Master. All rights reserved.</p></footer>
""",
        subtype="html",
    )
    return msg


class EmailService:
    """Sends transactional mail."""

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.email_host and settings.email_user)

    @staticmethod
    def _deliver(msg: EmailMessage) -> None:
        if settings.email_port == 465:
            with smtplib.SMTP_SSL(settings.email_host, settings.email_port, timeout=settings.email_timeout_seconds) as server:
                server.login(settings.email_user, settings.email_pass)
                server.send_message(msg)
        else:
            with smtplib.SMTP(settings.email_host, settings.email_port, timeout=settings.email_timeout_seconds) as server:
                server.starttls()
                server.login(settings.email_user, settings.email_pass)
                server.send_message(msg)

    @classmethod
    async def send_verification_email(cls, to: str, verification_code: str) -> bool:
        if not cls.is_configured():
            logger.warning("SMTP is not configured, skipping verification mail to %s", to)
            return False
        try:
            msg = build_verification_email(to, verification_code)
            await asyncio.to_thread(cls._deliver, msg)
        except Exception:
            logger.exception("Failed to send verification mail to %s", to)
            return False
        logger.info("Verification mail sent to %s", to)
        return True
