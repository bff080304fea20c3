"""
Email notification service.

Messages are written to a log file and the application logger rather than
delivered; swapping in a real provider only touches ``send_email``.
"""
import logging
from datetime import datetime
from pathlib import Path

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Outbound mail for signup OTPs and team invitations."""

    def __init__(self):
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.site_url = settings.SITE_URL
        self.email_log_path = Path(settings.EMAIL_LOG_PATH)

    def _log_email(self, to: str, subject: str, body: str):
        timestamp = datetime.now().isoformat()
        log_entry = f"""
================================================================================
EMAIL SENT: {timestamp}
================================================================================
TO: {to}
FROM: {self.from_name} <{self.from_email}>
SUBJECT: {subject}
--------------------------------------------------------------------------------
{body}
--------------------------------------------------------------------------------
"""
        with open(self.email_log_path, "a") as f:
            f.write(log_entry)

        logger.info("Email logged: to=%s, subject=%s", to, subject)

    async def send_email(self, to: str, subject: str, body: str) -> bool:
        """Send (log) one message. Returns False instead of raising on I/O errors."""
        try:
            self._log_email(to, subject, body)
            return True
        except OSError as e:
            logger.error("Failed to send email to %s: %s", to, e)
            return False

    async def send_signup_otp(self, to: str, otp: str, expires_minutes: int) -> bool:
        subject = f"Your {self.from_name} verification code"
        body = f"""Hello,

Your verification code is: {otp}

It expires in {expires_minutes} minutes. If you did not request it, ignore this email.
"""
        return await self.send_email(to, subject, body)

    async def send_team_invite(
        self,
        to: str,
        organization_name: str,
        role: str,
        invite_token: str,
        expires_hours: int,
    ) -> bool:
        invite_url = f"{self.site_url}/register?token={invite_token}"
        subject = "You're Invited!"
        body = f"""You have been invited to join {organization_name} as {role}.

Register here: {invite_url}

This invitation expires in {expires_hours} hours.
"""
        return await self.send_email(to, subject, body)


email_service = EmailService()
