"""
Async SMTP email delivery using aiosmtplib.
"""
import logging
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from eballot.core.config import settings
from eballot.core.exceptions import UnconfiguredError


logger = logging.getLogger(__name__)


OTP_SUBJECT = "Your UMak eBallot Verification Code"

OTP_HTML = """\
<!DOCTYPE html>
<html lang="en">
<body style="font-family: sans-serif; background-color: #f2f3f8; padding: 24px; color: #2d2d2d;">
  <div style="max-width: 520px; margin: 0 auto; background: #ffffff; border-radius: 12px;">
    <div style="background-color: #304ffe; text-align: center; padding: 36px 28px; color: #fff;">
      <h1 style="margin: 0; font-size: 22px;">UMak eBallot</h1>
      <p style="margin: 8px 0 0;">One-Time Password Verification</p>
    </div>
    <div style="padding: 36px 28px; font-size: 15px; line-height: 1.6;">
      <p>Use the code below to sign in to your <strong>UMak eBallot</strong> account:</p>
      <div style="background: #f4f6ff; color: #304ffe; font-size: 34px; font-weight: 700;
                  text-align: center; padding: 18px; border-radius: 10px; letter-spacing: 8px;
                  font-family: 'Courier New', monospace;">{otp}</div>
      <p><strong>This code expires in {minutes} minutes.</strong></p>
      <p style="color: #b91c1c;">If you didn't request this code, please ignore this email.</p>
      <p style="color: #666; font-size: 14px;">Never share this code with anyone.</p>
    </div>
  </div>
</body>
</html>
"""

OTP_TEXT = (
    "Your UMak eBallot verification code is {otp}.\n\n"
    "This code expires in {minutes} minutes.\n"
    "If you didn't request this code, please ignore this email.\n"
)


class Mailer:
    """Sends transactional mail through the configured SMTP relay."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port if port is not None else settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASS
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.SMTP_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.host and self.username and self.password)

    async def send(self, to: str, subject: str, body_text: str, body_html: Optional[str] = None) -> None:
        if not self.configured:
            logger.error("SMTP credentials are not set; cannot send to %s", to)
            raise UnconfiguredError()

        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body_text)
        if body_html:
            msg.add_alternative(body_html, subtype="html")

        # Port 465 is implicit TLS; anything else upgrades with STARTTLS
        implicit_tls = self.port == 465
        try:
            await aiosmtplib.send(
                msg,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=implicit_tls,
                start_tls=not implicit_tls,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise
        logger.info("Email sent to %s: %s", to, subject)

    async def send_otp(self, to: str, otp: str, expires_in: int) -> None:
        minutes = expires_in // 60
        await self.send(
            to,
            OTP_SUBJECT,
            OTP_TEXT.format(otp=otp, minutes=minutes),
            OTP_HTML.format(otp=otp, minutes=minutes),
        )
