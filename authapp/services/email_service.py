"""
Email delivery using fastapi-mail over SMTP.

Gmail setup steps (do this once):
  1. Enable 2-Factor Authentication on your Gmail account
  2. Go to: Google Account → Security → App Passwords
  3. Create an app password for "Mail"
  4. Use that 16-character password as MAIL_PASSWORD in your .env

fastapi-mail ConnectionConfig:
  - MAIL_STARTTLS=True, MAIL_SSL_TLS=False for port 587
  - MAIL_SSL_TLS=True, MAIL_STARTTLS=False for port 465
"""
import asyncio

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from fastapi_mail.errors import ConnectionErrors
from aiosmtplib import SMTPException

from authapp.config import Settings
from authapp.core.exceptions import DeliveryError


class EmailOTPSender:
    """Built once in create_app() and shared; holds a single FastMail client."""

    def __init__(self, settings: Settings):
        self.otp_expire_minutes = settings.otp_expire_minutes
        use_ssl = settings.mail_port == 465
        self.mail = FastMail(ConnectionConfig(
            MAIL_USERNAME=settings.mail_username,
            MAIL_PASSWORD=settings.mail_password,
            MAIL_FROM=settings.mail_from,
            MAIL_FROM_NAME=settings.mail_from_name,
            MAIL_PORT=settings.mail_port,
            MAIL_SERVER=settings.mail_server,
            MAIL_STARTTLS=not use_ssl,
            MAIL_SSL_TLS=use_ssl,
            USE_CREDENTIALS=bool(settings.mail_username),
            VALIDATE_CERTS=True,
        ))

    async def send(self, email_to: str, otp: str) -> None:
        message = MessageSchema(
            subject="Reset your password",
            recipients=[email_to],
            body=(
                f"Your password reset OTP is: {otp}\n\n"
                f"Valid for {self.otp_expire_minutes} minutes.\n"
                f"If you did not request a password reset, please ignore this email."
            ),
            subtype=MessageType.plain,
        )
        # Socket failures and timeouts can surface before fastapi-mail wraps them
        try:
            await self.mail.send_message(message)
        except (ConnectionErrors, SMTPException, OSError, asyncio.TimeoutError) as e:
            raise DeliveryError(f"SMTP delivery to {email_to} failed: {e}")
