"""
SMS delivery through the Twilio REST API.

Twilio's client is synchronous, so the request is pushed onto the threadpool
instead of blocking the event loop. Its HTTP client lets network errors from
requests through unwrapped, so those are caught alongside TwilioException.
"""
from requests.exceptions import RequestException
from starlette.concurrency import run_in_threadpool
from twilio.rest import Client
from twilio.base.exceptions import TwilioException

from authapp.config import Settings
from authapp.core.exceptions import DeliveryError


class TwilioSMSSender:
    def __init__(self, account_sid: str, auth_token: str, from_number: str, otp_expire_minutes: int = 10):
        self.client = Client(account_sid, auth_token)
        self.from_number = from_number
        self.otp_expire_minutes = otp_expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioSMSSender":
        return cls(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_from_number,
            otp_expire_minutes=settings.otp_expire_minutes,
        )

    def _create_message(self, phone: str, otp: str) -> str:
        message = self.client.messages.create(
            body=f"Your password reset code is {otp}. Valid for {self.otp_expire_minutes} minutes.",
            from_=self.from_number,
            to=phone,
        )
        return message.sid

    async def send(self, phone: str, otp: str) -> str:
        try:
            return await run_in_threadpool(self._create_message, phone, otp)
        except (TwilioException, RequestException) as e:
            raise DeliveryError(f"SMS delivery to {phone} failed: {e}")
