"""
OTP delivery front-end. Picks the sender for the OTP's channel and turns every
delivery failure into a logged `False`: by the time we get here the OTP is already
persisted, so a flaky provider must not undo the reset request.
"""
import logging
from typing import Optional, Protocol

from authapp.core.exceptions import DeliveryError
from authapp.models.user import OtpChannel

logger = logging.getLogger(__name__)


class OTPSender(Protocol):
    async def send(self, address: str, otp: str): ...


class Notifier:
    def __init__(self, email_sender: Optional[OTPSender] = None, sms_sender: Optional[OTPSender] = None):
        self.senders = {
            OtpChannel.EMAIL: email_sender,
            OtpChannel.PHONE: sms_sender,
        }

    async def deliver(self, channel: OtpChannel, address: str, otp: str) -> bool:
        channel = OtpChannel(channel)
        sender = self.senders.get(channel)
        try:
            if sender is None:
                raise DeliveryError(f"No sender configured for {channel.value}")
            await sender.send(address, otp)
        except DeliveryError as e:
            logger.error(f"OTP delivery failed: channel={channel.value}, error={e}")
            return False
        logger.info(f"OTP delivered: channel={channel.value}")
        return True
