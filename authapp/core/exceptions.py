"""
Centralised custom exceptions.

Domain errors subclass HTTPException so services can raise them directly and FastAPI
turns them into responses without a translation layer. Errors that must never reach
the client (DeliveryError, ContentGenerationError) are plain exceptions and are
handled where the collaborator is called.
"""
from enum import Enum

from fastapi import HTTPException, status


class ValidationException(HTTPException):
    """Malformed or missing input, raised before any store access."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundException(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class ConflictException(HTTPException):
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class CredentialsException(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsException(CredentialsException):
    """Password mismatch on login."""

    def __init__(self):
        super().__init__("Invalid email or password")


class UnknownAccountException(InvalidCredentialsException):
    """
    No account for the login email. Identical to InvalidCredentialsException on the
    wire so the response never reveals whether an email is registered.
    """


class InvalidOTPException(HTTPException):
    def __init__(self, detail: str = "Invalid OTP"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class OTPExpiredException(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="OTP has expired. Please request a new one.",
        )


class SessionTokenError(str, Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"


class SessionTokenException(CredentialsException):
    _messages = {
        SessionTokenError.EXPIRED: "Session token has expired",
        SessionTokenError.MALFORMED: "Malformed session token",
        SessionTokenError.BAD_SIGNATURE: "Invalid session token signature",
    }

    def __init__(self, reason: SessionTokenError):
        self.reason = reason
        super().__init__(self._messages[reason])


class FederatedTokenException(CredentialsException):
    def __init__(self, detail: str = "Google authentication failed"):
        super().__init__(detail)


class ServiceUnavailableException(HTTPException):
    def __init__(self, detail: str = "Service not configured"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class BadGatewayException(HTTPException):
    def __init__(self, detail: str = "Upstream service failed"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class DeliveryError(Exception):
    """An email/SMS provider failed to accept a message. Never fatal to the caller."""


class ContentGenerationError(Exception):
    """The generative model call failed or returned nothing usable."""
