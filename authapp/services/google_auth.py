"""
Google OAuth ID token verification.

The mobile app signs in with Google and posts the resulting ID token; we check its
signature, expiry and audience with google-auth and turn the payload into
FederatedClaims for the reconciler.
"""
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from authapp.core.exceptions import FederatedTokenException, ServiceUnavailableException
from authapp.services.federated_service import FederatedClaims


class GoogleTokenVerifier:
    def __init__(self, client_id: Optional[str]):
        self.client_id = client_id
        # Caches Google's signing certs across calls
        self._request = google_requests.Request()

    def verify(self, token: str) -> FederatedClaims:
        """
        Raises:
            ServiceUnavailableException: GOOGLE_CLIENT_ID is not configured
            FederatedTokenException: bad signature, wrong audience, expired, no email
        """
        if not self.client_id:
            raise ServiceUnavailableException(
                "Google authentication is not configured. Set GOOGLE_CLIENT_ID."
            )
        try:
            payload = google_id_token.verify_oauth2_token(token, self._request, self.client_id)
        except ValueError as e:
            if "Token used too late" in str(e):
                raise FederatedTokenException("Google token expired. Please try again.")
            raise FederatedTokenException(f"Invalid Google ID token: {e}")
        except GoogleAuthError as e:
            raise FederatedTokenException(f"Google token verification failed: {e}")

        if not payload.get("email"):
            raise FederatedTokenException("Email not provided by Google")

        return FederatedClaims(
            email=payload["email"],
            federated_id=payload["sub"],
            name=payload.get("name"),
            phone=payload.get("phone_number"),
            avatar_url=payload.get("picture"),
        )
