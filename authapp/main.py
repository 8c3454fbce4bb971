"""
Application entry point.

Run locally:
    uvicorn authapp.main:app --reload --port 8000

API docs available at:
    http://localhost:8000/docs   (Swagger UI)
    http://localhost:8000/redoc  (ReDoc)
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authapp.config import settings
from authapp.core.clock import Clock, utc_now
from authapp.routers import auth, google_auth, users, content
from authapp.services.content_service import GeminiContentGenerator
from authapp.services.email_service import EmailOTPSender
from authapp.services.google_auth import GoogleTokenVerifier
from authapp.services.notifier import Notifier
from authapp.services.sms_service import TwilioSMSSender

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_notifier() -> Notifier:
    sms_sender = TwilioSMSSender.from_settings(settings) if settings.sms_configured else None
    if sms_sender is None:
        logger.warning("Twilio is not configured; phone OTPs will not be delivered")
    return Notifier(email_sender=EmailOTPSender(settings), sms_sender=sms_sender)


def build_content_generator():
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; /content/generate will return 503")
        return None
    return GeminiContentGenerator(settings.gemini_api_key, settings.gemini_model)


def create_app(
    notifier: Notifier = None,
    oauth_verifier=None,
    content_generator=None,
    clock: Clock = None,
) -> FastAPI:
    """
    Build the app and its collaborators. Every third-party client is constructed
    here exactly once and stored on app.state; pass replacements to swap any of them.
    """
    _setup_logging()

    app = FastAPI(
        title="Mobile Auth API",
        description=(
            "Authentication backend for the mobile app: email/password signup and login, "
            "Google sign-in, OTP password reset over email or SMS, and Gemini content generation."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Collaborators ─────────────────────────────────────────────────────────
    app.state.clock = clock or utc_now
    app.state.notifier = notifier or build_notifier()
    app.state.oauth_verifier = oauth_verifier or GoogleTokenVerifier(settings.google_client_id)
    app.state.content_generator = content_generator or build_content_generator()

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(google_auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(content.router, prefix="/content", tags=["Content"])

    # ── Health Check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness probe for load balancers and container health checks."""
        return {"status": "ok", "version": "1.0.0"}

    return app


app = create_app()
