"""
Content service: thin passthrough to Gemini plus per-user history.

Flow:
  1. POST /content/generate → GeminiContentGenerator.generate(query)
  2. The answer is stored with the query and owner so it can be listed later
  3. GET /content and GET /content/{id} read back the caller's own items only
"""
import logging
import uuid
from typing import List

from google import genai
from google.genai import errors as genai_errors
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from authapp.core.clock import Clock, utc_now
from authapp.core.exceptions import (
    BadGatewayException,
    ContentGenerationError,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)
from authapp.models.content import Content
from authapp.models.user import User

logger = logging.getLogger(__name__)


class GeminiContentGenerator:
    def __init__(self, api_key: str, model: str):
        self.client = genai.Client(api_key=api_key)
        self.model = model

    def _generate(self, query: str) -> str:
        try:
            response = self.client.models.generate_content(model=self.model, contents=query)
        except genai_errors.APIError as e:
            raise ContentGenerationError(str(e))
        if not response.text:
            raise ContentGenerationError("Model returned an empty response")
        return response.text

    async def generate(self, query: str) -> str:
        return await run_in_threadpool(self._generate, query)


async def generate_content(db: Session, generator, user: User, query: str, clock: Clock = utc_now) -> Content:
    query = (query or "").strip()
    if not query:
        raise ValidationException("Query is required")
    if generator is None:
        raise ServiceUnavailableException("Content generation is not configured. Set GEMINI_API_KEY.")

    try:
        text = await generator.generate(query)
    except ContentGenerationError as e:
        logger.error(f"Content generation failed: user={user.id}, error={e}")
        raise BadGatewayException("Error generating content")

    now = clock()
    content = Content(query=query, content=text, user_id=user.id, created_at=now, updated_at=now)
    db.add(content)
    db.commit()
    db.refresh(content)
    return content


def get_content(db: Session, user: User, content_id: str) -> Content:
    try:
        key = uuid.UUID(content_id)
    except ValueError:
        raise ValidationException("Invalid content ID format")
    content = (
        db.query(Content)
        .filter(Content.id == key, Content.user_id == user.id)
        .first()
    )
    if content is None:
        raise NotFoundException("Content")
    return content


def list_user_content(db: Session, user: User) -> List[Content]:
    return (
        db.query(Content)
        .filter(Content.user_id == user.id)
        .order_by(Content.created_at.desc())  # newest first
        .all()
    )
