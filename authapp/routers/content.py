"""
Content router: Gemini passthrough with per-user history.

Endpoints:
  POST /content/generate → generate and store an answer (201)
  GET  /content          → caller's items, newest first
  GET  /content/{id}     → one of the caller's items
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authapp.core.clock import Clock
from authapp.core.dependencies import get_clock, get_content_generator, get_current_user
from authapp.database import get_db
from authapp.models.user import User
from authapp.schemas.content import ContentOut, GenerateContentRequest
from authapp.services import content_service

router = APIRouter()


@router.post("/generate", response_model=ContentOut, status_code=201)
async def generate_content(
    body: GenerateContentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    generator=Depends(get_content_generator),
    clock: Clock = Depends(get_clock),
):
    return await content_service.generate_content(db, generator, current_user, body.query, clock=clock)


@router.get("", response_model=List[ContentOut])
def list_content(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return content_service.list_user_content(db, current_user)


@router.get("/{content_id}", response_model=ContentOut)
def get_content(
    content_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return content_service.get_content(db, current_user, content_id)
