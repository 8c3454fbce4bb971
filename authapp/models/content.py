import uuid
from sqlalchemy import Column, ForeignKey, String, Text, TIMESTAMP, Uuid
from sqlalchemy.orm import relationship
from authapp.database import Base


class Content(Base):
    """
    One generated answer from the content endpoint, kept so users can list
    their history. created_at/updated_at are stamped from the app clock.
    """
    __tablename__ = "contents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    query = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────
    user = relationship("User", back_populates="contents")
