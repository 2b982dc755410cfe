"""
Note Model

Shared markdown note. Public reads go through ``unique_id``; writes
require the ``creator_token`` issued when the note was created.
"""

import secrets
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mdshare.models.base import Base, TimestampMixin


def generate_unique_id() -> str:
    """Public share identifier (non-secret)."""
    return uuid.uuid4().hex


def generate_creator_token() -> str:
    """Secret edit credential handed out once, at creation."""
    return secrets.token_hex(32)


class Note(Base, TimestampMixin):
    """
    Note entity.

    Attributes:
        id: Primary key, used in edit links together with the creator token.
        unique_id: Public identifier for view-only links, unique index.
        creator_token: Secret proving edit rights.
        content: Markdown text, no length limit.
        expires_at: Optional expiry; NULL means the note never expires.
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    unique_id: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, default=generate_unique_id
    )
    creator_token: Mapped[str] = mapped_column(
        String(128), default=generate_creator_token
    )
    content: Mapped[str] = mapped_column(Text, default="")
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once ``expires_at`` lies in the past."""
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) > self.expires_at

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, unique_id='{self.unique_id[:8]}...')>"
