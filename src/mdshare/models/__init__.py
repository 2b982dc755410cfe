"""Models package - re-exports all models for convenient imports."""

from mdshare.models.base import Base, TimestampMixin
from mdshare.models.note import Note

__all__ = [
    "Base",
    "TimestampMixin",
    "Note",
]
