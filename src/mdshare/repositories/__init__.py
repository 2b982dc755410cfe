"""Repositories package."""

from mdshare.repositories.base import BaseRepository
from mdshare.repositories.notes import NoteRepository, note_repository

__all__ = [
    "BaseRepository",
    "NoteRepository",
    "note_repository",
]
