"""
Notes API Router

REST endpoints for shared markdown notes.

Endpoints:
    GET  /{unique_id}   Read a note through its public share id.
    POST /              Create a note (returns the creator token once).
    PUT  /{id}          Overwrite content (creator token required).
    PUT  /{id}/config   Set expiration (creator token required).
    GET  /edit/{id}     Load a note for editing (creator token required).

Write endpoints authenticate with the ``X-Creator-Token`` header.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mdshare.core.database import get_db
from mdshare.core.errors import NoteExpiredError
from mdshare.models import Note
from mdshare.repositories.notes import NoteRepository, note_repository
from mdshare.schemas.notes import (
    EXPIRATION_OPTIONS,
    NoteConfigResult,
    NoteConfigUpdate,
    NoteCreate,
    NoteCreated,
    NoteEdit,
    NoteSaved,
    NoteUpdate,
    NoteView,
)

logger = logging.getLogger(__name__)

router = APIRouter()

EXPIRATION_DELTAS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_repository() -> NoteRepository:
    """FastAPI dependency: returns the shared NoteRepository."""
    return note_repository


async def require_creator(
    id: str,
    x_creator_token: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
    repo: NoteRepository = Depends(_get_repository),
) -> Note:
    """
    Resolve the note addressed by ``id`` if the caller owns it.

    Raises:
        HTTPException 400: ``id`` is not an integer.
        HTTPException 401: ``X-Creator-Token`` header missing.
        HTTPException 403: No note with this id and token.
    """
    try:
        note_id = int(id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Note ID format.",
        ) from None

    if not x_creator_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Creator token missing.",
        )

    note = await repo.get_owned(db, note_id, x_creator_token)
    if note is None:
        logger.info("Creator check failed for note %s", note_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid ID or token.",
        )
    return note


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/edit/{id}", response_model=NoteEdit)
async def read_note_for_edit(note: Note = Depends(require_creator)):
    """Full note for its owner. Expired notes can no longer be edited."""
    if note.is_expired():
        raise NoteExpiredError(
            "This note has expired and cannot be edited.", note.expires_at
        )
    return note


@router.get("/{unique_id}", response_model=NoteView)
async def read_note(
    unique_id: str,
    db: AsyncSession = Depends(get_db),
    repo: NoteRepository = Depends(_get_repository),
):
    """Retrieve a note through its public share id."""
    note = await repo.get_by_unique_id(db, unique_id)
    if note is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Note not found."
        )
    if note.is_expired():
        raise NoteExpiredError("This note has expired.", note.expires_at)
    return note


@router.post("", response_model=NoteCreated, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db),
    repo: NoteRepository = Depends(_get_repository),
):
    """
    Create a new note.

    The response is the only place the creator token is ever returned;
    clients are expected to keep it locally.
    """
    note = await repo.create(db, {"content": payload.content})
    logger.info("Created note %s (%d chars)", note.id, len(payload.content))
    return note


@router.put("/{id}", response_model=NoteSaved)
async def update_note(
    payload: NoteUpdate,
    note: Note = Depends(require_creator),
    db: AsyncSession = Depends(get_db),
    repo: NoteRepository = Depends(_get_repository),
):
    """Overwrite the note content. Saves are idempotent; last write wins."""
    if payload.content is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content is required for update.",
        )
    if note.is_expired():
        raise NoteExpiredError(
            "This note has expired and cannot be edited.", note.expires_at
        )

    updated = await repo.update_content(db, note, payload.content)
    logger.debug("Saved note %s", updated.id)
    return NoteSaved(message="Note saved", updated_at=updated.updated_at)


@router.put("/{id}/config", response_model=NoteConfigResult)
async def update_note_config(
    payload: NoteConfigUpdate,
    note: Note = Depends(require_creator),
    db: AsyncSession = Depends(get_db),
    repo: NoteRepository = Depends(_get_repository),
):
    """
    Set the note expiration.

    ``none`` clears the expiry; ``1h``, ``1d`` and ``7d`` are measured
    from now.
    """
    option = payload.expiration_option
    if option not in EXPIRATION_OPTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid expiration option.",
        )

    delta = EXPIRATION_DELTAS.get(option)
    expires_at = datetime.now(UTC) + delta if delta is not None else None

    updated = await repo.set_expiration(db, note, expires_at)
    logger.info("Note %s expiration set to %s", updated.id, option)
    return NoteConfigResult(
        message=f"Expiration set to: {option}",
        expires_at=updated.expires_at,
    )
