"""
Note Repository

Data access layer for shared notes: lookups by public id, by private id
guarded with the creator token, and targeted content/expiry updates.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mdshare.models import Note
from mdshare.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note entities.

    Inherits create/update from BaseRepository and adds:
        - get_by_unique_id: public share-link lookup
        - get_owned: id + creator token match (edit rights check)
        - update_content / set_expiration: the two owner mutations
    """

    def __init__(self) -> None:
        super().__init__(Note)

    async def get_by_unique_id(
        self, session: AsyncSession, unique_id: str
    ) -> Note | None:
        """Look up a note by its public share identifier."""
        result = await session.execute(select(Note).where(Note.unique_id == unique_id))
        return result.scalars().first()

    async def get_owned(
        self,
        session: AsyncSession,
        note_id: int,
        creator_token: str,
    ) -> Note | None:
        """Return the note only if ``creator_token`` matches its owner token."""
        stmt = select(Note).where(
            Note.id == note_id,
            Note.creator_token == creator_token,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def update_content(
        self, session: AsyncSession, note: Note, content: str
    ) -> Note:
        """Overwrite the note content (last write wins)."""
        return await self.update(session, note, {"content": content})

    async def set_expiration(
        self,
        session: AsyncSession,
        note: Note,
        expires_at: datetime | None,
    ) -> Note:
        """Set or clear the expiry timestamp."""
        return await self.update(session, note, {"expires_at": expires_at})


# Module-level singleton for convenience imports
note_repository = NoteRepository()
