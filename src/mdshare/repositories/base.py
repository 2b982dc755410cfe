"""
Base Repository

Write helpers shared by the note repository: insert a row and apply a
partial update, each committed on the caller's session. Lookups live in
the concrete repository because every one of them is note-specific.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from mdshare.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


def _as_dict(obj_in: Any, *, partial: bool) -> dict[str, Any]:
    if hasattr(obj_in, "model_dump"):
        return obj_in.model_dump(exclude_unset=partial)
    return dict(obj_in)


class BaseRepository(Generic[ModelType]):
    """
    Commit-on-write repository over one mapped model.

    The session is owned by the request (``get_db``); these methods only
    commit and refresh so server defaults (ids, timestamps) are loaded.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def create(self, session: AsyncSession, obj_in: Any) -> ModelType:
        """
        Insert a new row.

        Args:
            session: Request-scoped database session.
            obj_in: Pydantic schema or dict of column values.

        Returns:
            The persisted entity with generated columns populated.
        """
        db_obj = self.model(**_as_dict(obj_in, partial=False))
        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def update(
        self,
        session: AsyncSession,
        db_obj: ModelType,
        obj_in: Any,
    ) -> ModelType:
        """Apply the given columns to ``db_obj``; unset schema fields are left alone."""
        for field, value in _as_dict(obj_in, partial=True).items():
            setattr(db_obj, field, value)
        await session.commit()
        await session.refresh(db_obj)  # updated_at is set by the database
        return db_obj
