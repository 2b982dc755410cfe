"""
Note Schemas

Pydantic models for the note API request/response cycle.
The wire format is camelCase (``uniqueId``, ``creatorToken``, ``updatedAt``);
Python code uses snake_case attributes. The same models are used by the
client to validate server responses.
"""

from datetime import datetime
from typing import Final

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EXPIRATION_OPTIONS: Final[tuple[str, ...]] = ("none", "1h", "1d", "7d")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases on the wire, field names accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # Enables ORM model conversion
    )


class NoteCreate(CamelModel):
    """Request schema for POST /notes. Empty notes are allowed server-side."""

    content: str = Field(default="", description="Markdown content")


class NoteUpdate(CamelModel):
    """
    Request schema for PUT /notes/{id}.

    ``content`` is optional at the schema level so the route can answer a
    missing field with 400 and a readable message instead of a 422.
    """

    content: str | None = None


class NoteConfigUpdate(CamelModel):
    """Request schema for PUT /notes/{id}/config."""

    expiration_option: str = Field(
        default="none",
        description="One of: none, 1h, 1d, 7d",
    )


class NoteCreated(CamelModel):
    """Response for a freshly created note, the only time the token is returned."""

    id: int
    unique_id: str
    creator_token: str
    created_at: datetime | None = None


class NoteView(CamelModel):
    """Read-only representation served on share links."""

    id: int | None = None
    content: str = ""
    updated_at: datetime | None = None
    expires_at: datetime | None = None


class NoteEdit(CamelModel):
    """Full representation for the owner (creator token is never echoed)."""

    id: int
    unique_id: str
    content: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None


class NoteSaved(CamelModel):
    """Acknowledgement of a content update."""

    message: str = "Note saved"
    updated_at: datetime | None = None


class NoteConfigResult(CamelModel):
    """Acknowledgement of an expiration change."""

    message: str
    expires_at: datetime | None = None


class ErrorResponse(CamelModel):
    """Error body shared by every non-2xx response."""

    message: str
    expired_at: datetime | None = None
