"""
Remote Note Service

Async HTTP client for the note REST API.

Design:
    - Async HTTP calls via httpx (non-blocking).
    - Never raises for remote failures: every call returns an ``ApiResult``.
      Connection errors, non-2xx answers and malformed payloads all become
      a single ``error`` message.
    - HTTP 410 is reported separately (``expired=True``) so callers can
      show the expiry dialog instead of a generic notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from mdshare.client.config import ClientSettings
from mdshare.schemas.notes import (
    NoteConfigResult,
    NoteCreated,
    NoteEdit,
    NoteSaved,
    NoteView,
)

logger = logging.getLogger(__name__)

CREATOR_TOKEN_HEADER = "X-Creator-Token"

T = TypeVar("T", bound=BaseModel)


@dataclass
class ApiResult(Generic[T]):
    """
    Uniform outcome of a note service call.

    Attributes:
        data: Parsed payload on success.
        error: Human-readable failure message (None on success).
        expired: True when the server reported the note as expired (410).
        status: HTTP status code, None when no response was received.
    """

    data: T | None = None
    error: str | None = None
    expired: bool = False
    status: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.expired


class NoteService:
    """
    Client for the five note operations.

    Usage::

        async with NoteService(settings) as service:
            result = await service.create_note("# Hello")
            if result.ok:
                print(result.data.unique_id)
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._endpoint = self._settings.notes_endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._settings.api_timeout)

    async def __aenter__(self) -> NoteService:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_note(self, content: str) -> ApiResult[NoteCreated]:
        return await self._request(
            "POST", self._endpoint, NoteCreated, json={"content": content}
        )

    async def update_note(
        self, note_id: int, content: str, creator_token: str
    ) -> ApiResult[NoteSaved]:
        return await self._request(
            "PUT",
            f"{self._endpoint}/{note_id}",
            NoteSaved,
            json={"content": content},
            headers={CREATOR_TOKEN_HEADER: creator_token},
        )

    async def fetch_for_view(self, unique_id: str) -> ApiResult[NoteView]:
        return await self._request("GET", f"{self._endpoint}/{unique_id}", NoteView)

    async def fetch_for_edit(
        self, note_id: int, creator_token: str
    ) -> ApiResult[NoteEdit]:
        return await self._request(
            "GET",
            f"{self._endpoint}/edit/{note_id}",
            NoteEdit,
            headers={CREATOR_TOKEN_HEADER: creator_token},
        )

    async def set_expiration(
        self, note_id: int, creator_token: str, option: str
    ) -> ApiResult[NoteConfigResult]:
        return await self._request(
            "PUT",
            f"{self._endpoint}/{note_id}/config",
            NoteConfigResult,
            json={"expirationOption": option},
            headers={CREATOR_TOKEN_HEADER: creator_token},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        model: type[T],
        **kwargs: Any,
    ) -> ApiResult[T]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("API call failed: %s %s: %s", method, url, e)
            return ApiResult(error=str(e) or "Network request failed")

        status = response.status_code
        if status == 410:
            message = self._error_message(response, "This note has expired.")
            logger.info("Note expired: %s %s", method, url)
            return ApiResult(error=message, expired=True, status=status)

        if response.is_error:
            message = self._error_message(response, f"HTTP error {status}")
            logger.warning("API error %d on %s %s: %s", status, method, url, message)
            return ApiResult(error=message, status=status)

        try:
            data = model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed response from %s %s: %s", method, url, e)
            return ApiResult(error="Malformed response from server", status=status)

        return ApiResult(data=data, status=status)

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        """Server-provided ``message`` field, or ``default``."""
        try:
            body = response.json()
        except ValueError:
            return "Server error details unavailable"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return default
