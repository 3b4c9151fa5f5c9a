"""In-memory registry of live registration pages."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from badge_registration.services.page import RegistrationPage


class PageStore(Protocol):
    """Keeps page instances addressable between requests."""

    def add(self, page: RegistrationPage) -> str:
        """Store a page and return its id."""

    def get(self, page_id: str) -> RegistrationPage | None:
        """Return a live page, if present and not expired."""

    def discard(self, page_id: str) -> None:
        """Forget a page."""


@dataclass
class _PageEntry:
    page: RegistrationPage
    expires_at: datetime


@dataclass
class InMemoryPageStore(PageStore):
    """Page store that expires pages after a period of inactivity."""

    ttl_seconds: int
    _entries: dict[str, _PageEntry]

    def __init__(self, ttl_seconds: int = 60 * 60) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries = {}

    def add(self, page: RegistrationPage) -> str:
        """Store a page under a fresh unguessable id."""
        self._evict_expired()
        page_id = secrets.token_urlsafe(24)
        self._entries[page_id] = _PageEntry(page=page, expires_at=self._deadline())
        return page_id

    def get(self, page_id: str) -> RegistrationPage | None:
        """Return a live page and extend its lifetime."""
        entry = self._entries.get(page_id)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at or entry.page.state.closed:
            self._entries.pop(page_id, None)
            return None
        entry.expires_at = self._deadline()
        return entry.page

    def discard(self, page_id: str) -> None:
        self._entries.pop(page_id, None)

    def _deadline(self) -> datetime:
        return datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)

    def _evict_expired(self) -> None:
        now = datetime.now(tz=UTC)
        expired = [
            key for key, entry in self._entries.items() if now >= entry.expires_at
        ]
        for key in expired:
            self._entries.pop(key, None)
