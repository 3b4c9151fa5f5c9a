"""Domain models for badge registrations."""

from dataclasses import dataclass
from datetime import datetime

from badge_registration.domain.photos import PhotoArtifact


@dataclass(frozen=True)
class AllowListEntry:
    """Allow-list row for a permitted email."""

    email: str
    active: bool
    default_country: str | None = None


@dataclass(frozen=True)
class Registration:
    """A persisted badge registration."""

    id: str
    registered_by_email: str
    full_name: str
    country: str
    photo_path: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ListItem:
    """A registration with a temporary photo view URL."""

    registration: Registration
    photo_url: str | None

    @property
    def id(self) -> str:
        return self.registration.id


@dataclass
class DraftRegistration:
    """In-memory state of a registration that has not been submitted yet."""

    full_name: str = ""
    country: str = ""
    photo: PhotoArtifact | None = None

    def prefill_country(self, country: str | None) -> None:
        """Apply a default country unless the user already entered one."""
        if country and not self.country.strip():
            self.country = country

    def clear_after_submit(self) -> None:
        """Reset name and photo; the country is kept for the next entry."""
        self.full_name = ""
        self.photo = None
