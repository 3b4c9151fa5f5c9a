"""Registration submission, list sync and edit/delete flows."""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Protocol

from badge_registration.domain.errors import (
    PersistError,
    SigningError,
    StorageError,
    UploadError,
    ValidationError,
)
from badge_registration.domain.photos import EncodedPhoto
from badge_registration.domain.registrations import (
    DraftRegistration,
    ListItem,
    Registration,
)

logger = logging.getLogger(__name__)

PHOTO_EXTENSION = "jpg"


class RegistrationRepository(Protocol):
    """Persistence interface for registration rows."""

    async def insert(
        self, owner_email: str, full_name: str, country: str, photo_path: str
    ) -> Registration:
        """Insert a registration row and return it."""

    async def select_by_owner(
        self, owner_email: str, limit: int
    ) -> list[Registration]:
        """Return an owner's rows, newest first."""

    async def update(
        self, registration_id: str, owner_email: str, full_name: str, country: str
    ) -> None:
        """Update the name and country of an owned row."""

    async def delete(self, registration_id: str, owner_email: str) -> None:
        """Delete an owned row."""


class PhotoStorage(Protocol):
    """Object storage interface for registration photos."""

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store bytes under a new path; existing paths are never overwritten."""

    async def sign_view(self, path: str, ttl_seconds: int) -> str:
        """Return a time-limited view URL for a stored object."""

    async def remove(self, path: str) -> None:
        """Delete a stored object."""


def build_photo_path(
    owner_email: str, now_ms: int | None = None, suffix: str | None = None
) -> str:
    """Build a storage key unique per submission."""
    timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    random_hex = suffix or secrets.token_hex(7)
    return f"{owner_email}/{timestamp}-{random_hex}.{PHOTO_EXTENSION}"


def validate_fields(full_name: str, country: str) -> tuple[str, str]:
    """Return trimmed name and country or raise on the first blank one."""
    name = full_name.strip()
    if not name:
        raise ValidationError("Enter NAME SURNAME.")
    cleaned_country = country.strip()
    if not cleaned_country:
        raise ValidationError("Enter COUNTRY.")
    return name, cleaned_country


def validate_draft(
    owner_email: str | None, draft: DraftRegistration
) -> tuple[str, str, str, EncodedPhoto]:
    """Check a draft in submission order; the first failure wins."""
    if not owner_email:
        raise ValidationError("Not logged in.")
    name, country = validate_fields(draft.full_name, draft.country)
    if draft.photo is None or not draft.photo.photo.blob:
        raise ValidationError("Upload and crop a photo.")
    return owner_email, name, country, draft.photo.photo


@dataclass
class RegistrationService:
    """Application service for the registration pipeline."""

    repository: RegistrationRepository
    storage: PhotoStorage
    signed_url_ttl_seconds: int = 60 * 60
    list_limit: int = 200

    async def submit(
        self, owner_email: str | None, draft: DraftRegistration
    ) -> Registration:
        """Upload the draft's photo, then persist the registration row.

        Validation failures raise before any remote call. A failed upload
        stops the flow without a row; a failed insert leaves the uploaded
        photo behind.
        """
        owner, full_name, country, photo = validate_draft(owner_email, draft)
        photo_path = build_photo_path(owner)

        try:
            await self.storage.upload(photo_path, photo.blob, photo.content_type)
        except UploadError:
            logger.warning("Photo upload failed", extra={"photo_path": photo_path})
            raise

        try:
            registration = await self.repository.insert(
                owner_email=owner,
                full_name=full_name,
                country=country,
                photo_path=photo_path,
            )
        except PersistError:
            logger.warning(
                "Registration insert failed; photo left in storage",
                extra={"photo_path": photo_path},
            )
            raise
        logger.info(
            "Registration saved",
            extra={"registration_id": registration.id, "photo_path": photo_path},
        )
        return registration

    async def refresh(self, owner_email: str) -> list[ListItem]:
        """Fetch the owner's registrations with temporary photo URLs."""
        rows = await self.repository.select_by_owner(owner_email, self.list_limit)
        urls = await asyncio.gather(*(self._view_url(row) for row in rows))
        return [
            ListItem(registration=row, photo_url=url)
            for row, url in zip(rows, urls, strict=True)
        ]

    async def update(
        self, owner_email: str, registration_id: str, full_name: str, country: str
    ) -> None:
        """Update name and country of an owned registration."""
        name, cleaned_country = validate_fields(full_name, country)
        await self.repository.update(
            registration_id=registration_id,
            owner_email=owner_email,
            full_name=name,
            country=cleaned_country,
        )

    async def delete(self, owner_email: str, registration: Registration) -> None:
        """Delete the row, then make a best-effort attempt to drop its photo."""
        await self.repository.delete(registration.id, owner_email)
        if not registration.photo_path:
            return
        try:
            await self.storage.remove(registration.photo_path)
        except StorageError as exc:
            logger.warning(
                "Photo removal failed: %s",
                exc.message,
                extra={"photo_path": registration.photo_path},
            )

    async def _view_url(self, row: Registration) -> str | None:
        if not row.photo_path:
            return None
        try:
            return await self.storage.sign_view(
                row.photo_path, self.signed_url_ttl_seconds
            )
        except SigningError as exc:
            logger.warning(
                "Signing photo URL failed: %s",
                exc.message,
                extra={"registration_id": row.id},
            )
            return None
