"""Supabase Storage adapter for registration photos."""

import asyncio
from dataclasses import dataclass

import httpx
from supabase import Client, StorageException

from badge_registration.domain.errors import SigningError, StorageError, UploadError
from badge_registration.services.registrations import PhotoStorage


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Stores photos in a private Supabase Storage bucket."""

    client: Client
    bucket: str = "photos"

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Upload bytes to a new path; an existing object is an error."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            await asyncio.to_thread(
                bucket.upload,
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except (StorageException, httpx.HTTPError) as exc:
            raise UploadError(_storage_message(exc)) from exc

    async def sign_view(self, path: str, ttl_seconds: int) -> str:
        """Create a signed URL valid for ``ttl_seconds``."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            signed = await asyncio.to_thread(
                bucket.create_signed_url, path, ttl_seconds
            )
        except (StorageException, httpx.HTTPError) as exc:
            raise SigningError(_storage_message(exc)) from exc
        url = signed.get("signedUrl") or signed.get("signedURL")
        if not url:
            raise SigningError("Storage returned no signed URL.")
        return str(url)

    async def remove(self, path: str) -> None:
        """Remove a stored object."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            await asyncio.to_thread(bucket.remove, [path])
        except (StorageException, httpx.HTTPError) as exc:
            raise StorageError(_storage_message(exc)) from exc


def _storage_message(exc: StorageException | httpx.HTTPError) -> str:
    """Extract the API or transport message from a storage error."""
    message = getattr(exc, "message", None)
    if not message and exc.args and isinstance(exc.args[0], dict):
        message = exc.args[0].get("message")
    return str(message or exc) or type(exc).__name__
