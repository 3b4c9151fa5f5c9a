"""Supabase-backed registration repository."""

import asyncio
from dataclasses import dataclass
from datetime import datetime

import httpx
from supabase import Client, PostgrestAPIError

from badge_registration.domain.errors import PersistError
from badge_registration.domain.registrations import Registration
from badge_registration.services.registrations import RegistrationRepository

_COLUMNS = "id, created_at, registered_by_email, full_name, country, photo_path"


@dataclass
class SupabaseRegistrationRepository(RegistrationRepository):
    """Supabase implementation for registration rows.

    Every read and write is filtered on ``registered_by_email`` in addition
    to whatever row-level security the database applies.
    """

    client: Client
    table: str = "registrations"

    async def insert(
        self, owner_email: str, full_name: str, country: str, photo_path: str
    ) -> Registration:
        """Insert a registration row and return it."""
        query = self.client.table(self.table).insert(
            {
                "registered_by_email": owner_email,
                "full_name": full_name,
                "country": country,
                "photo_path": photo_path,
            }
        )
        try:
            response = await asyncio.to_thread(query.execute)
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise PersistError(_api_message(exc)) from exc
        if not response.data:
            raise PersistError("Failed to save registration.")
        return _to_registration(response.data[0])

    async def select_by_owner(
        self, owner_email: str, limit: int
    ) -> list[Registration]:
        """Return the owner's rows, newest first."""
        query = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("registered_by_email", owner_email)
            .order("created_at", desc=True)
            .limit(limit)
        )
        try:
            response = await asyncio.to_thread(query.execute)
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise PersistError(_api_message(exc)) from exc
        return [_to_registration(row) for row in response.data or []]

    async def update(
        self, registration_id: str, owner_email: str, full_name: str, country: str
    ) -> None:
        """Update name and country of an owned row."""
        query = (
            self.client.table(self.table)
            .update({"full_name": full_name, "country": country})
            .eq("id", registration_id)
            .eq("registered_by_email", owner_email)
        )
        try:
            await asyncio.to_thread(query.execute)
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise PersistError(_api_message(exc)) from exc

    async def delete(self, registration_id: str, owner_email: str) -> None:
        """Delete an owned row."""
        query = (
            self.client.table(self.table)
            .delete()
            .eq("id", registration_id)
            .eq("registered_by_email", owner_email)
        )
        try:
            await asyncio.to_thread(query.execute)
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise PersistError(_api_message(exc)) from exc


def _to_registration(row: dict[str, object]) -> Registration:
    created_at = row.get("created_at")
    photo_path = row.get("photo_path")
    return Registration(
        id=str(row["id"]),
        registered_by_email=str(row["registered_by_email"]),
        full_name=str(row.get("full_name") or ""),
        country=str(row.get("country") or ""),
        photo_path=str(photo_path) if photo_path else None,
        created_at=datetime.fromisoformat(created_at)
        if isinstance(created_at, str)
        else None,
    )


def _api_message(exc: PostgrestAPIError | httpx.HTTPError) -> str:
    message = getattr(exc, "message", None)
    return str(message or exc) or type(exc).__name__
