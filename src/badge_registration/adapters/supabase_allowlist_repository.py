"""Supabase-backed allow-list lookup."""

import asyncio
from dataclasses import dataclass

import httpx
from supabase import Client, PostgrestAPIError

from badge_registration.domain.errors import AuthError
from badge_registration.domain.registrations import AllowListEntry
from badge_registration.services.gate import AllowListRepository


@dataclass
class SupabaseAllowListRepository(AllowListRepository):
    """Reads the ``allowed_users`` table."""

    client: Client
    table: str = "allowed_users"

    async def find_by_email(self, email: str) -> AllowListEntry | None:
        """Return the active allow-list row for an email, if present."""
        query = (
            self.client.table(self.table)
            .select("email, active, country")
            .eq("email", email)
            .eq("active", True)
            .limit(1)
        )
        try:
            response = await asyncio.to_thread(query.execute)
        except PostgrestAPIError as exc:
            raise AuthError(str(exc.message or exc)) from exc
        except httpx.HTTPError as exc:
            raise AuthError(str(exc) or "Allow-list lookup failed.") from exc
        if not response.data:
            return None
        row = response.data[0]
        country = row.get("country")
        return AllowListEntry(
            email=str(row["email"]),
            active=bool(row.get("active")),
            default_country=str(country) if country else None,
        )
