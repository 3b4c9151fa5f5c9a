"""Supabase Auth adapter for sessions and one-time login links."""

import asyncio
import logging
from dataclasses import dataclass

import httpx
from supabase import AuthError as SupabaseAuthError
from supabase import Client

from badge_registration.domain.errors import AuthError
from badge_registration.services.gate import IdentityService

logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityService(IdentityService):
    """Identity service backed by Supabase Auth."""

    client: Client

    async def get_session_email(self, access_token: str | None) -> str | None:
        """Return the email behind an access token; rejected tokens yield None.

        Transport failures raise ``AuthError`` so the caller can tell them
        apart from a rejected token.
        """
        if not access_token:
            return None
        try:
            response = await asyncio.to_thread(self.client.auth.get_user, access_token)
        except SupabaseAuthError as exc:
            logger.info("Access token rejected: %s", exc.message)
            return None
        except httpx.HTTPError as exc:
            raise AuthError(_transport_message(exc)) from exc
        if response is None or response.user is None or not response.user.email:
            return None
        return response.user.email.lower()

    async def sign_in_with_link(self, email: str, redirect_to: str) -> None:
        """Email a one-time login link that lands on ``redirect_to``."""
        try:
            await asyncio.to_thread(
                self.client.auth.sign_in_with_otp,
                {"email": email, "options": {"email_redirect_to": redirect_to}},
            )
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError(_transport_message(exc)) from exc

    async def sign_out(self, access_token: str | None) -> None:
        """Revoke the session bound to an access token."""
        if not access_token:
            return
        try:
            await asyncio.to_thread(self.client.auth.admin.sign_out, access_token)
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError(_transport_message(exc)) from exc


def _transport_message(exc: httpx.HTTPError) -> str:
    return str(exc) or "Auth service unavailable."
