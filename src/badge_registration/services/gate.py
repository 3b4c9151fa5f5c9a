"""Authorization gate and login link dispatch."""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from badge_registration.domain.errors import AuthError
from badge_registration.domain.registrations import AllowListEntry

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class IdentityService(Protocol):
    """Interface for the identity/session provider."""

    async def get_session_email(self, access_token: str | None) -> str | None:
        """Return the email of the live session, if any."""

    async def sign_in_with_link(self, email: str, redirect_to: str) -> None:
        """Send a one-time login link that redirects to ``redirect_to``."""

    async def sign_out(self, access_token: str | None) -> None:
        """End the session bound to the access token."""


class AllowListRepository(Protocol):
    """Read-only interface for the allow-list."""

    async def find_by_email(self, email: str) -> AllowListEntry | None:
        """Return the allow-list row for an email, if present."""


class GateStatus(StrEnum):
    """Terminal states of a gate run."""

    READY = "ready"
    REDIRECT = "redirect"
    ERROR = "error"


@dataclass(frozen=True)
class GateOutcome:
    """Result of resolving a page entry."""

    status: GateStatus
    email: str | None = None
    default_country: str | None = None
    redirect_to: str | None = None
    message: str | None = None

    @classmethod
    def redirect_to_login(cls) -> "GateOutcome":
        return cls(status=GateStatus.REDIRECT, redirect_to=LOGIN_PATH)


@dataclass
class AuthorizationGate:
    """Resolves the session identity and checks it against the allow-list.

    The gate keeps no state between runs; every page entry resolves again.
    Unknown and deactivated emails take the same path so callers cannot tell
    them apart.
    """

    identity: IdentityService
    allowlist: AllowListRepository

    async def resolve(self, access_token: str | None) -> GateOutcome:
        """Run the gate for one page entry."""
        try:
            email = await self.identity.get_session_email(access_token)
        except AuthError as exc:
            logger.warning("Session lookup failed: %s", exc.message)
            email = None
        if not email:
            return GateOutcome.redirect_to_login()
        email = email.strip().lower()

        try:
            entry = await self.allowlist.find_by_email(email)
        except AuthError as exc:
            logger.warning("Allow-list lookup failed", extra={"email": email})
            return GateOutcome(status=GateStatus.ERROR, message=exc.message)

        if entry is None or not entry.active:
            await self.sign_out(access_token)
            return GateOutcome.redirect_to_login()

        return GateOutcome(
            status=GateStatus.READY,
            email=email,
            default_country=entry.default_country,
        )

    async def sign_out(self, access_token: str | None) -> None:
        """Sign out, logging rather than raising on failure."""
        try:
            await self.identity.sign_out(access_token)
        except AuthError as exc:
            logger.warning("Sign-out failed: %s", exc.message)


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login link request."""

    sent: bool
    message: str


@dataclass
class LoginService:
    """Dispatches one-time login links."""

    identity: IdentityService
    redirect_to: str

    async def send_link(self, email: str) -> LoginResult:
        """Ask the identity service to email a login link."""
        normalized = email.strip().lower()
        if not normalized:
            return LoginResult(sent=False, message="Enter your IWF mail.")
        try:
            await self.identity.sign_in_with_link(normalized, self.redirect_to)
        except AuthError as exc:
            logger.warning("Login link dispatch failed", extra={"email": normalized})
            return LoginResult(sent=False, message=exc.message)
        return LoginResult(sent=True, message="Login link sent. Check your IWF mail.")
