"""Registration page state container.

Every user action goes through one of the named operations below. Each
operation awaits its remote calls first and then applies its result to the
page state in one step, so an in-flight call never leaves the state half
updated.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from badge_registration.domain.errors import RegistrationError
from badge_registration.domain.photos import CropRect, CropSource, PhotoArtifact
from badge_registration.domain.registrations import DraftRegistration, ListItem
from badge_registration.services import cropping
from badge_registration.services.gate import (
    LOGIN_PATH,
    AuthorizationGate,
    GateOutcome,
    GateStatus,
)
from badge_registration.services.registrations import RegistrationService

logger = logging.getLogger(__name__)

SUCCESS_TEXT = "Registration saved."
DELETE_PROMPT = "Delete this registration?"


@dataclass
class CropState:
    """Open crop dialog: the selected source and the current geometry."""

    source: CropSource
    rect: CropRect
    zoom: float = cropping.MIN_ZOOM


@dataclass
class EditForm:
    """Open edit dialog for an existing registration."""

    registration_id: str
    full_name: str
    country: str
    saving: bool = False


@dataclass(frozen=True)
class Notification:
    """Transient success notice that hides itself at ``expires_at``."""

    text: str
    expires_at: float


@dataclass
class PageState:
    """Everything the registration page shows."""

    owner_email: str
    draft: DraftRegistration = field(default_factory=DraftRegistration)
    items: list[ListItem] = field(default_factory=list)
    message: str = ""
    loading_list: bool = False
    crop: CropState | None = None
    crop_pending: bool = False
    notification: Notification | None = None
    edit: EditForm | None = None
    pending_delete: ListItem | None = None
    closed: bool = False


@dataclass
class RegistrationPage:
    """Single writer for one registration page instance."""

    state: PageState
    service: RegistrationService
    gate: AuthorizationGate
    access_token: str | None = None
    success_dismiss_seconds: float = 2.0
    clock: Callable[[], float] = time.monotonic

    @classmethod
    async def enter(  # noqa: PLR0913
        cls,
        gate: AuthorizationGate,
        service: RegistrationService,
        access_token: str | None,
        success_dismiss_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> tuple[GateOutcome, "RegistrationPage | None"]:
        """Run the gate and, when allowed, open a page with a synced list."""
        outcome = await gate.resolve(access_token)
        if outcome.status is not GateStatus.READY or outcome.email is None:
            return outcome, None
        page = cls(
            state=PageState(owner_email=outcome.email),
            service=service,
            gate=gate,
            access_token=access_token,
            success_dismiss_seconds=success_dismiss_seconds,
            clock=clock,
        )
        page.state.draft.prefill_country(outcome.default_country)
        await page.refresh()
        return outcome, page

    async def refresh(self) -> None:
        """Replace the list with a fresh snapshot; keep it on failure."""
        self.state.loading_list = True
        try:
            items = await self.service.refresh(self.state.owner_email)
        except RegistrationError as exc:
            logger.warning(
                "Listing registrations failed",
                extra={"owner_email": self.state.owner_email},
            )
            self.state.message = exc.message
            return
        finally:
            self.state.loading_list = False
        self.state.items = items

    def update_draft(
        self, full_name: str | None = None, country: str | None = None
    ) -> None:
        """Apply typed input to the draft."""
        if full_name is not None:
            self.state.draft.full_name = full_name
        if country is not None:
            self.state.draft.country = country

    async def select_photo(self, data: bytes, content_type: str | None = None) -> None:
        """Load a selected file and open the crop dialog at default geometry."""
        self.state.message = ""
        try:
            source = await asyncio.to_thread(cropping.load_source, data, content_type)
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        self.state.crop = CropState(
            source=source,
            rect=cropping.centered_square(source.width, source.height),
        )

    def adjust_crop(self, rect: CropRect, zoom: float) -> None:
        """Record the geometry chosen in the crop dialog.

        The rectangle is kept square and inside the source; an invalid one
        leaves the previous geometry in place.
        """
        crop_state = self.state.crop
        if crop_state is None:
            self.state.message = "Select a photo first."
            return
        try:
            fitted = cropping.fit_square(
                rect, crop_state.source.width, crop_state.source.height
            )
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        self.state.message = ""
        crop_state.rect = fitted
        crop_state.zoom = cropping.clamp_zoom(zoom)

    async def apply_crop(self) -> None:
        """Encode the current crop and attach it to the draft.

        Only one crop may be in flight; a second request is rejected. On
        failure the previous photo, if any, stays on the draft. A result
        whose dialog was cancelled or replaced meanwhile is dropped.
        """
        self.state.message = ""
        crop_state = self.state.crop
        if crop_state is None:
            return
        if self.state.crop_pending:
            self.state.message = "A crop is already in progress."
            return
        rect, zoom = crop_state.rect, crop_state.zoom
        self.state.crop_pending = True
        try:
            encoded = await cropping.crop(crop_state.source, rect)
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        finally:
            self.state.crop_pending = False
        if self.state.crop is not crop_state:
            logger.info("Discarding crop for a closed dialog")
            return
        self.state.draft.photo = PhotoArtifact(
            source=crop_state.source, rect=rect, zoom=zoom, photo=encoded
        )
        self.state.crop = None

    def cancel_crop(self) -> None:
        self.state.crop = None

    async def submit(self) -> None:
        """Submit the draft, then reset it and re-sync the list."""
        self.state.message = ""
        try:
            await self.service.submit(self.state.owner_email, self.state.draft)
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        self.state.draft.clear_after_submit()
        await self.refresh()
        self.state.notification = Notification(
            text=SUCCESS_TEXT,
            expires_at=self.clock() + self.success_dismiss_seconds,
        )

    @property
    def visible_notification(self) -> Notification | None:
        """Return the success notice unless it has expired."""
        notification = self.state.notification
        if notification is not None and self.clock() >= notification.expires_at:
            self.state.notification = None
            return None
        return notification

    def dismiss_notification(self) -> None:
        self.state.notification = None

    def open_edit(self, registration_id: str) -> None:
        """Open the edit dialog pre-filled from the listed registration."""
        item = self._find_item(registration_id)
        if item is None:
            return
        self.state.edit = EditForm(
            registration_id=item.id,
            full_name=item.registration.full_name or "",
            country=item.registration.country or "",
        )

    def update_edit(
        self, full_name: str | None = None, country: str | None = None
    ) -> None:
        """Apply typed input to the open edit dialog."""
        if self.state.edit is None:
            return
        if full_name is not None:
            self.state.edit.full_name = full_name
        if country is not None:
            self.state.edit.country = country

    async def save_edit(self) -> None:
        """Save the edit dialog; keep it open with its values on failure."""
        form = self.state.edit
        if form is None:
            return
        self.state.message = ""
        form.saving = True
        try:
            await self.service.update(
                owner_email=self.state.owner_email,
                registration_id=form.registration_id,
                full_name=form.full_name,
                country=form.country,
            )
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        finally:
            form.saving = False
        self.state.edit = None
        await self.refresh()

    def cancel_edit(self) -> None:
        self.state.edit = None

    def request_delete(self, registration_id: str) -> None:
        """Ask for confirmation before deleting a registration."""
        item = self._find_item(registration_id)
        if item is not None:
            self.state.pending_delete = item

    async def confirm_delete(self) -> None:
        """Delete the registration awaiting confirmation and re-sync."""
        item = self.state.pending_delete
        if item is None:
            return
        self.state.pending_delete = None
        self.state.message = ""
        try:
            await self.service.delete(self.state.owner_email, item.registration)
        except RegistrationError as exc:
            self.state.message = exc.message
            return
        await self.refresh()

    def cancel_delete(self) -> None:
        self.state.pending_delete = None

    async def logout(self) -> str:
        """Sign out and return where the browser should go next."""
        await self.gate.sign_out(self.access_token)
        self.state.closed = True
        return LOGIN_PATH

    def _find_item(self, registration_id: str) -> ListItem | None:
        for item in self.state.items:
            if item.id == registration_id:
                return item
        self.state.message = "Registration not found."
        return None
