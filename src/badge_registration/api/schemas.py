"""Pydantic request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from badge_registration.domain.photos import CropRect
from badge_registration.services.page import DELETE_PROMPT, RegistrationPage


class LoginRequest(BaseModel):
    """Login link request payload."""

    email: str = ""


class LoginResponse(BaseModel):
    """Login link request outcome."""

    sent: bool
    message: str


class DraftUpdate(BaseModel):
    """Typed draft input; omitted fields are left unchanged."""

    full_name: str | None = None
    country: str | None = None


class EditUpdate(BaseModel):
    """Typed edit dialog input; omitted fields are left unchanged."""

    full_name: str | None = None
    country: str | None = None


class CropUpdate(BaseModel):
    """Crop geometry chosen in the crop dialog, in source pixels."""

    x: int
    y: int
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    zoom: float = 1.0

    def to_rect(self) -> CropRect:
        return CropRect(x=self.x, y=self.y, width=self.width, height=self.height)


class ListItemView(BaseModel):
    """A listed registration."""

    id: str
    full_name: str
    country: str
    photo_path: str | None
    photo_url: str | None
    created_at: datetime | None


class DraftView(BaseModel):
    """Current draft registration."""

    full_name: str
    country: str
    photo_preview: str | None


class CropView(BaseModel):
    """Open crop dialog."""

    image: str
    source_width: int
    source_height: int
    x: int
    y: int
    width: int
    height: int
    zoom: float
    pending: bool


class EditView(BaseModel):
    """Open edit dialog."""

    registration_id: str
    full_name: str
    country: str
    saving: bool


class DeleteConfirmationView(BaseModel):
    """Delete awaiting confirmation."""

    registration_id: str
    prompt: str


class PageView(BaseModel):
    """Snapshot of a registration page."""

    page_id: str
    owner_email: str
    draft: DraftView
    items: list[ListItemView]
    loading_list: bool
    message: str
    notification: str | None
    crop: CropView | None
    edit: EditView | None
    confirm_delete: DeleteConfirmationView | None

    @classmethod
    def from_page(cls, page_id: str, page: RegistrationPage) -> "PageView":
        """Build a view from the page's current state."""
        state = page.state
        notification = page.visible_notification
        crop = state.crop
        edit = state.edit
        pending = state.pending_delete
        return cls(
            page_id=page_id,
            owner_email=state.owner_email,
            draft=DraftView(
                full_name=state.draft.full_name,
                country=state.draft.country,
                photo_preview=state.draft.photo.photo.preview
                if state.draft.photo
                else None,
            ),
            items=[
                ListItemView(
                    id=item.id,
                    full_name=item.registration.full_name,
                    country=item.registration.country,
                    photo_path=item.registration.photo_path,
                    photo_url=item.photo_url,
                    created_at=item.registration.created_at,
                )
                for item in state.items
            ],
            loading_list=state.loading_list,
            message=state.message,
            notification=notification.text if notification else None,
            crop=CropView(
                image=crop.source.data_url,
                source_width=crop.source.width,
                source_height=crop.source.height,
                x=crop.rect.x,
                y=crop.rect.y,
                width=crop.rect.width,
                height=crop.rect.height,
                zoom=crop.zoom,
                pending=state.crop_pending,
            )
            if crop
            else None,
            edit=EditView(
                registration_id=edit.registration_id,
                full_name=edit.full_name,
                country=edit.country,
                saving=edit.saving,
            )
            if edit
            else None,
            confirm_delete=DeleteConfirmationView(
                registration_id=pending.id, prompt=DELETE_PROMPT
            )
            if pending
            else None,
        )


class EnterResponse(BaseModel):
    """Outcome of entering the registration page."""

    page: PageView | None = None
    redirect: str | None = None
    message: str | None = None


class NavigationResponse(BaseModel):
    """Where the client should navigate next."""

    redirect: str
