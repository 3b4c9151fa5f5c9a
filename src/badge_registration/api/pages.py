"""Registration page endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import (
    APIRouter,
    Cookie,
    Depends,
    Header,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from badge_registration.api.schemas import (
    CropUpdate,
    DraftUpdate,
    EditUpdate,
    EnterResponse,
    NavigationResponse,
    PageView,
)
from badge_registration.services.page import RegistrationPage

if TYPE_CHECKING:
    from badge_registration.containers import AppContainer

router = APIRouter(prefix="/pages", tags=["pages"])


def get_access_token(
    authorization: str | None = Header(default=None),
    sb_access_token: str | None = Cookie(default=None, alias="sb-access-token"),
) -> str | None:
    """Read the session token from a bearer header or the auth cookie."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return sb_access_token or None


def _load_page(request: Request, page_id: str) -> RegistrationPage:
    container: AppContainer = request.app.state.container
    page = container.page_store.get(page_id)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return page


@router.post("")
async def enter_page(
    request: Request, access_token: str | None = Depends(get_access_token)
) -> EnterResponse:
    """Run the authorization gate and open a registration page."""
    container: AppContainer = request.app.state.container
    outcome, page = await RegistrationPage.enter(
        gate=container.gate,
        service=container.registration_service,
        access_token=access_token,
        success_dismiss_seconds=container.settings.success_dismiss_seconds,
    )
    if page is None:
        return EnterResponse(redirect=outcome.redirect_to, message=outcome.message)
    page_id = container.page_store.add(page)
    return EnterResponse(page=PageView.from_page(page_id, page))


@router.get("/{page_id}")
async def get_page(page_id: str, request: Request) -> PageView:
    """Return the current page snapshot."""
    page = _load_page(request, page_id)
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/refresh")
async def refresh_page(page_id: str, request: Request) -> PageView:
    """Re-sync the registration list."""
    page = _load_page(request, page_id)
    await page.refresh()
    return PageView.from_page(page_id, page)


@router.put("/{page_id}/draft")
async def update_draft(page_id: str, body: DraftUpdate, request: Request) -> PageView:
    """Apply typed name/country input to the draft."""
    page = _load_page(request, page_id)
    page.update_draft(full_name=body.full_name, country=body.country)
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/photo")
async def select_photo(page_id: str, file: UploadFile, request: Request) -> PageView:
    """Load a selected photo and open the crop dialog."""
    page = _load_page(request, page_id)
    data = await file.read()
    await page.select_photo(data, file.content_type)
    return PageView.from_page(page_id, page)


@router.put("/{page_id}/crop")
async def adjust_crop(page_id: str, body: CropUpdate, request: Request) -> PageView:
    """Record the crop geometry chosen in the dialog."""
    page = _load_page(request, page_id)
    page.adjust_crop(body.to_rect(), body.zoom)
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/crop/apply")
async def apply_crop(page_id: str, request: Request) -> PageView:
    """Encode the crop and attach it to the draft."""
    page = _load_page(request, page_id)
    await page.apply_crop()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/crop/cancel")
async def cancel_crop(page_id: str, request: Request) -> PageView:
    page = _load_page(request, page_id)
    page.cancel_crop()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/submit")
async def submit(page_id: str, request: Request) -> PageView:
    """Submit the draft registration."""
    page = _load_page(request, page_id)
    await page.submit()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/success/dismiss")
async def dismiss_success(page_id: str, request: Request) -> PageView:
    page = _load_page(request, page_id)
    page.dismiss_notification()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/registrations/{registration_id}/edit")
async def open_edit(page_id: str, registration_id: str, request: Request) -> PageView:
    """Open the edit dialog for a listed registration."""
    page = _load_page(request, page_id)
    page.open_edit(registration_id)
    return PageView.from_page(page_id, page)


@router.put("/{page_id}/edit")
async def update_edit(page_id: str, body: EditUpdate, request: Request) -> PageView:
    page = _load_page(request, page_id)
    page.update_edit(full_name=body.full_name, country=body.country)
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/edit/save")
async def save_edit(page_id: str, request: Request) -> PageView:
    """Save the edit dialog."""
    page = _load_page(request, page_id)
    await page.save_edit()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/edit/cancel")
async def cancel_edit(page_id: str, request: Request) -> PageView:
    page = _load_page(request, page_id)
    page.cancel_edit()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/registrations/{registration_id}/delete")
async def request_delete(
    page_id: str, registration_id: str, request: Request
) -> PageView:
    """Ask for confirmation before deleting a registration."""
    page = _load_page(request, page_id)
    page.request_delete(registration_id)
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/delete/confirm")
async def confirm_delete(page_id: str, request: Request) -> PageView:
    """Delete the registration awaiting confirmation."""
    page = _load_page(request, page_id)
    await page.confirm_delete()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/delete/cancel")
async def cancel_delete(page_id: str, request: Request) -> PageView:
    page = _load_page(request, page_id)
    page.cancel_delete()
    return PageView.from_page(page_id, page)


@router.post("/{page_id}/logout")
async def logout(page_id: str, request: Request) -> NavigationResponse:
    """Sign out and close the page."""
    container: AppContainer = request.app.state.container
    page = _load_page(request, page_id)
    redirect = await page.logout()
    container.page_store.discard(page_id)
    return NavigationResponse(redirect=redirect)
