"""Tests for the HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from badge_registration.api.app import create_app
from tests.conftest import OWNER, TOKEN, make_image_bytes

AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


def _enter(client: TestClient) -> dict:
    response = client.post("/pages", headers=AUTH)
    assert response.status_code == 200
    page = response.json()["page"]
    assert page is not None
    return page


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_login_sends_link(client: TestClient, identity_service) -> None:
    response = client.post("/login", json={"email": "Alice@IWF.test"})

    assert response.json() == {
        "sent": True,
        "message": "Login link sent. Check your IWF mail.",
    }
    assert identity_service.sent_links == [(OWNER, "https://badges.test/register")]


def test_login_without_email(client: TestClient) -> None:
    response = client.post("/login", json={"email": ""})

    assert response.json() == {"sent": False, "message": "Enter your IWF mail."}


def test_enter_without_session_redirects(client: TestClient) -> None:
    response = client.post("/pages")

    assert response.status_code == 200
    assert response.json() == {"page": None, "redirect": "/login", "message": None}


def test_enter_with_cookie_session(client: TestClient) -> None:
    client.cookies.set("sb-access-token", TOKEN)

    response = client.post("/pages")

    page = response.json()["page"]
    assert page["owner_email"] == OWNER
    assert page["draft"]["country"] == "Italy"


def test_enter_reports_allowlist_error(
    client: TestClient, allowlist_repository
) -> None:
    allowlist_repository.error = "permission denied"

    response = client.post("/pages", headers=AUTH)

    assert response.json() == {
        "page": None,
        "redirect": None,
        "message": "permission denied",
    }


def test_unknown_page_is_not_found(client: TestClient) -> None:
    assert client.get("/pages/missing").status_code == 404


def test_register_with_cropped_photo(client: TestClient, photo_storage) -> None:
    page_id = _enter(client)["page_id"]

    client.put(f"/pages/{page_id}/draft", json={"full_name": "Jane Doe"})
    uploaded = client.post(
        f"/pages/{page_id}/photo",
        files={"file": ("photo.png", make_image_bytes(100, 60), "image/png")},
    ).json()
    assert uploaded["crop"]["width"] == 60
    assert uploaded["crop"]["image"].startswith("data:image/png;base64,")

    adjusted = client.put(
        f"/pages/{page_id}/crop",
        json={"x": 0, "y": 0, "width": 50, "height": 50, "zoom": 1.5},
    ).json()
    assert adjusted["crop"]["zoom"] == 1.5

    applied = client.post(f"/pages/{page_id}/crop/apply").json()
    assert applied["crop"] is None
    assert applied["draft"]["photo_preview"].startswith("data:image/jpeg;base64,")

    submitted = client.post(f"/pages/{page_id}/submit").json()

    assert submitted["message"] == ""
    assert submitted["notification"] == "Registration saved."
    assert submitted["draft"] == {
        "full_name": "",
        "country": "Italy",
        "photo_preview": None,
    }
    assert len(submitted["items"]) == 1
    item = submitted["items"][0]
    assert item["full_name"] == "Jane Doe"
    assert item["photo_url"].startswith("https://storage.test/")
    assert item["photo_path"] in photo_storage.objects

    dismissed = client.post(f"/pages/{page_id}/success/dismiss").json()
    assert dismissed["notification"] is None


def test_submit_without_photo_shows_message(client: TestClient) -> None:
    page_id = _enter(client)["page_id"]
    client.put(f"/pages/{page_id}/draft", json={"full_name": "Jane Doe"})

    submitted = client.post(f"/pages/{page_id}/submit").json()

    assert submitted["message"] == "Upload and crop a photo."
    assert submitted["items"] == []


def test_crop_geometry_must_be_positive(client: TestClient) -> None:
    page_id = _enter(client)["page_id"]

    response = client.put(
        f"/pages/{page_id}/crop",
        json={"x": 0, "y": 0, "width": 0, "height": 10},
    )

    assert response.status_code == 422


def test_edit_and_delete_registration(
    client: TestClient, registration_repository
) -> None:
    row = registration_repository.add_row(photo_path=f"{OWNER}/1.jpg")
    page_id = _enter(client)["page_id"]

    opened = client.post(f"/pages/{page_id}/registrations/{row.id}/edit").json()
    assert opened["edit"]["full_name"] == "Jane Doe"
    client.put(f"/pages/{page_id}/edit", json={"country": "Germany"})
    saved = client.post(f"/pages/{page_id}/edit/save").json()
    assert saved["edit"] is None
    assert saved["items"][0]["country"] == "Germany"

    asked = client.post(f"/pages/{page_id}/registrations/{row.id}/delete").json()
    assert asked["confirm_delete"] == {
        "registration_id": row.id,
        "prompt": "Delete this registration?",
    }
    deleted = client.post(f"/pages/{page_id}/delete/confirm").json()
    assert deleted["items"] == []
    assert deleted["confirm_delete"] is None


def test_logout_closes_page(client: TestClient, identity_service) -> None:
    page_id = _enter(client)["page_id"]

    response = client.post(f"/pages/{page_id}/logout")

    assert response.json() == {"redirect": "/login"}
    assert identity_service.signed_out == [TOKEN]
    assert client.get(f"/pages/{page_id}").status_code == 404


def test_non_square_crop_keeps_default_geometry(client: TestClient) -> None:
    page_id = _enter(client)["page_id"]
    client.post(
        f"/pages/{page_id}/photo",
        files={"file": ("photo.png", make_image_bytes(64, 48), "image/png")},
    )

    adjusted = client.put(
        f"/pages/{page_id}/crop",
        json={"x": 0, "y": 0, "width": 60, "height": 10},
    ).json()

    assert adjusted["message"] == "Crop must be square."
    assert (adjusted["crop"]["width"], adjusted["crop"]["height"]) == (48, 48)
