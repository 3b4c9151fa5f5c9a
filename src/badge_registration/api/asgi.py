"""ASGI entrypoint for the badge registration API."""

from badge_registration.api.app import create_app
from badge_registration.containers import build_container

app = create_app(build_container())
