"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from badge_registration.adapters.supabase_allowlist_repository import (
    SupabaseAllowListRepository,
)
from badge_registration.adapters.supabase_identity_service import (
    SupabaseIdentityService,
)
from badge_registration.adapters.supabase_photo_storage import SupabasePhotoStorage
from badge_registration.adapters.supabase_registration_repository import (
    SupabaseRegistrationRepository,
)
from badge_registration.config import Settings
from badge_registration.services.gate import AuthorizationGate, LoginService
from badge_registration.services.pages import InMemoryPageStore, PageStore
from badge_registration.services.registrations import RegistrationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gate: AuthorizationGate
    login_service: LoginService
    registration_service: RegistrationService
    page_store: PageStore


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    identity_service = SupabaseIdentityService(supabase_client)
    allowlist_repository = SupabaseAllowListRepository(
        supabase_client, table=resolved_settings.allowlist_table
    )
    registration_repository = SupabaseRegistrationRepository(
        supabase_client, table=resolved_settings.registrations_table
    )
    photo_storage = SupabasePhotoStorage(
        supabase_client, bucket=resolved_settings.photos_bucket
    )
    registration_service = RegistrationService(
        repository=registration_repository,
        storage=photo_storage,
        signed_url_ttl_seconds=resolved_settings.signed_url_ttl_seconds,
        list_limit=resolved_settings.list_limit,
    )
    return AppContainer(
        settings=resolved_settings,
        gate=AuthorizationGate(
            identity=identity_service, allowlist=allowlist_repository
        ),
        login_service=LoginService(
            identity=identity_service, redirect_to=resolved_settings.register_url
        ),
        registration_service=registration_service,
        page_store=InMemoryPageStore(ttl_seconds=resolved_settings.page_ttl_seconds),
    )
