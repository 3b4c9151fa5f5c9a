"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request

from badge_registration.api.pages import router as pages_router
from badge_registration.api.schemas import LoginRequest, LoginResponse
from badge_registration.app_logging import configure_logging
from badge_registration.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Badge Registration")
    app.state.container = container

    app.include_router(pages_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/login")
    async def login(body: LoginRequest, request: Request) -> LoginResponse:
        """Email a one-time login link."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.login_service.send_link(body.email)
        if result.sent:
            logger.info("Login link sent")
        return LoginResponse(sent=result.sent, message=result.message)

    return app
