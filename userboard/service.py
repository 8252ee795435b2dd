"""Application factory for the user board."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from .client import UsersClient
from .config import AppConfig, load_config
from .controller import ViewSyncController
from .models import ViewState
from .web import register_ui_routes

logger = logging.getLogger("userboard.service")


class UserView(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None


class DraftView(BaseModel):
    name: str
    email: str


class ViewStateResponse(BaseModel):
    users: List[UserView]
    loading: bool
    message: str
    backend_status: str
    draft: DraftView


def _state_to_response(state: ViewState) -> ViewStateResponse:
    return ViewStateResponse(
        users=[
            UserView(id=user.id, name=user.name, email=user.email, created_at=user.created_at)
            for user in state.users
        ],
        loading=state.loading,
        message=state.message,
        backend_status=state.backend_status,
        draft=DraftView(name=state.draft.name, email=state.draft.email),
    )


def create_app(
    *,
    config: AppConfig | None = None,
    client: UsersClient | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application serving the user board."""

    app_config = config or load_config()
    users_client = client or UsersClient(app_config.api_url, timeout=app_config.request_timeout)
    controller = ViewSyncController(users_client, app_config)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "User board ready (backend=%s, environment=%s)",
            app_config.api_url,
            app_config.environment,
        )
        try:
            yield
        finally:
            await users_client.aclose()

    app = FastAPI(
        title="User Board",
        version="0.1.0",
        description="Single-page view over a remote users service.",
        lifespan=lifespan,
    )
    app.state.config = app_config
    app.state.controller = controller

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/state", response_model=ViewStateResponse)
    async def view_state() -> ViewStateResponse:
        return _state_to_response(controller.state)

    register_ui_routes(app, controller)
    return app


__all__ = ["create_app"]
