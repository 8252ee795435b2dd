"""View-sync controller reconciling the remote user collection with view state."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .client import ServiceError, UsersClient
from .config import AppConfig
from .models import Draft, ViewState
from .state import (
    CreateFailed,
    CreateRejected,
    CreateStarted,
    CreateSucceeded,
    DraftChanged,
    Event,
    HealthFailed,
    HealthSucceeded,
    ListFailed,
    ListStarted,
    ListSucceeded,
    RequestFinished,
    reduce,
)

logger = logging.getLogger("userboard.controller")

StateListener = Callable[[ViewState, Event], None]


class ViewSyncController:
    """Own the view state and drive it from the users service.

    Operations are coroutines that suspend at the network call. Nothing
    serialises them: two overlapping requests each apply their result to
    whatever the state is when they resolve, so the last write wins.
    """

    def __init__(
        self,
        client: UsersClient,
        config: AppConfig,
        *,
        listener: Optional[StateListener] = None,
    ) -> None:
        self._client = client
        self._config = config
        self._listener = listener
        self._state = ViewState()
        self._activated = False

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def activated(self) -> bool:
        return self._activated

    def dispatch(self, event: Event) -> ViewState:
        self._state = reduce(self._state, event)
        logger.debug("Applied %s -> loading=%s", type(event).__name__, self._state.loading)
        if self._listener is not None:
            self._listener(self._state, event)
        return self._state

    def update_draft(self, *, name: Optional[str] = None, email: Optional[str] = None) -> Draft:
        current = self._state.draft
        draft = Draft(
            name=current.name if name is None else name,
            email=current.email if email is None else email,
        )
        self.dispatch(DraftChanged(draft))
        return draft

    async def list_users(self) -> None:
        self.dispatch(ListStarted())
        try:
            users = await self._client.list_users()
        except ServiceError as exc:
            logger.warning("Fetching users failed: %s", exc)
            self.dispatch(ListFailed(str(exc)))
        else:
            logger.info("Fetched %d user(s)", len(users))
            self.dispatch(ListSucceeded(tuple(users)))
        finally:
            self.dispatch(RequestFinished())

    async def create_user(self, draft: Optional[Draft] = None) -> None:
        if draft is not None:
            self.dispatch(DraftChanged(draft))
        draft = self._state.draft

        if not draft.is_complete():
            self.dispatch(CreateRejected())
            return

        self.dispatch(CreateStarted())
        try:
            user = await self._client.create_user(draft)
        except ServiceError as exc:
            logger.warning("Creating user %r failed: %s", draft.name, exc)
            self.dispatch(CreateFailed(str(exc)))
        else:
            logger.info("Created user %s (%s)", user.id, user.email)
            self.dispatch(CreateSucceeded(user))
        finally:
            self.dispatch(RequestFinished())

    async def check_health(self) -> None:
        try:
            uptime = await self._client.health()
        except ServiceError as exc:
            logger.warning("Health check against %s failed: %s", self._client.base_url, exc)
            self.dispatch(HealthFailed(str(exc)))
            return
        self.dispatch(HealthSucceeded(uptime))

    async def activate(self) -> None:
        """Load users and probe the service the first time the view opens."""

        if self._activated:
            return
        self._activated = True
        await asyncio.gather(self.list_users(), self.check_health())


__all__ = ["StateListener", "ViewSyncController"]
