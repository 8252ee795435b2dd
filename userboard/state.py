"""State transitions applied by the view-sync controller.

Every asynchronous step of the controller resolves into one of the events
below. :func:`reduce` folds an event into the current :class:`ViewState`
and returns the next one, so interleavings of concurrent requests can be
replayed synchronously.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Tuple, Union

from .models import Draft, User, ViewState

ERROR_MARKER = "Error"

VALIDATION_MESSAGE = "Please fill in all fields"
CREATED_MESSAGE = "User added successfully!"


@dataclass(frozen=True)
class ListStarted:
    """A refresh of the user collection has been issued."""


@dataclass(frozen=True)
class ListSucceeded:
    """The service returned the full user collection."""

    users: Tuple[User, ...]


@dataclass(frozen=True)
class ListFailed:
    """Fetching the user collection failed."""

    reason: str


@dataclass(frozen=True)
class CreateRejected:
    """The draft was missing a name or an email."""


@dataclass(frozen=True)
class CreateStarted:
    """A complete draft has been posted to the service."""


@dataclass(frozen=True)
class CreateSucceeded:
    """The service stored the draft and returned the new user."""

    user: User


@dataclass(frozen=True)
class CreateFailed:
    """Posting the draft failed."""

    reason: str


@dataclass(frozen=True)
class RequestFinished:
    """Emitted once a list or create request resolves, whatever the outcome."""


@dataclass(frozen=True)
class HealthSucceeded:
    """The health probe answered with the service uptime in seconds."""

    uptime: float


@dataclass(frozen=True)
class HealthFailed:
    """The health probe could not be completed."""

    reason: str


@dataclass(frozen=True)
class DraftChanged:
    """The unsaved input was edited."""

    draft: Draft


Event = Union[
    ListStarted,
    ListSucceeded,
    ListFailed,
    CreateRejected,
    CreateStarted,
    CreateSucceeded,
    CreateFailed,
    RequestFinished,
    HealthSucceeded,
    HealthFailed,
    DraftChanged,
]


def is_error_message(message: str) -> bool:
    """Return ``True`` when ``message`` should be rendered as an error."""

    return ERROR_MARKER in message


def format_uptime(uptime: float) -> str:
    return f"Backend is healthy! Uptime: {math.floor(uptime)}s"


def reduce(state: ViewState, event: Event) -> ViewState:
    """Apply ``event`` to ``state`` and return the resulting state."""

    if isinstance(event, ListStarted):
        return replace(state, loading=True, message="")
    if isinstance(event, ListSucceeded):
        return replace(state, users=tuple(event.users), message="")
    if isinstance(event, ListFailed):
        return replace(state, message=f"{ERROR_MARKER} fetching users: {event.reason}")
    if isinstance(event, CreateRejected):
        return replace(state, message=VALIDATION_MESSAGE)
    if isinstance(event, CreateStarted):
        return replace(state, loading=True)
    if isinstance(event, CreateSucceeded):
        return replace(
            state,
            users=state.users + (event.user,),
            draft=Draft(),
            message=CREATED_MESSAGE,
        )
    if isinstance(event, CreateFailed):
        return replace(state, message=f"{ERROR_MARKER} adding user: {event.reason}")
    if isinstance(event, RequestFinished):
        return replace(state, loading=False)
    if isinstance(event, HealthSucceeded):
        return replace(state, backend_status=format_uptime(event.uptime))
    if isinstance(event, HealthFailed):
        return replace(state, backend_status=f"Backend connection failed: {event.reason}")
    if isinstance(event, DraftChanged):
        return replace(state, draft=event.draft)
    raise TypeError(f"Unsupported event: {event!r}")


__all__ = [
    "CREATED_MESSAGE",
    "CreateFailed",
    "CreateRejected",
    "CreateStarted",
    "CreateSucceeded",
    "DraftChanged",
    "Event",
    "HealthFailed",
    "HealthSucceeded",
    "ListFailed",
    "ListStarted",
    "ListSucceeded",
    "RequestFinished",
    "VALIDATION_MESSAGE",
    "format_uptime",
    "is_error_message",
    "reduce",
]
