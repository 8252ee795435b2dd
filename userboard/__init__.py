"""Single-page user board backed by a remote users service."""

from __future__ import annotations

from typing import Any

from .config import AppConfig, load_config
from .models import Draft, User, ViewState


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the web application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "AppConfig",
    "Draft",
    "User",
    "ViewState",
    "create_app",
    "load_config",
]
