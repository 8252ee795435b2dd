"""Domain models for the user board view."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    # fromisoformat() on older interpreters rejects the "Z" suffix
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class User:
    """Represents a user record held by the remote users service."""

    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None

    @staticmethod
    def from_payload(data: Any) -> "User":
        """Create a :class:`User` from a decoded JSON object."""
        if not isinstance(data, Mapping):
            raise ValueError("User payload must be a JSON object")

        required_fields = {"id", "name", "email"}
        missing = required_fields - data.keys()
        if missing:
            raise ValueError(f"User payload is missing fields: {', '.join(sorted(missing))}")

        return User(
            id=str(data["id"]),
            name=str(data["name"]),
            email=str(data["email"]),
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class Draft:
    """Unsaved input for a user that has not been submitted yet."""

    name: str = ""
    email: str = ""

    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.email)

    def to_payload(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class ViewState:
    """Snapshot of everything the page renders."""

    users: Tuple[User, ...] = ()
    loading: bool = False
    message: str = ""
    backend_status: str = ""
    draft: Draft = field(default_factory=Draft)


__all__ = ["Draft", "User", "ViewState"]
