"""Asynchronous HTTP client for the remote users service."""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional

import httpx

from .models import Draft, User

logger = logging.getLogger("userboard.client")


class ServiceError(Exception):
    """Raised when the users service cannot be reached or answers badly."""


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


class UsersClient:
    """Thin wrapper over :class:`httpx.AsyncClient` for the users endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "UsersClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServiceError(str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            message = f"Request failed with status code {response.status_code}"
            try:
                detail = _extract_error_message(response.json())
            except ValueError:
                detail = None
            if detail:
                message = f"{message} ({detail})"
            logger.warning("%s %s returned %s", method, path, response.status_code)
            raise ServiceError(message)

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError("Users service returned an invalid JSON response") from exc

    async def welcome(self) -> str:
        response = await self._request("GET", "/")
        return response.text

    async def health(self) -> float:
        """Return the service uptime in seconds."""

        payload = self._json(await self._request("GET", "/api/health"))
        if not isinstance(payload, dict):
            raise ServiceError("Health response was not a JSON object")
        uptime = payload.get("uptime")
        if isinstance(uptime, bool) or not isinstance(uptime, (int, float)):
            raise ServiceError("Health response did not include a numeric uptime")
        try:
            seconds = float(uptime)
        except OverflowError:
            seconds = math.inf
        # NaN and 1e400 (inf) decode as floats but cannot be floored
        if not math.isfinite(seconds):
            raise ServiceError("Health response did not include a numeric uptime")
        return seconds

    async def list_users(self) -> List[User]:
        payload = self._json(await self._request("GET", "/api/users"))
        if not isinstance(payload, list):
            raise ServiceError("Users response was not a JSON array")
        try:
            return [User.from_payload(item) for item in payload]
        except ValueError as exc:
            raise ServiceError(f"Users response was malformed: {exc}") from exc

    async def create_user(self, draft: Draft) -> User:
        payload = self._json(await self._request("POST", "/api/users", json=draft.to_payload()))
        try:
            return User.from_payload(payload)
        except ValueError as exc:
            raise ServiceError(f"Created user response was malformed: {exc}") from exc


__all__ = ["ServiceError", "UsersClient"]
