"""Configuration for the user board application."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_ENVIRONMENT = "development"


@dataclass(frozen=True)
class AppConfig:
    """Settings handed to the controller and the web application."""

    api_url: str = DEFAULT_API_URL
    environment: str = DEFAULT_ENVIRONMENT
    request_timeout: Optional[float] = None

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "AppConfig":
        """Create an :class:`AppConfig` from raw dictionary data."""
        unknown = set(data.keys()) - {"api_url", "environment", "request_timeout"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        api_url = str(data.get("api_url") or DEFAULT_API_URL).strip()
        if not api_url:
            raise ValueError("api_url must not be empty")

        return AppConfig(
            api_url=api_url,
            environment=str(data.get("environment") or DEFAULT_ENVIRONMENT),
            request_timeout=_parse_timeout(data.get("request_timeout")),
        )


def _parse_timeout(value: object) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid request timeout: {value!r}") from exc
    if timeout <= 0:
        raise ValueError("Request timeout must be greater than zero")
    return timeout


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "userboard.yaml").resolve(strict=False)
    return candidate


def load_config_file(config_path: Path) -> AppConfig:
    """Load settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping of settings")
    return AppConfig.from_dict(raw)


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the configuration from the optional file and environment overrides."""

    env = os.environ if environ is None else environ
    explicit_path = env.get("USERBOARD_CONFIG")
    config_path = resolve_config_path(explicit_path)

    if config_path.exists():
        config = load_config_file(config_path)
    elif explicit_path:
        raise ValueError(f"Configuration file not found: {config_path}")
    else:
        config = AppConfig()

    overrides: Dict[str, object] = {}
    api_url = env.get("USERBOARD_API_URL", "").strip()
    if api_url:
        overrides["api_url"] = api_url
    environment = env.get("USERBOARD_ENV", "").strip()
    if environment:
        overrides["environment"] = environment
    timeout = env.get("USERBOARD_REQUEST_TIMEOUT", "").strip()
    if timeout:
        overrides["request_timeout"] = _parse_timeout(timeout)

    return replace(config, **overrides) if overrides else config


__all__ = ["AppConfig", "load_config", "load_config_file", "resolve_config_path"]
