"""Environment-driven configuration for the budgeting server connection.

Values come from the process environment. Entrypoints call
:func:`load_settings`, which first loads a local ``.env`` with
``python-dotenv`` without overriding variables that are already set.

Variables
---------
- ``ACTUAL_SERVER_URL`` (required): base URL of the actual-http-api server,
  e.g. ``http://localhost:5007``. The ``/v1`` prefix is added by the client.
- ``ACTUAL_API_KEY`` (required): value sent in the ``x-api-key`` header.
- ``ACTUAL_BUDGET_ENCRYPTION_PASSWORD`` (optional): for end-to-end encrypted
  budget files.
- ``ACTUAL_TIMEOUT_SECONDS`` (optional): request timeout, default ``30``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

MANDATORY_ENV_VARS: tuple[str, ...] = ("ACTUAL_SERVER_URL", "ACTUAL_API_KEY")
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Connection settings for :class:`~budget_facade.http_client.HttpBudgetClient`."""

    server_url: str
    api_key: str
    encryption_password: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def api_base_url(self) -> str:
        return self.server_url.rstrip("/") + "/v1"


def validate_mandatory_environment_variables(names: Iterable[str]) -> None:
    """Raise :class:`ConfigError` for the first variable in ``names`` that is unset or blank."""

    for name in names:
        if not (os.getenv(name) or "").strip():
            raise ConfigError(f"{name} environment variable is mandatory")


def _timeout_from_env() -> float:
    raw = os.getenv("ACTUAL_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"ACTUAL_TIMEOUT_SECONDS must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"ACTUAL_TIMEOUT_SECONDS must be positive, got {raw!r}")
    return value


def settings_from_env() -> ClientSettings:
    """Build :class:`ClientSettings` from the current environment (no ``.env`` loading)."""

    validate_mandatory_environment_variables(MANDATORY_ENV_VARS)
    return ClientSettings(
        server_url=os.environ["ACTUAL_SERVER_URL"].strip(),
        api_key=os.environ["ACTUAL_API_KEY"].strip(),
        encryption_password=os.getenv("ACTUAL_BUDGET_ENCRYPTION_PASSWORD") or None,
        timeout_seconds=_timeout_from_env(),
    )


def load_settings(*, dotenv_path: Path | None = None) -> ClientSettings:
    """Load ``.env`` (without overriding the environment) and return settings."""

    load_dotenv(dotenv_path=dotenv_path or Path.cwd() / ".env", override=False)
    return settings_from_env()


__all__ = [
    "ClientSettings",
    "MANDATORY_ENV_VARS",
    "validate_mandatory_environment_variables",
    "settings_from_env",
    "load_settings",
]
