"""Pytest configuration for test isolation.

The client provider reads connection settings from the environment (and a
local ``.env``) and keeps one server connection per process. Tests must not see
the developer's real ``ACTUAL_*`` variables or a connection left behind by an
earlier test, so both are reset around every test.
"""

from __future__ import annotations

import pytest

from budget_facade.client import reset_client

_ENV_VARS = (
    "ACTUAL_SERVER_URL",
    "ACTUAL_API_KEY",
    "ACTUAL_BUDGET_ENCRYPTION_PASSWORD",
    "ACTUAL_TIMEOUT_SECONDS",
    "ACTUAL_BUDGET_SYNC_ID",
    "BUDGET_FACADE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path, monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep load_dotenv() from picking up a .env in the repo checkout.
    monkeypatch.chdir(tmp_path)
    reset_client()
    yield
    reset_client()
