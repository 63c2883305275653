"""Pytest configuration providing basic asyncio support and clean state."""

from __future__ import annotations

import asyncio
import inspect

import pytest

from config import reset_config
from db.session import init_db

_CONFIG_ENV_VARS = (
    "APP_ENV",
    "ANALYZER_BACKEND",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "LLM_MAX_RETRIES",
    "LLM_BACKOFF_SECONDS",
    "LLM_MAX_BACKOFF_SECONDS",
    "LLM_TIMEOUT_SECONDS",
    "HISTORY_LIMIT",
    "JWT_SECRET",
    "JWT_ISSUER",
    "JWT_AUDIENCE",
    "REQUEST_ID_HEADER",
)


def pytest_pyfunc_call(pyfuncitem):  # pragma: no cover - pytest hook
    """Allow pytest to run ``async def`` tests without extra plugins."""
    test_func = pyfuncitem.obj

    if inspect.iscoroutinefunction(test_func):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(test_func)
        call_args = {
            name: value
            for name, value in funcargs.items()
            if name in sig.parameters
        }
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_func(**call_args))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch):
    """Start every test from default configuration and an empty store."""
    for key in _CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    init_db()
    yield
    monkeypatch.undo()
    reset_config()
    init_db()
