"""Shared pytest fixtures and configuration for pytest."""

import pytest

# Environment read by ngc at runtime; tests start without it
_NGC_ENV_VARS = (
    "NGC_LOG_LEVEL",
    "GEMINI_CLI_IDE_SERVER_PORT",
    "GEMINI_CLI_IDE_WORKSPACE_PATH",
    "QWEN_CODE_IDE_SERVER_PORT",
    "QWEN_CODE_IDE_WORKSPACE_PATH",
)


@pytest.fixture(autouse=True)
def clean_ngc_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove ngc-related environment variables for the duration of a test."""
    for name in _NGC_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
