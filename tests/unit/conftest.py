"""Shared fixtures for unit tests."""

import os
import threading
from collections.abc import Generator
from typing import Any, cast

import pytest
from pytest_mock import MockerFixture, MockType

from clog.core.config import Settings, get_settings
from clog.core.context import clear_canonical_log


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a Settings object with test values.

    Returns:
        Settings: Settings built from test environment variables.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")

    return Settings()


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    """Mock uvicorn.run to prevent server startup.

    Returns:
        MockType: The mock for assertion purposes.
    """
    return mocker.patch("uvicorn.run")


@pytest.fixture
def mock_main_dependencies(
    mocker: MockerFixture,
    mock_settings: Settings,
) -> dict[str, MockType]:
    """Mock common main.py dependencies.

    Returns:
        dict[str, MockType]: Dictionary of mocked dependencies.
    """
    mocks = {
        "get_settings": mocker.patch("main.get_settings"),
        "setup_logging": mocker.patch("main.setup_logging"),
        "logger": mocker.patch("main.logger"),
        "uvicorn_run": mocker.patch("uvicorn.run"),
    }
    mocks["get_settings"].return_value = mock_settings
    return cast("dict[str, MockType]", mocks)


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Backup and restore environment variables to prevent test interference.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "PORT",
        "LOG_CONFIG__",
        "CANONICAL_LOG_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_canonical_log() -> Generator[None]:
    """Detach any canonical log before and after each test."""
    clear_canonical_log()
    yield
    clear_canonical_log()


@pytest.fixture
def thread_sync() -> dict[str, Any]:
    """Provide thread synchronization utilities for thread safety tests.

    Returns:
        dict[str, Any]: Dictionary with threading utilities.
    """

    def create_barrier(n: int) -> threading.Barrier:
        """Create a barrier for n threads."""
        return threading.Barrier(n)

    def create_results() -> list[Any]:
        """Create a new results list."""
        return []

    return {
        "barrier": create_barrier,
        "event": threading.Event,
        "lock": threading.Lock,
        "create_results": create_results,
    }
