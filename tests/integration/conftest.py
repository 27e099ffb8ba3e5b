"""Shared fixtures for integration tests.

The application is built with a recording sink so tests can assert on the
exact canonical log lines emitted for each request.
"""

import asyncio
import json
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, StreamingResponse
from httpx import ASGITransport, AsyncClient

from clog.api.main import create_app
from clog.core.config import Settings, get_settings
from clog.core.context import add_int, clear_canonical_log, set_string


class RecordingSink:
    """Canonical log sink that keeps every emitted line."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.lines]


def add_test_routes(application: FastAPI) -> None:
    """Register routes exercising canonical log annotations."""

    @application.get("/test")
    async def plain() -> PlainTextResponse:
        return PlainTextResponse("OK")

    @application.post("/echo")
    async def echo() -> PlainTextResponse:
        return PlainTextResponse("received")

    @application.get("/fanout")
    async def fanout() -> dict[str, int]:
        async def downstream(name: str) -> None:
            await asyncio.sleep(0)
            set_string(f"downstream.{name}", "ok")
            add_int("downstream.calls", 1)

        await asyncio.gather(downstream("users"), downstream("billing"))
        return {"calls": 2}

    @application.get("/sync")
    def sync_handler() -> dict[str, str]:
        set_string("handler.kind", "sync")
        return {"kind": "sync"}

    @application.get("/boom")
    async def boom() -> None:
        set_string("stage", "before-failure")
        raise RuntimeError("database unavailable")

    @application.get("/stream")
    async def stream() -> StreamingResponse:
        set_string("stream.started", "yes")

        async def body() -> AsyncIterator[bytes]:
            yield b"first,"
            set_string("stream.finished", "yes")
            yield b"second"

        return StreamingResponse(body(), media_type="text/plain")


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache and ambient canonical log around each test."""
    get_settings.cache_clear()
    clear_canonical_log()
    yield
    get_settings.cache_clear()
    clear_canonical_log()


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a recording canonical log sink."""
    return RecordingSink()


@pytest.fixture
def app_factory(sink: RecordingSink) -> Callable[..., FastAPI]:
    """Build applications wired to the recording sink."""

    def _create(settings: Settings | None = None) -> FastAPI:
        application = create_app(settings or Settings(), log_fn=sink)
        add_test_routes(application)
        return application

    return _create


@pytest.fixture
async def client(app_factory: Callable[..., FastAPI]) -> AsyncGenerator[AsyncClient]:
    """Provide an async client for the application with test routes."""
    transport = ASGITransport(app=app_factory(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
