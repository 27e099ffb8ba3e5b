"""Fixtures for API middleware tests."""

from collections.abc import Callable
from typing import cast

import pytest
from fastapi import Request, Response
from pytest_mock import MockerFixture, MockType
from starlette.datastructures import URL

from clog.api.middleware.canonical_logging import CanonicalLoggingMiddleware
from clog.core.config import CanonicalLogConfig


@pytest.fixture
def mock_request_factory(mocker: MockerFixture) -> Callable[..., MockType]:
    """Create a factory for mock Request objects with configurable attributes.

    Returns:
        Callable: Factory function that generates Request mocks.
    """

    def factory(
        method: str = "GET",
        path: str = "/test",
        headers: dict[str, str] | None = None,
    ) -> MockType:
        """Create a mock request with specified attributes."""
        request = mocker.Mock(spec=Request)
        request.method = method
        request.url = mocker.Mock(spec=URL)
        request.url.path = path
        request.headers = headers or {}
        return cast("MockType", request)

    return factory


@pytest.fixture
def mock_response_factory(mocker: MockerFixture) -> Callable[..., MockType]:
    """Create a factory for mock Response objects with configurable attributes.

    Returns:
        Callable: Factory function that generates Response mocks.
    """

    def factory(
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> MockType:
        """Create a mock response with specified attributes."""
        response = mocker.Mock(spec=Response)
        response.status_code = status_code
        response.headers = headers or {}
        return cast("MockType", response)

    return factory


@pytest.fixture
def mock_call_next(
    mocker: MockerFixture, mock_response_factory: Callable[..., MockType]
) -> MockType:
    """Create a mock async function that simulates the next middleware.

    Returns:
        MockType: Async mock returning a 200 response with a 2-byte body.
    """
    call_next = mocker.AsyncMock()
    call_next.return_value = mock_response_factory(
        status_code=200, headers={"content-length": "2"}
    )
    return cast("MockType", call_next)


@pytest.fixture
def mock_time(mocker: MockerFixture) -> MockType:
    """Mock the middleware's clock for controlled timing tests.

    Returns:
        MockType: Mock whose perf_counter returns configurable values.
    """
    mock_time_module = mocker.patch("clog.api.middleware.canonical_logging.time")
    mock_time_module.perf_counter.side_effect = [10.0, 10.0004]
    return cast("MockType", mock_time_module)


@pytest.fixture
def log_fn(mocker: MockerFixture) -> MockType:
    """Provide a sink that records canonical log lines.

    Returns:
        MockType: Mock sink.
    """
    return cast("MockType", mocker.Mock())


@pytest.fixture
def mock_asgi_app(mocker: MockerFixture) -> MockType:
    """Create a mock ASGI app for middleware testing.

    Returns:
        MockType: Mock ASGI app instance.
    """
    return cast("MockType", mocker.Mock())


@pytest.fixture
def canonical_logging_middleware(
    mock_asgi_app: MockType, log_fn: MockType
) -> CanonicalLoggingMiddleware:
    """Create CanonicalLoggingMiddleware with a mock app and sink.

    Returns:
        CanonicalLoggingMiddleware: Configured middleware instance.
    """
    return CanonicalLoggingMiddleware(
        mock_asgi_app,
        log_fn=log_fn,
        config=CanonicalLogConfig(excluded_paths=["/health"]),
    )
