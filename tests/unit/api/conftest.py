"""Conftest for API unit tests."""

import pytest
from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def mock_api_main_dependencies(mocker: MockerFixture) -> None:
    """Keep create_app from reconfiguring global logging."""
    mocker.patch("clog.api.main.setup_logging")
