from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import httpx
import pytest

from aresfetch import FetchClient, FetchConfig
from aresfetch.default import DEFAULT_CLIENT
from tests.helpers import FakeTransport

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def transport() -> FakeTransport:
    """Create a fake transport answering every call with a 200."""
    response = httpx.Response(
        200, content=b'{"ok": true}', headers={"Content-Type": "application/json"}
    )
    return FakeTransport([response])


@pytest.fixture
def client(transport: FakeTransport) -> FetchClient:
    """Create a client on top of the fake transport."""
    return FetchClient(transport=transport, base_url="https://api.example.com")


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing hooks."""
    return Mock(return_value=None)


@pytest.fixture
def default_client(transport: FakeTransport) -> Generator[FetchClient, None, None]:
    """Point the process-wide default client at the fake transport.

    The configuration and transport of the default client are restored
    after the test.
    """
    config, original = DEFAULT_CLIENT._config, DEFAULT_CLIENT._transport
    DEFAULT_CLIENT._config = FetchConfig()
    DEFAULT_CLIENT._transport = transport
    try:
        yield DEFAULT_CLIENT
    finally:
        DEFAULT_CLIENT._config = config
        DEFAULT_CLIENT._transport = original
