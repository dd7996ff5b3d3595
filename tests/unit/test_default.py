r"""Unit tests for the process-wide default client and the module-level
helpers."""

from __future__ import annotations

import asyncio

import httpx
import pytest

import aresfetch
from aresfetch import CancelledByGroupError, FetchClient, HttpxTransport
from aresfetch.default import DEFAULT_CLIENT
from tests.helpers import TEST_URL, FakeTransport


def test_default_client_is_fetch_client() -> None:
    assert isinstance(DEFAULT_CLIENT, FetchClient)
    assert aresfetch.DEFAULT_CLIENT is DEFAULT_CLIENT


def test_configure(default_client: FetchClient) -> None:
    config = aresfetch.configure(base_url="https://api.example.com", headers={"X-Key": "1"})
    assert default_client.config is config
    assert config.base_url == "https://api.example.com"
    assert config.headers["x-key"] == "1"


@pytest.mark.asyncio
async def test_fetch(default_client: FetchClient, transport: FakeTransport) -> None:
    response = await aresfetch.fetch(TEST_URL, method="HEAD")
    assert response.status_code == 200
    assert transport.calls[0].method == "HEAD"


@pytest.mark.asyncio
async def test_request(default_client: FetchClient) -> None:
    assert await aresfetch.request(TEST_URL) == {"ok": True}


@pytest.mark.asyncio
async def test_get_uses_configured_base_url(
    default_client: FetchClient, transport: FakeTransport
) -> None:
    aresfetch.configure(base_url="https://api.example.com")
    assert await aresfetch.get("/users", params={"page": 1}) == {"ok": True}
    assert transport.calls[0].url == "https://api.example.com/users?page=1"


@pytest.mark.asyncio
async def test_delete(default_client: FetchClient, transport: FakeTransport) -> None:
    await aresfetch.delete(TEST_URL)
    assert transport.calls[0].method == "DELETE"


@pytest.mark.parametrize("verb", ["post", "put", "patch"])
@pytest.mark.asyncio
async def test_body_verbs(default_client: FetchClient, transport: FakeTransport, verb: str) -> None:
    await getattr(aresfetch, verb)(TEST_URL, {"id": 1})
    sent = transport.calls[0]
    assert sent.method == verb.upper()
    assert sent.body == '{"id": 1}'


@pytest.mark.asyncio
async def test_cancel_all(default_client: FetchClient, transport: FakeTransport) -> None:
    transport.latency = 5.0
    task = asyncio.ensure_future(aresfetch.get(TEST_URL))
    await transport.wait_for_calls(1)
    assert aresfetch.cancel_all() == 1
    with pytest.raises(CancelledByGroupError):
        await task


def test_module_helpers_across_event_loops(default_client: FetchClient) -> None:
    transport = HttpxTransport(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": 1}))
    )
    default_client._transport = transport
    clients = []
    for _ in range(2):
        assert asyncio.run(aresfetch.get(TEST_URL)) == {"ok": 1}
        clients.append(transport._client)
    assert clients[0] is not clients[1]
    assert clients[0] is not None
