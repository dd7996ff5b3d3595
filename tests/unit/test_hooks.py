r"""Unit tests for the hook pipeline.

This file contains tests for the HookPipeline class in hooks.py. Every
hook point is exercised with plain functions and with coroutine
functions.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from aresfetch.core.config import FetchConfig
from aresfetch.exceptions import NetworkError
from aresfetch.hooks import HookPipeline, RetryInfo
from aresfetch.options import RequestOptions

TEST_URL = "https://api.example.com/data"

###############################
#     Tests for RetryInfo     #
###############################


def test_retry_info_defaults() -> None:
    info = RetryInfo(url=TEST_URL, method="GET", attempt=2, max_retries=3, wait_time=0.5)
    assert info.error is None
    assert info.status_code is None


#################################################
#     Tests for HookPipeline.before_request     #
#################################################


@pytest.mark.asyncio
async def test_before_request_without_hook() -> None:
    options = RequestOptions()
    assert await HookPipeline(FetchConfig()).before_request(TEST_URL, options) is options


@pytest.mark.asyncio
async def test_before_request_returns_none() -> None:
    hook = Mock(return_value=None)
    options = RequestOptions()
    result = await HookPipeline(FetchConfig(on_request=hook)).before_request(TEST_URL, options)
    assert result is options
    hook.assert_called_once_with(TEST_URL, options)


@pytest.mark.asyncio
async def test_before_request_replaces_options() -> None:
    def add_auth(url: str, options: RequestOptions) -> RequestOptions:
        return options.merge(headers={"Authorization": "Bearer token"})

    pipeline = HookPipeline(FetchConfig(on_request=add_auth))
    result = await pipeline.before_request(TEST_URL, RequestOptions())
    assert result.headers["authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_before_request_async_hook() -> None:
    replacement = RequestOptions(method="POST")
    hook = AsyncMock(return_value=replacement)
    pipeline = HookPipeline(FetchConfig(on_request=hook))
    assert await pipeline.before_request(TEST_URL, RequestOptions()) is replacement
    hook.assert_awaited_once()


@pytest.mark.asyncio
async def test_before_request_invalid_return() -> None:
    pipeline = HookPipeline(FetchConfig(on_request=Mock(return_value={"method": "POST"})))
    with pytest.raises(TypeError, match=r"on_request must return RequestOptions or None"):
        await pipeline.before_request(TEST_URL, RequestOptions())


@pytest.mark.asyncio
async def test_before_request_hook_error_propagates() -> None:
    pipeline = HookPipeline(FetchConfig(on_request=Mock(side_effect=RuntimeError("no token"))))
    with pytest.raises(RuntimeError, match=r"no token"):
        await pipeline.before_request(TEST_URL, RequestOptions())


###########################################
#     Tests for HookPipeline.on_retry     #
###########################################


@pytest.mark.asyncio
async def test_on_retry_without_hook() -> None:
    info = RetryInfo(url=TEST_URL, method="GET", attempt=2, max_retries=1, wait_time=0.0)
    await HookPipeline(FetchConfig()).on_retry(info)


@pytest.mark.asyncio
async def test_on_retry_calls_hook(mock_callback: Mock) -> None:
    info = RetryInfo(url=TEST_URL, method="GET", attempt=2, max_retries=1, wait_time=0.0)
    await HookPipeline(FetchConfig(on_retry=mock_callback)).on_retry(info)
    mock_callback.assert_called_once_with(info)


##########################################
#     Tests for HookPipeline.recover     #
##########################################


@pytest.mark.asyncio
async def test_recover_without_hook() -> None:
    response = httpx.Response(401)
    assert await HookPipeline(FetchConfig()).recover(response, 0) is response


@pytest.mark.asyncio
async def test_recover_substitutes_response() -> None:
    substitute = httpx.Response(200, json={"refreshed": True})
    hook = Mock(return_value=substitute)
    response = httpx.Response(401)
    result = await HookPipeline(FetchConfig(on_response_error=hook)).recover(response, 2)
    assert result is substitute
    hook.assert_called_once_with(response, 2)


@pytest.mark.asyncio
async def test_recover_async_hook() -> None:
    substitute = httpx.Response(200)
    pipeline = HookPipeline(FetchConfig(on_response_error=AsyncMock(return_value=substitute)))
    assert await pipeline.recover(httpx.Response(403), 0) is substitute


@pytest.mark.asyncio
async def test_recover_hook_returns_none() -> None:
    response = httpx.Response(404)
    pipeline = HookPipeline(FetchConfig(on_response_error=Mock(return_value=None)))
    assert await pipeline.recover(response, 0) is response


@pytest.mark.parametrize("status_code", [200, 204, 302, 500, 503])
@pytest.mark.asyncio
async def test_recover_only_client_errors(status_code: int) -> None:
    hook = Mock(return_value=httpx.Response(200))
    response = httpx.Response(status_code)
    assert await HookPipeline(FetchConfig(on_response_error=hook)).recover(response, 0) is response
    hook.assert_not_called()


##################################################
#     Tests for HookPipeline.dispatch_status     #
##################################################


@pytest.mark.asyncio
async def test_dispatch_status_exact_handler() -> None:
    on_404, on_401 = Mock(), Mock()
    response = httpx.Response(404)
    await HookPipeline(FetchConfig(status_handlers={404: on_404, 401: on_401})).dispatch_status(
        response
    )
    on_404.assert_called_once_with(response)
    on_401.assert_not_called()


@pytest.mark.asyncio
async def test_dispatch_status_500_only_exact_handler() -> None:
    on_500, on_server_error = Mock(), Mock()
    config = FetchConfig(status_handlers={500: on_500}, on_server_error=on_server_error)
    await HookPipeline(config).dispatch_status(httpx.Response(500))
    on_500.assert_called_once()
    on_server_error.assert_not_called()


@pytest.mark.asyncio
async def test_dispatch_status_502_both_handlers() -> None:
    calls = []
    config = FetchConfig(
        status_handlers={502: lambda response: calls.append("exact")},
        on_server_error=lambda response: calls.append("server"),
    )
    await HookPipeline(config).dispatch_status(httpx.Response(502))
    assert calls == ["exact", "server"]


@pytest.mark.asyncio
async def test_dispatch_status_server_error_without_exact_handler() -> None:
    on_server_error = AsyncMock()
    response = httpx.Response(503)
    await HookPipeline(FetchConfig(on_server_error=on_server_error)).dispatch_status(response)
    on_server_error.assert_awaited_once_with(response)


@pytest.mark.asyncio
async def test_dispatch_status_server_error_not_called_for_4xx() -> None:
    on_server_error = Mock()
    await HookPipeline(FetchConfig(on_server_error=on_server_error)).dispatch_status(
        httpx.Response(404)
    )
    on_server_error.assert_not_called()


#################################################
#     Tests for HookPipeline.after_response     #
#################################################


@pytest.mark.asyncio
async def test_after_response_calls_hook(mock_callback: Mock) -> None:
    response = httpx.Response(200)
    await HookPipeline(FetchConfig(on_response=mock_callback)).after_response(response)
    mock_callback.assert_called_once_with(response)


###################################################
#     Tests for HookPipeline.on_network_error     #
###################################################


@pytest.mark.asyncio
async def test_on_network_error_calls_hook() -> None:
    hook = AsyncMock()
    error = NetworkError(method="GET", url=TEST_URL, message="boom")
    await HookPipeline(FetchConfig(on_error=hook)).on_network_error(error)
    hook.assert_awaited_once_with(error)


@pytest.mark.asyncio
async def test_on_network_error_without_hook() -> None:
    error = NetworkError(method="GET", url=TEST_URL, message="boom")
    await HookPipeline(FetchConfig()).on_network_error(error)
