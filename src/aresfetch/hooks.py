r"""Interceptor pipeline for the lifecycle hooks of one call.

The hook points run in this order:

1. ``on_request``: once per call, before the first attempt; may replace the
   request options
2. ``on_retry``: before each retry, for observation
3. ``on_response_error``: for a 4xx final response; may substitute it
4. status dispatch: ``status_handlers[status]``, then ``on_server_error``
   for 5xx statuses other than exactly 500
5. ``on_response``: for every final response
6. ``on_error``: when no response was obtained, before the error is raised

Every hook may be a plain function or a coroutine function.
"""

from __future__ import annotations

__all__ = [
    "ErrorHook",
    "HookPipeline",
    "PreRequestHook",
    "ResponseErrorHook",
    "ResponseHook",
    "RetryHook",
    "RetryInfo",
]

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

import httpx

from aresfetch.options import RequestOptions

if TYPE_CHECKING:
    from aresfetch.core.config import FetchConfig
    from aresfetch.exceptions import FetchError

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class RetryInfo:
    """Information passed to the on_retry callback.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        attempt: The attempt number that is about to start (1-indexed).
        max_retries: Maximum number of retry attempts.
        wait_time: The delay in seconds before the next attempt.
        error: The classified error that triggered the retry, if any.
        status_code: The 5xx status code that triggered the retry, if any.
    """

    url: str
    method: str
    attempt: int
    max_retries: int
    wait_time: float
    error: Exception | None = None
    status_code: int | None = None


PreRequestHook = Callable[
    [str, RequestOptions], Union[RequestOptions, None, Awaitable[Union[RequestOptions, None]]]
]
ResponseHook = Callable[[httpx.Response], Union[None, Awaitable[None]]]
ResponseErrorHook = Callable[
    [httpx.Response, int], Union[httpx.Response, None, Awaitable[Union[httpx.Response, None]]]
]
ErrorHook = Callable[[Exception], Union[None, Awaitable[None]]]
RetryHook = Callable[[RetryInfo], Union[None, Awaitable[None]]]


async def _call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class HookPipeline:
    """Runs the hooks of a ``FetchConfig`` around one call.

    Args:
        config: The configuration snapshot of the call.
    """

    def __init__(self, config: FetchConfig) -> None:
        self.config = config

    async def before_request(self, url: str, options: RequestOptions) -> RequestOptions:
        """Run the pre-request hook.

        Args:
            url: The fully resolved URL.
            options: The request options after the header merge.

        Returns:
            The options returned by the hook, or ``options`` if the hook
            returned ``None`` or is not configured.

        Raises:
            TypeError: If the hook returns something other than
                ``RequestOptions`` or ``None``.
        """
        if self.config.on_request is None:
            return options
        result = await _call_hook(self.config.on_request, url, options)
        if result is None:
            return options
        if not isinstance(result, RequestOptions):
            msg = f"on_request must return RequestOptions or None, got {type(result).__name__}"
            raise TypeError(msg)
        return result

    async def on_retry(self, info: RetryInfo) -> None:
        """Invoke the on_retry callback if configured."""
        if self.config.on_retry is not None:
            await _call_hook(self.config.on_retry, info)

    async def recover(self, response: httpx.Response, attempt: int) -> httpx.Response:
        """Give the recoverable-error hook a chance to substitute a 4xx
        response.

        Args:
            response: The final response.
            attempt: The index of the attempt that produced it (0-indexed).

        Returns:
            The substitute response if the hook returned one, otherwise
            ``response``.
        """
        if self.config.on_response_error is None or not response.is_client_error:
            return response
        substitute = await _call_hook(self.config.on_response_error, response, attempt)
        if isinstance(substitute, httpx.Response):
            logger.debug(
                f"status {response.status_code} replaced by status {substitute.status_code}"
            )
            return substitute
        return response

    async def dispatch_status(self, response: httpx.Response) -> None:
        """Invoke the exact-status handler, then the generic 5xx handler."""
        status_code = response.status_code
        handler = self.config.status_handlers.get(status_code)
        if handler is not None:
            await _call_hook(handler, response)
        # A 500 is only handled by its exact handler.
        if status_code >= 500 and status_code != 500 and self.config.on_server_error is not None:
            await _call_hook(self.config.on_server_error, response)

    async def after_response(self, response: httpx.Response) -> None:
        """Invoke the post-response hook."""
        if self.config.on_response is not None:
            await _call_hook(self.config.on_response, response)

    async def on_network_error(self, error: FetchError) -> None:
        """Invoke the network-error hook. The error is not suppressed."""
        if self.config.on_error is not None:
            await _call_hook(self.config.on_error, error)
