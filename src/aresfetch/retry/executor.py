r"""Asynchronous retry loop for orchestrated HTTP calls.

This module provides the AsyncRetryExecutor class that runs the attempts
of one call strictly sequentially, combining the cancellation sources of
each attempt and waiting a fixed delay between attempts.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from aresfetch.cancellation import combined, timeout_scope
from aresfetch.exceptions import OperationCancelledError, ServerError
from aresfetch.hooks import RetryInfo
from aresfetch.retry.attempt import AttemptState
from aresfetch.retry.decider import RetryDecider

if TYPE_CHECKING:
    from aresfetch.cancellation import CancellationToken
    from aresfetch.exceptions import FetchError
    from aresfetch.hooks import HookPipeline
    from aresfetch.options import RequestOptions
    from aresfetch.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)

# Failures that happen before any status code is obtained.
TRANSPORT_ERRORS = (OperationCancelledError, httpx.RequestError, OSError)


class AsyncRetryExecutor:
    """Executes the attempts of one call with fixed-delay retries.

    Each attempt combines the caller's token, the call's group token and,
    if a timeout was requested, a fresh timeout token that only lives for
    that attempt.

    Args:
        transport: The transport performing the network calls.
        hooks: The hook pipeline of the call. Only ``on_retry`` is invoked
            by the executor.
        debug: If ``True``, the first attempt is logged at INFO and failed
            attempts at WARNING.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from aresfetch.core.config import FetchConfig
        >>> from aresfetch.hooks import HookPipeline
        >>> from aresfetch.options import RequestOptions
        >>> from aresfetch.retry import AsyncRetryExecutor
        >>> from aresfetch.transport import HttpxTransport
        >>> async def main():
        ...     async with HttpxTransport() as transport:
        ...         executor = AsyncRetryExecutor(transport, HookPipeline(FetchConfig()))
        ...         response, attempt = await executor.execute(
        ...             "https://api.example.com/data",
        ...             RequestOptions(retries=2, retry_delay=0.5),
        ...             headers=httpx.Headers(),
        ...             body=None,
        ...         )
        ...     return response.status_code
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(self, transport: Transport, hooks: HookPipeline, *, debug: bool = False) -> None:
        self.transport = transport
        self.hooks = hooks
        self.debug = debug

    async def execute(
        self,
        url: str,
        options: RequestOptions,
        *,
        headers: httpx.Headers,
        body: Any,
        group_token: CancellationToken | None = None,
    ) -> tuple[httpx.Response, int]:
        """Run the retry loop.

        Args:
            url: The resolved URL.
            options: The request options of the call.
            headers: The final request headers.
            body: The encoded request body.
            group_token: The token of the call's registry controller.

        Returns:
            The final response and the index of the attempt that produced
            it. A 5xx response is returned when it comes from the last
            allowed attempt.

        Raises:
            FetchError: The classified error of the last attempt, when no
                attempt produced a response.
        """
        method = options.method
        decider = RetryDecider(options.retries)
        last_error: FetchError | None = None

        for attempt in range(options.retries + 1):
            state = AttemptState(index=attempt)
            if attempt == 0 and self.debug:
                logger.info(f"{method} {url}")
            logger.debug(
                f"{method} {url}: attempt {attempt + 1}/{options.retries + 1}",
                extra={"attempt": attempt + 1},
            )
            try:
                with timeout_scope(options.timeout) as timeout_token, combined(
                    options.signal, group_token, timeout_token
                ) as token:
                    state.timeout_token = timeout_token
                    state.token = token
                    if token is not None:
                        token.raise_if_cancelled()
                    response = await self.transport.send(
                        method, url, headers, body, token, **options.transport_options
                    )
            except TRANSPORT_ERRORS as exc:
                error = decider.classify(
                    exc,
                    state,
                    url=url,
                    method=method,
                    timeout=options.timeout,
                    caller_token=options.signal,
                    group_token=group_token,
                )
                state.error = last_error = error
                should_retry, reason = decider.should_retry_error(error, attempt)
                logger.log(
                    logging.WARNING if self.debug else logging.DEBUG,
                    f"[attempt {attempt + 1}/{options.retries + 1}] failed: {error.message}",
                    extra={"attempt": attempt + 1},
                )
                if not should_retry:
                    raise error from exc
                status_code = None
            else:
                state.response = response
                should_retry, reason = decider.should_retry_response(response, attempt)
                if not should_retry:
                    logger.debug(
                        f"{method} {url}: status {response.status_code} after "
                        f"{attempt + 1} attempt(s) ({reason})",
                        extra={"attempt": attempt + 1, "status_code": response.status_code},
                    )
                    return response, attempt
                status_code = response.status_code
                last_error = ServerError(
                    method=method,
                    url=url,
                    message=f"{method} request to {url} failed with status {status_code}",
                    status_code=status_code,
                    response=response,
                )
                logger.log(
                    logging.WARNING if self.debug else logging.DEBUG,
                    f"[attempt {attempt + 1}/{options.retries + 1}] failed: {last_error.message}",
                    extra={"attempt": attempt + 1, "status_code": status_code},
                )

            logger.debug(f"{method} {url}: will retry in {options.retry_delay}s ({reason})")
            await self.hooks.on_retry(
                RetryInfo(
                    url=url,
                    method=method,
                    attempt=attempt + 2,
                    max_retries=options.retries,
                    wait_time=options.retry_delay,
                    error=state.error,
                    status_code=status_code,
                )
            )
            await asyncio.sleep(options.retry_delay)

        # The last attempt always returns or raises.
        raise last_error  # pragma: no cover
