r"""Retry decision and failure classification.

This module provides the RetryDecider class that decides, after each
transport outcome, whether another attempt should occur, and that turns
raw transport failures into the classified errors of
``aresfetch.exceptions``.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]

import logging
from typing import TYPE_CHECKING

import httpx

from aresfetch.exceptions import (
    CancelledByCallerError,
    CancelledByGroupError,
    FetchError,
    NetworkError,
    OperationCancelledError,
    RequestCancelledError,
    RequestTimeoutError,
)

if TYPE_CHECKING:
    from aresfetch.cancellation import CancellationToken
    from aresfetch.retry.attempt import AttemptState

logger: logging.Logger = logging.getLogger(__name__)


class RetryDecider:
    """Decides whether a call should be retried.

    Responses with a status code below 500 are final. 5xx responses and
    transport failures are retried while attempts remain.

    Args:
        max_retries: Maximum number of retries after the first attempt.

    Example:
        ```pycon
        >>> import httpx
        >>> from aresfetch.retry import RetryDecider
        >>> decider = RetryDecider(max_retries=1)
        >>> decider.should_retry_response(httpx.Response(503), attempt=0)
        (True, 'status 503')
        >>> decider.should_retry_response(httpx.Response(503), attempt=1)
        (False, 'max retries exhausted')
        >>> decider.should_retry_response(httpx.Response(404), attempt=0)
        (False, 'status 404')

        ```
    """

    def __init__(self, max_retries: int) -> None:
        self.max_retries = max_retries

    def should_retry_response(self, response: httpx.Response, attempt: int) -> tuple[bool, str]:
        """Determine if a response should trigger a retry.

        On the last attempt a 5xx response is not retried: it flows through
        to the caller as the final response.

        Args:
            response: The HTTP response to evaluate.
            attempt: Current attempt number (0-indexed).

        Returns:
            Tuple of (should_retry, reason).
        """
        if response.status_code < 500:
            return (False, f"status {response.status_code}")
        if attempt >= self.max_retries:
            return (False, "max retries exhausted")
        return (True, f"status {response.status_code}")

    def should_retry_error(self, error: FetchError, attempt: int) -> tuple[bool, str]:
        """Determine if a classified transport failure should trigger a retry.

        Args:
            error: The classified error.
            attempt: Current attempt number (0-indexed).

        Returns:
            Tuple of (should_retry, reason).
        """
        if attempt >= self.max_retries:
            return (False, "max retries exhausted")
        return (True, type(error).__name__)

    def classify(
        self,
        exc: Exception,
        state: AttemptState,
        *,
        url: str,
        method: str,
        timeout: float | None,
        caller_token: CancellationToken | None,
        group_token: CancellationToken | None,
    ) -> FetchError:
        """Turn a transport failure into a classified error.

        An ``OperationCancelledError`` is attributed to the component that
        tripped: first by identity of its origin, then by checking the
        timeout, caller and group tokens in that order.

        Args:
            exc: The exception raised by the attempt.
            state: The state of the failed attempt.
            url: The URL being requested.
            method: The HTTP method being used.
            timeout: The per-attempt timeout in seconds, if any.
            caller_token: The cancellation token supplied by the caller.
            group_token: The token of the call's registry controller.

        Returns:
            The classified error, with ``exc`` chained as its cause.
        """
        attempts = state.index + 1
        if isinstance(exc, OperationCancelledError):
            candidates = (
                (
                    state.timeout_token,
                    RequestTimeoutError,
                    f"{method} request to {url} timed out after {timeout}s ({attempts} attempts)",
                ),
                (
                    caller_token,
                    CancelledByCallerError,
                    f"{method} request to {url} aborted by caller",
                ),
                (
                    group_token,
                    CancelledByGroupError,
                    f"{method} request to {url} aborted by cancel_all()",
                ),
            )
            for token, error_cls, message in candidates:
                if token is not None and exc.origin is token:
                    return error_cls(method=method, url=url, message=message, cause=exc)
            for token, error_cls, message in candidates:
                if token is not None and token.cancelled:
                    return error_cls(method=method, url=url, message=message, cause=exc)
            return RequestCancelledError(
                method=method, url=url, message=f"{method} request to {url} aborted", cause=exc
            )
        if isinstance(exc, httpx.TimeoutException):
            return RequestTimeoutError(
                method=method,
                url=url,
                message=f"{method} request to {url} timed out ({attempts} attempts)",
                cause=exc,
            )
        return NetworkError(
            method=method,
            url=url,
            message=f"{method} request to {url} failed after {attempts} attempts: {exc}",
            cause=exc,
        )
