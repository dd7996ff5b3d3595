r"""Parameter validation utilities for request options and client
configuration.

This module provides validation functions to ensure the retry, timeout
and hook parameters meet the required constraints before being used by
the request orchestrator.
"""

from __future__ import annotations

__all__ = [
    "validate_hook",
    "validate_retry_params",
    "validate_status_handlers",
    "validate_timeout",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


def validate_timeout(timeout: float | None) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for one attempt.
            Must be > 0 if provided.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from aresfetch.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)
        >>> validate_timeout(0)
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if timeout is not None and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(retries: int, retry_delay: float) -> None:
    """Validate retry parameters.

    Args:
        retries: Maximum number of retry attempts. Must be >= 0. A value of
            0 means no retries (only the initial attempt).
        retry_delay: Fixed delay in seconds between two attempts.
            Must be >= 0.

    Raises:
        ValueError: If retries or retry_delay are negative.

    Example:
        ```pycon
        >>> from aresfetch.core.validation import validate_retry_params
        >>> validate_retry_params(retries=3, retry_delay=1.0)
        >>> validate_retry_params(retries=-1, retry_delay=1.0)
        Traceback (most recent call last):
        ...
        ValueError: retries must be >= 0, got -1

        ```
    """
    if retries < 0:
        msg = f"retries must be >= 0, got {retries}"
        raise ValueError(msg)
    if retry_delay < 0:
        msg = f"retry_delay must be >= 0, got {retry_delay}"
        raise ValueError(msg)


def validate_hook(name: str, hook: Any) -> None:
    """Validate that a hook is callable or ``None``.

    Raises:
        TypeError: If hook is neither ``None`` nor callable.
    """
    if hook is not None and not callable(hook):
        msg = f"{name} must be callable, got {type(hook).__name__}"
        raise TypeError(msg)


def validate_status_handlers(status_handlers: Mapping[int, Any]) -> None:
    """Validate the status code to handler mapping.

    Raises:
        ValueError: If a key is not an HTTP status code (100-599).
        TypeError: If a handler is not callable.
    """
    for status_code, handler in status_handlers.items():
        if isinstance(status_code, bool) or not isinstance(status_code, int):
            msg = f"status handler keys must be int, got {status_code!r}"
            raise ValueError(msg)
        if not 100 <= status_code <= 599:
            msg = f"status handler keys must be in [100, 599], got {status_code}"
            raise ValueError(msg)
        validate_hook(f"status_handlers[{status_code}]", handler)
