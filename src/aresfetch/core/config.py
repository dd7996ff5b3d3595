r"""Configuration dataclass and defaults for FetchClient.

This module provides configuration constants and a dataclass-based
configuration object shared by every call issued through one
``FetchClient`` instance.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "FetchConfig",
]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import httpx

from aresfetch.body import normalize_headers
from aresfetch.core.validation import validate_hook, validate_status_handlers

if TYPE_CHECKING:
    from aresfetch.hooks import (
        ErrorHook,
        PreRequestHook,
        ResponseErrorHook,
        ResponseHook,
        RetryHook,
    )

# Default maximum number of retry attempts
# Total attempts = retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 0

# Default fixed delay in seconds between two attempts
DEFAULT_RETRY_DELAY = 1.0

_HOOK_FIELDS = (
    "on_request",
    "on_response",
    "on_response_error",
    "on_server_error",
    "on_error",
    "on_retry",
)


@dataclass
class FetchConfig:
    """Configuration of one FetchClient instance.

    Args:
        base_url: Prefix for relative URLs.
        headers: Headers sent with every call. Call-level headers win on
            key collision.
        debug: If ``True``, attempts and failures are logged at INFO,
            WARNING and ERROR levels instead of DEBUG.
        on_request: Pre-request hook ``(url, options) -> options | None``.
            Runs once per call, before the first attempt.
        on_response: Post-response hook ``(response) -> None``. Runs for
            every final response.
        on_response_error: Recoverable-error hook
            ``(response, attempt) -> response | None``. Runs for 4xx
            responses; a returned response replaces the original one.
        status_handlers: Mapping from HTTP status code to a handler
            ``(response) -> None``.
        on_server_error: Handler ``(response) -> None`` for every 5xx
            status except exactly 500.
        on_error: Network-error hook ``(error) -> None``. Runs when no
            response was obtained, right before the error is raised.
        on_retry: Optional callback receiving a ``RetryInfo`` before each
            retry.

    Example:
        ```pycon
        >>> from aresfetch.core.config import FetchConfig
        >>> config = FetchConfig(base_url="https://api.example.com", headers={"X-Key": "1"})
        >>> merged = config.merge(headers={"X-Trace": "abc"}, debug=True)
        >>> sorted(merged.headers.keys()), merged.debug
        (['x-key', 'x-trace'], True)
        >>> config.debug  # Original unchanged
        False

        ```
    """

    base_url: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    debug: bool = False
    on_request: PreRequestHook | None = None
    on_response: ResponseHook | None = None
    on_response_error: ResponseErrorHook | None = None
    status_handlers: dict[int, ResponseHook] = field(default_factory=dict)
    on_server_error: ResponseHook | None = None
    on_error: ErrorHook | None = None
    on_retry: RetryHook | None = None

    def __post_init__(self) -> None:
        """Normalize and validate configuration parameters.

        Raises:
            TypeError: If base_url is not a string or a hook is not callable.
            ValueError: If a status handler key is not an HTTP status code.
        """
        if not isinstance(self.base_url, str):
            msg = f"base_url must be a str, got {type(self.base_url).__name__}"
            raise TypeError(msg)
        self.headers = normalize_headers(self.headers)
        self.status_handlers = dict(self.status_handlers)
        for name in _HOOK_FIELDS:
            validate_hook(name, getattr(self, name))
        validate_status_handlers(self.status_handlers)

    def merge(self, **overrides: Any) -> FetchConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied. ``headers`` and
        ``status_handlers`` are merged key by key, new values winning;
        every other field is replaced wholesale.

        Args:
            **overrides: Keyword arguments for fields to override.

        Returns:
            A new FetchConfig instance with overrides applied.

        Raises:
            TypeError: If an override does not name a config field.

        Example:
            ```pycon
            >>> from aresfetch.core.config import FetchConfig
            >>> config = FetchConfig(status_handlers={404: print})
            >>> merged = config.merge(status_handlers={401: print})
            >>> sorted(merged.status_handlers)
            [401, 404]

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        if "headers" in filtered_overrides:
            headers = httpx.Headers(self.headers)
            headers.update(normalize_headers(filtered_overrides["headers"]))
            filtered_overrides["headers"] = headers
        if "status_handlers" in filtered_overrides:
            filtered_overrides["status_handlers"] = {
                **self.status_handlers,
                **filtered_overrides["status_handlers"],
            }
        return replace(self, **filtered_overrides)
