r"""Core configuration, validation and URL helpers."""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "FetchConfig",
    "apply_params",
    "is_absolute_url",
    "resolve_url",
    "validate_hook",
    "validate_retry_params",
    "validate_status_handlers",
    "validate_timeout",
]

from aresfetch.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, FetchConfig
from aresfetch.core.url import apply_params, is_absolute_url, resolve_url
from aresfetch.core.validation import (
    validate_hook,
    validate_retry_params,
    validate_status_handlers,
    validate_timeout,
)
