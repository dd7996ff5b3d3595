r"""Per-call request description."""

from __future__ import annotations

__all__ = ["DEFAULT_RESPONSE_TYPE", "RequestOptions", "ResponseType"]

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from aresfetch.body import normalize_headers
from aresfetch.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from aresfetch.core.validation import validate_retry_params, validate_timeout

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aresfetch.cancellation import CancellationToken


class ResponseType(str, Enum):
    r"""How ``FetchClient.request`` decodes a response."""

    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"
    RESPONSE = "response"


DEFAULT_RESPONSE_TYPE = ResponseType.JSON


@dataclass
class RequestOptions:
    """Description of one HTTP call.

    Args:
        method: The HTTP method. It is upper-cased.
        headers: Call-level headers. They override the client headers.
        body: The request body (see ``aresfetch.body``).
        params: Query parameters. Each key maps to a scalar or a list.
        timeout: Optional per-attempt timeout in seconds. Must be > 0.
        retries: Number of retries after the first attempt. Must be >= 0.
        retry_delay: Fixed delay in seconds between attempts. Must be >= 0.
        response_type: How ``FetchClient.request`` decodes the response.
        signal: Optional caller cancellation token.
        transport_options: Extra keyword arguments forwarded to the
            transport (e.g. ``follow_redirects`` for ``HttpxTransport``).

    Example:
        ```pycon
        >>> from aresfetch.options import RequestOptions
        >>> options = RequestOptions(method="post", headers={"X-Id": 7}, retries=2)
        >>> options.method, options.headers["x-id"], options.retries
        ('POST', '7', 2)

        ```
    """

    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Any = None
    params: Mapping[str, Any] | None = None
    timeout: float | None = None
    retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    response_type: ResponseType = DEFAULT_RESPONSE_TYPE
    signal: CancellationToken | None = None
    transport_options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize and validate the options.

        Raises:
            ValueError: If a retry or timeout parameter is out of range,
                or if response_type is unknown.
        """
        self.method = self.method.upper()
        self.headers = normalize_headers(self.headers)
        self.response_type = ResponseType(self.response_type)
        self.transport_options = dict(self.transport_options)
        validate_timeout(self.timeout)
        validate_retry_params(retries=self.retries, retry_delay=self.retry_delay)

    def merge(self, **overrides: Any) -> RequestOptions:
        """Create new options with specified parameters overridden.

        Only non-None override values are applied. ``headers`` are merged
        key by key, new values winning.

        Args:
            **overrides: Keyword arguments for fields to override.

        Returns:
            A new RequestOptions instance.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        if "headers" in filtered_overrides:
            headers = httpx.Headers(self.headers)
            headers.update(normalize_headers(filtered_overrides["headers"]))
            filtered_overrides["headers"] = headers
        return replace(self, **filtered_overrides)
