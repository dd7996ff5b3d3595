r"""aresfetch - Resilient HTTP request orchestrator.

This package issues HTTP calls through ``httpx`` and adds the resilience a
client application needs around them, without adopting a heavy framework.

Key Features:
    - Fixed-delay retries of network failures and 5xx responses; once
      retries are exhausted, the final 5xx response is returned
    - Per-attempt timeouts
    - Any number of cancellation sources merged per attempt: the caller's
      token, the per-attempt timeout and the instance-wide ``cancel_all()``
    - Classified errors telling apart network failures, timeouts, caller
      cancellation and group cancellation
    - Lifecycle hooks: pre-request, post-response, 4xx recovery, per-status
      handlers, 5xx catch-all, network-error and retry observers
    - JSON body encoding, base URL resolution and query parameters

Example:
    ```pycon
    >>> import asyncio
    >>> from aresfetch import CancellationController, FetchClient
    >>> async def main():  # doctest: +SKIP
    ...     async with FetchClient(base_url="https://api.example.com") as client:
    ...         controller = CancellationController()
    ...         data = await client.get("/data", retries=3, timeout=5.0, signal=controller.token)
    ...         await client.post("/items", {"name": "Ada"})
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_CLIENT",
    "CancellationController",
    "CancellationToken",
    "CancelledByCallerError",
    "CancelledByGroupError",
    "FetchClient",
    "FetchConfig",
    "FetchError",
    "FormBody",
    "HttpxTransport",
    "NetworkError",
    "RequestCancelledError",
    "RequestOptions",
    "RequestTimeoutError",
    "ResponseType",
    "RetryInfo",
    "Transport",
    "UrlEncodedBody",
    "__version__",
    "cancel_all",
    "combine_tokens",
    "configure",
    "delete",
    "fetch",
    "get",
    "patch",
    "post",
    "put",
    "request",
]

from importlib.metadata import PackageNotFoundError, version

from aresfetch.body import FormBody, UrlEncodedBody
from aresfetch.cancellation import CancellationController, CancellationToken, combine_tokens
from aresfetch.client import FetchClient
from aresfetch.core.config import FetchConfig
from aresfetch.default import (
    DEFAULT_CLIENT,
    cancel_all,
    configure,
    delete,
    fetch,
    get,
    patch,
    post,
    put,
    request,
)
from aresfetch.exceptions import (
    CancelledByCallerError,
    CancelledByGroupError,
    FetchError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from aresfetch.hooks import RetryInfo
from aresfetch.options import RequestOptions, ResponseType
from aresfetch.transport import HttpxTransport, Transport

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
