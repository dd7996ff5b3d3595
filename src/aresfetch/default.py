r"""Process-wide default client and module-level helpers.

``DEFAULT_CLIENT`` is constructed once, when this module is imported, and
lives for the lifetime of the process. The module-level functions delegate
to it; its configuration only changes through ``configure``.

Example:
    ```pycon
    >>> import asyncio
    >>> import aresfetch
    >>> aresfetch.configure(base_url="https://api.example.com")  # doctest: +SKIP
    >>> asyncio.run(aresfetch.get("/status"))  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_CLIENT",
    "cancel_all",
    "configure",
    "delete",
    "fetch",
    "get",
    "patch",
    "post",
    "put",
    "request",
]

from typing import TYPE_CHECKING, Any

from aresfetch.client import FetchClient

if TYPE_CHECKING:
    import httpx

    from aresfetch.core.config import FetchConfig
    from aresfetch.options import RequestOptions

DEFAULT_CLIENT = FetchClient()


def configure(**fields: Any) -> FetchConfig:
    r"""Merge ``fields`` into the configuration of the default client."""
    return DEFAULT_CLIENT.configure(**fields)


def cancel_all() -> int:
    r"""Cancel every call in flight on the default client."""
    return DEFAULT_CLIENT.cancel_all()


async def fetch(url: str, options: RequestOptions | None = None, **fields: Any) -> httpx.Response:
    r"""Send a request with the default client and return the response."""
    return await DEFAULT_CLIENT.fetch(url, options, **fields)


async def request(url: str, options: RequestOptions | None = None, **fields: Any) -> Any:
    r"""Send a request with the default client and decode the response."""
    return await DEFAULT_CLIENT.request(url, options, **fields)


async def get(url: str, options: RequestOptions | None = None, **fields: Any) -> Any:
    return await DEFAULT_CLIENT.get(url, options, **fields)


async def delete(url: str, options: RequestOptions | None = None, **fields: Any) -> Any:
    return await DEFAULT_CLIENT.delete(url, options, **fields)


async def post(
    url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
) -> Any:
    return await DEFAULT_CLIENT.post(url, body, options, **fields)


async def put(
    url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
) -> Any:
    return await DEFAULT_CLIENT.put(url, body, options, **fields)


async def patch(
    url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
) -> Any:
    return await DEFAULT_CLIENT.patch(url, body, options, **fields)
