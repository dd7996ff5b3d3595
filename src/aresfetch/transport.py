r"""Network transport boundary.

The orchestrator only needs one primitive: send a method, URL, headers,
body and cancellation token, and get back a response or an error. The
``Transport`` protocol describes it and ``HttpxTransport`` implements it on
top of ``httpx.AsyncClient``.
"""

from __future__ import annotations

__all__ = ["HttpxTransport", "Transport"]

import asyncio
import logging
from collections.abc import AsyncIterable, Mapping
from contextlib import suppress
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from aresfetch.body import BodyKind, body_kind
from aresfetch.exceptions import OperationCancelledError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable
    from types import TracebackType
    from typing import Self

    from aresfetch.cancellation import CancellationToken

logger: logging.Logger = logging.getLogger(__name__)

URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"


async def _aiter_chunks(stream: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in stream:
        yield chunk.encode() if isinstance(chunk, str) else bytes(chunk)


@runtime_checkable
class Transport(Protocol):
    r"""Performs one network call.

    ``send`` returns the response, or raises ``httpx.RequestError`` (or
    ``OSError``) on a network failure and ``OperationCancelledError`` when
    ``token`` trips. Transports are expected to observe the token and fail
    fast.
    """

    async def send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Any,
        token: CancellationToken | None,
        **options: Any,
    ) -> httpx.Response: ...

    async def aclose(self) -> None: ...


def httpx_request_arguments(body: Any, headers: httpx.Headers) -> dict[str, Any]:
    r"""Map an encoded body onto ``httpx.AsyncClient.build_request``
    arguments.

    Args:
        body: The encoded body.
        headers: The final headers.

    Returns:
        The keyword arguments, including ``headers``.

    Example:
        ```pycon
        >>> import httpx
        >>> from aresfetch.body import UrlEncodedBody
        >>> from aresfetch.transport import httpx_request_arguments
        >>> kwargs = httpx_request_arguments(UrlEncodedBody([("a", 1), ("a", 2)]), httpx.Headers())
        >>> kwargs["content"], kwargs["headers"]["content-type"]
        ('a=1&a=2', 'application/x-www-form-urlencoded')

        ```
    """
    kind = body_kind(body)
    if kind == BodyKind.EMPTY:
        return {"headers": headers}
    if kind == BodyKind.BINARY:
        return {"headers": headers, "content": bytes(body)}
    if kind == BodyKind.FORM:
        kwargs: dict[str, Any] = {"headers": headers, "data": dict(body.fields)}
        if body.files:
            kwargs["files"] = body.files
        return kwargs
    if kind == BodyKind.URLENCODED:
        pairs = body.pairs.items() if isinstance(body.pairs, Mapping) else body.pairs
        if "content-type" not in headers:
            headers = httpx.Headers(headers)
            headers["Content-Type"] = URLENCODED_CONTENT_TYPE
        return {"headers": headers, "content": str(httpx.QueryParams(list(pairs)))}
    if kind == BodyKind.OBJECT:
        # Structured objects only reach the transport with a non-JSON content type.
        if isinstance(body, Mapping):
            return {"headers": headers, "data": dict(body)}
        return {"headers": headers, "content": str(body)}
    if kind == BodyKind.STREAM and not isinstance(body, AsyncIterable):
        # httpx.AsyncClient only streams async iterables.
        return {"headers": headers, "content": _aiter_chunks(body)}
    return {"headers": headers, "content": body}


class HttpxTransport:
    r"""Transport backed by ``httpx.AsyncClient``.

    The send is raced against the cancellation token: when the token trips
    first, the in-flight send is cancelled and ``OperationCancelledError``
    is raised.

    Args:
        client: Optional ``httpx.AsyncClient`` to use. It is not closed by
            ``aclose()``. If ``None``, a client is created on first use and
            owned by the transport.
        timeout: Timeout of the owned client. Defaults to ``None`` because
            per-attempt timeouts are enforced by the orchestrator.
        **client_kwargs: Additional keyword arguments for the owned
            ``httpx.AsyncClient``. ``follow_redirects`` defaults to
            ``True``.

    The owned client is bound to the event loop it was created on. When
    ``send`` runs on another loop (e.g. a second ``asyncio.run``), a new
    client is created and the stale one is dropped.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | httpx.Timeout | None = None,
        **client_kwargs: Any,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._client_kwargs = {"follow_redirects": True, **client_kwargs}
        self._loop: asyncio.AbstractEventLoop | None = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self._owns_client:
            return self._client
        loop = asyncio.get_running_loop()
        if self._client is not None and self._loop is not loop:
            # Pooled connections belong to the previous loop and cannot be reused.
            logger.debug("event loop changed: replacing the owned httpx.AsyncClient")
            self._client = None
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, **self._client_kwargs)
            self._loop = loop
        return self._client

    async def aclose(self) -> None:
        r"""Close the owned ``httpx.AsyncClient``, if any."""
        if self._owns_client and self._client is not None:
            client, loop = self._client, self._loop
            self._client, self._loop = None, None
            # A client created on a previous loop cannot close its connections here.
            if loop is asyncio.get_running_loop():
                await client.aclose()

    async def send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Any,
        token: CancellationToken | None,
        **options: Any,
    ) -> httpx.Response:
        r"""Send one request.

        Args:
            method: The HTTP method.
            url: The resolved URL.
            headers: The final headers.
            body: The encoded body.
            token: The effective cancellation token of the attempt.
            **options: Keyword arguments for ``httpx.AsyncClient.send``
                (e.g. ``follow_redirects`` or ``auth``).

        Returns:
            The response, with its body read.

        Raises:
            OperationCancelledError: If the token is or becomes cancelled
                before the response is obtained.
            httpx.RequestError: On network failures.
        """
        if token is not None:
            token.raise_if_cancelled()
        client = self._ensure_client()
        request = client.build_request(method, url, **httpx_request_arguments(body, headers))
        if token is None:
            return await client.send(request, **options)

        send_task = asyncio.ensure_future(client.send(request, **options))
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait((send_task, cancel_task), return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()
                with suppress(asyncio.CancelledError):
                    await send_task

        if not send_task.cancelled():
            return send_task.result()
        logger.debug(f"{method} {url}: send cancelled ({token.reason})")
        raise OperationCancelledError(token.reason, token.origin)
