r"""Client instance and request orchestrator.

A ``FetchClient`` owns a configuration, a transport and the registry of its
in-flight calls. ``fetch`` is the orchestrator: it resolves the URL, merges
headers, runs the pre-request hook, encodes the body, runs the retry loop
and finally the response hooks. The verb helpers (``get``, ``post``, ...)
decode the final response according to ``response_type``.
"""

from __future__ import annotations

__all__ = ["FetchClient"]

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

import httpx

from aresfetch.body import JSON_CONTENT_TYPE, BodyKind, body_kind, prepare_body, read_stream
from aresfetch.core.config import FetchConfig
from aresfetch.core.url import apply_params, resolve_url
from aresfetch.decoding import decode_response
from aresfetch.exceptions import FetchError
from aresfetch.hooks import HookPipeline
from aresfetch.options import RequestOptions
from aresfetch.registry import ControllerRegistry
from aresfetch.retry import AsyncRetryExecutor
from aresfetch.transport import HttpxTransport
from aresfetch.utils.structured_logging import bind_call_id

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

    from aresfetch.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)

# Body shapes for which the body-bearing verbs default to a JSON content type.
_JSON_DEFAULT_KINDS = (BodyKind.EMPTY, BodyKind.OBJECT, BodyKind.RAW)


def _build_options(options: RequestOptions | None, fields: dict[str, Any]) -> RequestOptions:
    if options is None:
        return RequestOptions(**fields)
    return options.merge(**fields) if fields else options


class FetchClient:
    r"""Resilient HTTP client instance.

    Args:
        config: Optional FetchConfig instance. If ``None``, a default
            FetchConfig is used.
        transport: Optional transport. Defaults to an ``HttpxTransport``
            owning its ``httpx.AsyncClient``.
        **config_fields: Fields merged into ``config`` (see
            ``FetchConfig.merge``).

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresfetch import FetchClient
        >>> async def main():  # doctest: +SKIP
        ...     async with FetchClient(base_url="https://api.example.com") as client:
        ...         users = await client.get("/users", params={"page": 1}, retries=2)
        ...         created = await client.post("/users", {"name": "Ada"})
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        transport: Transport | None = None,
        **config_fields: Any,
    ) -> None:
        config = config if config is not None else FetchConfig()
        self._config = config.merge(**config_fields) if config_fields else config
        self._transport = transport if transport is not None else HttpxTransport()
        self._registry = ControllerRegistry()

    def __repr__(self) -> str:
        return (
            f"{type(self).__qualname__}(base_url={self._config.base_url!r}, "
            f"in_flight={len(self._registry)})"
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def config(self) -> FetchConfig:
        r"""The current configuration."""
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def in_flight(self) -> int:
        r"""The number of calls currently registered."""
        return len(self._registry)

    def configure(self, **fields: Any) -> FetchConfig:
        r"""Merge ``fields`` into the configuration.

        ``headers`` and ``status_handlers`` are merged key by key, every
        other non-None field replaces the current value. Calls already in
        flight keep the configuration they started with.

        Returns:
            The new configuration.

        Example:
            ```pycon
            >>> from aresfetch import FetchClient
            >>> client = FetchClient(headers={"X-Key": "1"})
            >>> config = client.configure(headers={"X-Trace": "abc"}, debug=True)
            >>> sorted(config.headers.keys()), config.debug
            (['x-key', 'x-trace'], True)

            ```
        """
        self._config = self._config.merge(**fields)
        return self._config

    def cancel_all(self) -> int:
        r"""Cancel every call in flight on this instance.

        Returns:
            The number of calls that were cancelled.
        """
        count = self._registry.cancel_all()
        if count and self._config.debug:
            logger.info(f"cancel_all() aborted {count} call(s)")
        return count

    async def aclose(self) -> None:
        r"""Close the transport."""
        await self._transport.aclose()

    async def fetch(
        self, url: str, options: RequestOptions | None = None, **fields: Any
    ) -> httpx.Response:
        r"""Send a request and return the final response.

        A stream body is read into bytes before the first attempt when the
        call may be retried.

        Args:
            url: An absolute URL, or a URL relative to ``base_url``.
            options: Optional request options.
            **fields: Fields merged into ``options`` (see
                ``RequestOptions``).

        Returns:
            The final response. 4xx responses are returned (possibly
            substituted by ``on_response_error``), and so is a 5xx response
            once retries are exhausted.

        Raises:
            FetchError: A classified error (``NetworkError``,
                ``RequestTimeoutError``, ``CancelledByCallerError`` or
                ``CancelledByGroupError``) when no response was obtained.
        """
        response, _ = await self._fetch(url, _build_options(options, fields))
        return response

    async def _fetch(
        self, url: str, options: RequestOptions
    ) -> tuple[httpx.Response, RequestOptions]:
        r"""Run one call and return the final response with the options
        returned by the pre-request hook."""
        config = self._config
        hooks = HookPipeline(config)
        target = apply_params(resolve_url(url, config.base_url), options.params)

        controller = self._registry.register()
        try:
            with bind_call_id():
                headers = httpx.Headers(config.headers)
                headers.update(options.headers)
                options = await hooks.before_request(target, replace(options, headers=headers))
                body, headers = prepare_body(options.body, options.headers)
                if options.retries and body_kind(body) == BodyKind.STREAM:
                    # Every attempt needs the whole payload.
                    body = await read_stream(body)

                executor = AsyncRetryExecutor(self._transport, hooks, debug=config.debug)
                try:
                    response, attempt = await executor.execute(
                        target,
                        options,
                        headers=headers,
                        body=body,
                        group_token=controller.token,
                    )
                except FetchError as error:
                    if config.debug:
                        logger.error(f"{options.method} {target}: request failed definitively")
                    await hooks.on_network_error(error)
                    raise

                response = await hooks.recover(response, attempt)
                await hooks.dispatch_status(response)
                await hooks.after_response(response)
                return response, options
        finally:
            self._registry.deregister(controller)

    async def request(
        self, url: str, options: RequestOptions | None = None, **fields: Any
    ) -> Any:
        r"""Send a request and decode the response according to
        ``response_type`` (JSON by default).

        Args:
            url: An absolute URL, or a URL relative to ``base_url``.
            options: Optional request options.
            **fields: Fields merged into ``options``.

        Returns:
            The decoded response (see ``aresfetch.decoding``).
        """
        response, options = await self._fetch(url, _build_options(options, fields))
        return decode_response(response, options.response_type)

    async def get(self, url: str, options: RequestOptions | None = None, **fields: Any) -> Any:
        r"""Send a GET request and decode the response."""
        return await self.request(url, _build_options(options, fields).merge(method="GET"))

    async def delete(self, url: str, options: RequestOptions | None = None, **fields: Any) -> Any:
        r"""Send a DELETE request and decode the response."""
        return await self.request(url, _build_options(options, fields).merge(method="DELETE"))

    async def post(
        self, url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
    ) -> Any:
        r"""Send a POST request with ``body`` and decode the response.

        ``Content-Type`` defaults to ``application/json`` unless the body
        is binary, a stream or form data.
        """
        return await self.request(url, self._with_body("POST", body, options, fields))

    async def put(
        self, url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
    ) -> Any:
        r"""Send a PUT request with ``body`` and decode the response."""
        return await self.request(url, self._with_body("PUT", body, options, fields))

    async def patch(
        self, url: str, body: Any = None, options: RequestOptions | None = None, **fields: Any
    ) -> Any:
        r"""Send a PATCH request with ``body`` and decode the response."""
        return await self.request(url, self._with_body("PATCH", body, options, fields))

    @staticmethod
    def _with_body(
        method: str, body: Any, options: RequestOptions | None, fields: dict[str, Any]
    ) -> RequestOptions:
        options = _build_options(options, fields).merge(method=method, body=body)
        if body_kind(options.body) in _JSON_DEFAULT_KINDS and "content-type" not in options.headers:
            options = options.merge(headers={"Content-Type": JSON_CONTENT_TYPE})
        return options
