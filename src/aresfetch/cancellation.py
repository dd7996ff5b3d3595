r"""Cooperative cancellation tokens and the signal combinator.

A ``CancellationToken`` makes a one-shot transition to the cancelled state
and carries a reason once tripped. It is owned by a
``CancellationController``, which is the only way to trip it. Several tokens
are merged into one effective token with ``combine_tokens``: the effective
token trips as soon as any input trips, and it remembers which input fired
(``origin``) so the caller can classify the failure.

Example:
    ```pycon
    >>> from aresfetch.cancellation import CancellationController, combine_tokens
    >>> user, group = CancellationController(), CancellationController()
    >>> token = combine_tokens(user.token, group.token)
    >>> token.cancelled
    False
    >>> group.cancel("shutdown")
    True
    >>> token.cancelled, token.reason, token.origin is group.token
    (True, 'shutdown', True)

    ```
"""

from __future__ import annotations

__all__ = [
    "CancellationController",
    "CancellationToken",
    "CombinedToken",
    "combine_tokens",
    "combined",
    "timeout_scope",
]

import asyncio
import logging
from contextlib import contextmanager, suppress
from typing import TYPE_CHECKING, Any

from aresfetch.exceptions import OperationCancelledError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "cancelled"


class CancellationToken:
    r"""Observable one-shot cancellation flag.

    Tokens are created by a ``CancellationController`` (or by
    ``combine_tokens``). Consumers either poll ``cancelled``, register a
    callback, or ``await wait()``.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Any = None
        self._origin: CancellationToken | None = None
        self._callbacks: list[Callable[[CancellationToken], None]] = []
        self._event: asyncio.Event | None = None

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(cancelled={self._cancelled}, reason={self._reason!r})"

    @property
    def cancelled(self) -> bool:
        r"""``True`` once the token has tripped."""
        return self._cancelled

    @property
    def reason(self) -> Any:
        r"""The reason given when the token tripped, or ``None``."""
        return self._reason

    @property
    def origin(self) -> CancellationToken | None:
        r"""The token that actually fired.

        For a plain token this is the token itself. For a combined token it
        is the input that tripped first.
        """
        return self._origin

    def add_callback(self, callback: Callable[[CancellationToken], None]) -> None:
        r"""Register ``callback`` to be called once when the token trips.

        If the token is already cancelled the callback is called immediately.

        Args:
            callback: A function receiving the tripped token.
        """
        if self._cancelled:
            callback(self)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[CancellationToken], None]) -> None:
        r"""Unregister ``callback``. Unknown callbacks are ignored."""
        with suppress(ValueError):
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        r"""Raise ``OperationCancelledError`` if the token has tripped.

        Raises:
            OperationCancelledError: If the token is cancelled.
        """
        if self._cancelled:
            raise OperationCancelledError(self._reason, self._origin)

    async def wait(self) -> None:
        r"""Suspend until the token trips."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _trip(self, reason: Any, origin: CancellationToken | None = None) -> bool:
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        self._origin = origin if origin is not None else self
        if self._event is not None:
            self._event.set()
        # Swap before notifying so callbacks may unsubscribe themselves.
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
        return True


class CancellationController:
    r"""Owner of a ``CancellationToken``.

    Example:
        ```pycon
        >>> from aresfetch.cancellation import CancellationController
        >>> controller = CancellationController()
        >>> controller.cancel("user left the page")
        True
        >>> controller.cancel("again")
        False
        >>> controller.token.reason
        'user left the page'

        ```
    """

    def __init__(self) -> None:
        self._token = CancellationToken()

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(cancelled={self._token.cancelled})"

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def cancel(self, reason: Any = None) -> bool:
        r"""Trip the token. Only the first call has an effect.

        Args:
            reason: The reason attached to the token. Defaults to
                ``"cancelled"``.

        Returns:
            ``True`` if this call tripped the token, ``False`` if it was
            already cancelled.
        """
        return self._token._trip(DEFAULT_CANCEL_REASON if reason is None else reason)


class CombinedToken(CancellationToken):
    r"""Token that trips when any of its source tokens trips.

    On the first firing it adopts the reason and origin of the source and
    unsubscribes from every source. ``close()`` releases the subscriptions
    when no source ever fired.

    Args:
        sources: The tokens to merge.
    """

    def __init__(self, sources: tuple[CancellationToken, ...]) -> None:
        super().__init__()
        self._sources = sources
        for source in sources:
            if source.cancelled:
                self._trip(source.reason, source.origin)
                return
        for source in sources:
            source.add_callback(self._on_source_cancelled)

    @property
    def sources(self) -> tuple[CancellationToken, ...]:
        return self._sources

    def close(self) -> None:
        r"""Unsubscribe from every source token."""
        for source in self._sources:
            source.remove_callback(self._on_source_cancelled)

    def _on_source_cancelled(self, source: CancellationToken) -> None:
        self.close()
        logger.debug(f"combined token tripped by {source!r}")
        self._trip(source.reason, source.origin)


def combine_tokens(*tokens: CancellationToken | None) -> CancellationToken | None:
    r"""Merge several cancellation tokens into one effective token.

    Args:
        *tokens: The tokens to merge. ``None`` entries are ignored.

    Returns:
        ``None`` when no token is given, the token itself when exactly one
        is given, otherwise a ``CombinedToken``. A combined token starts
        cancelled if any input is already cancelled.

    Example:
        ```pycon
        >>> from aresfetch.cancellation import CancellationController, combine_tokens
        >>> combine_tokens() is None
        True
        >>> controller = CancellationController()
        >>> combine_tokens(None, controller.token) is controller.token
        True

        ```
    """
    active = tuple(token for token in tokens if token is not None)
    if not active:
        return None
    if len(active) == 1:
        return active[0]
    return CombinedToken(active)


@contextmanager
def combined(*tokens: CancellationToken | None) -> Iterator[CancellationToken | None]:
    r"""Context manager around ``combine_tokens`` that releases subscriptions.

    Args:
        *tokens: The tokens to merge. ``None`` entries are ignored.

    Yields:
        The effective token, or ``None`` if no token was given.
    """
    token = combine_tokens(*tokens)
    try:
        yield token
    finally:
        if isinstance(token, CombinedToken):
            token.close()


@contextmanager
def timeout_scope(timeout: float | None) -> Iterator[CancellationToken | None]:
    r"""Yield a token that trips after ``timeout`` seconds.

    The timer is scheduled on the running event loop and cancelled on every
    exit path, so it can never fire after the scope is left.

    Args:
        timeout: The delay in seconds, or ``None`` for no timeout.

    Yields:
        The timeout token, or ``None`` if ``timeout`` is ``None``.
    """
    if timeout is None:
        yield None
        return
    controller = CancellationController()
    handle = asyncio.get_running_loop().call_later(
        timeout, controller.cancel, f"timeout after {timeout}s"
    )
    try:
        yield controller.token
    finally:
        handle.cancel()
