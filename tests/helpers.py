r"""Shared test helpers for the orchestrator tests.

``FakeTransport`` stands in for the network: it answers from a script of
outcomes and records every call it receives.
"""

from __future__ import annotations

__all__ = ["TEST_URL", "FakeTransport", "SentRequest"]

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from aresfetch.exceptions import OperationCancelledError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from aresfetch.cancellation import CancellationToken

TEST_URL = "https://api.example.com/data"


@dataclass
class SentRequest:
    """One call received by ``FakeTransport``."""

    method: str
    url: str
    headers: httpx.Headers
    body: Any
    token: CancellationToken | None
    options: dict[str, Any] = field(default_factory=dict)


class FakeTransport:
    """Transport answering from a script of outcomes.

    Each call consumes the next outcome; the last one repeats forever.
    An outcome is an ``httpx.Response``, a status code, or an exception
    instance to raise.

    Args:
        outcomes: The scripted outcomes.
        latency: Seconds each call takes. The wait is interrupted when the
            token trips, like a real transport would.
    """

    def __init__(self, outcomes: Sequence[Any] = (200,), *, latency: float = 0.0) -> None:
        self.outcomes = list(outcomes)
        self.latency = latency
        self.calls: list[SentRequest] = []
        self.closed = False

    async def send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: Any,
        token: CancellationToken | None,
        **options: Any,
    ) -> httpx.Response:
        self.calls.append(SentRequest(method, url, httpx.Headers(headers), body, token, options))
        if token is not None:
            token.raise_if_cancelled()
        if self.latency:
            await self._wait(token)

        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, request=httpx.Request(method, url))
        return outcome

    async def aclose(self) -> None:
        self.closed = True

    async def wait_for_calls(self, count: int) -> None:
        """Yield to the event loop until ``count`` calls were received."""
        while len(self.calls) < count:
            await asyncio.sleep(0)

    async def _wait(self, token: CancellationToken | None) -> None:
        if token is None:
            await asyncio.sleep(self.latency)
            return
        sleeper = asyncio.ensure_future(asyncio.sleep(self.latency))
        waiter = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait((sleeper, waiter), return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            waiter.cancel()
        if token.cancelled:
            raise OperationCancelledError(token.reason, token.origin)
