r"""Transient per-attempt record used by the retry loop."""

from __future__ import annotations

__all__ = ["AttemptState"]

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from aresfetch.cancellation import CancellationToken
    from aresfetch.exceptions import FetchError


@dataclass
class AttemptState:
    """State of one attempt of a call.

    Attributes:
        index: The attempt index (0-indexed).
        token: The effective cancellation token of the attempt.
        timeout_token: The per-attempt timeout token, if a timeout was
            requested.
        started_at: ``time.monotonic()`` at the start of the attempt.
        response: The response, if the transport returned one.
        error: The classified error, if the attempt failed.
    """

    index: int
    token: CancellationToken | None = None
    timeout_token: CancellationToken | None = None
    started_at: float = field(default_factory=time.monotonic)
    response: httpx.Response | None = None
    error: FetchError | None = None

    @property
    def elapsed(self) -> float:
        """Seconds since the attempt started."""
        return time.monotonic() - self.started_at
