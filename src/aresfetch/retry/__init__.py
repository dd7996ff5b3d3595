r"""Retry package for orchestrated HTTP calls.

Public API:
    - AttemptState: Transient record of one attempt
    - RetryDecider: Logic for deciding whether to retry and for classifying
      transport failures
    - AsyncRetryExecutor: Asynchronous fixed-delay retry loop
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor", "AttemptState", "RetryDecider"]

from aresfetch.retry.attempt import AttemptState
from aresfetch.retry.decider import RetryDecider
from aresfetch.retry.executor import AsyncRetryExecutor
