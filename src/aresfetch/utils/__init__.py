r"""Utility helpers."""

from __future__ import annotations

__all__ = ["StructuredFormatter", "bind_call_id", "get_call_id", "log_structured"]

from aresfetch.utils.structured_logging import (
    StructuredFormatter,
    bind_call_id,
    get_call_id,
    log_structured,
)
