r"""Structured logging utilities for machine-readable log output.

Every orchestrated call binds a short call id in a context variable for its
whole duration, so the log records of one call (attempts, retries, hook
failures) can be grouped even when many calls interleave on the same event
loop. ``StructuredFormatter`` renders records as JSON and adds the call id.

The structured output is opt-in:

```python
import logging
from aresfetch.utils.structured_logging import StructuredFormatter

handler = logging.StreamHandler()
handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("aresfetch")
logger.addHandler(handler)
logger.setLevel(logging.DEBUG)
```
"""

from __future__ import annotations

__all__ = ["StructuredFormatter", "bind_call_id", "get_call_id", "log_structured"]

import contextvars
import json
import logging
import time
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

_call_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "aresfetch_call_id", default=None
)

_RESERVED_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "msecs",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
)


def get_call_id() -> str | None:
    """Get the id of the call running in the current context.

    Returns:
        The call id, or None outside of an orchestrated call.

    Example:
        ```pycon
        >>> from aresfetch.utils.structured_logging import bind_call_id, get_call_id
        >>> get_call_id() is None
        True
        >>> with bind_call_id("call-1"):
        ...     get_call_id()
        ...
        'call-1'

        ```
    """
    return _call_id.get()


@contextmanager
def bind_call_id(call_id: str | None = None) -> Iterator[str]:
    """Bind a call id to the current context.

    The previous value is restored on exit, which keeps nested calls and
    sequential calls in the same task independent.

    Args:
        call_id: The id to bind. A random 12-character hex id is generated
            if omitted.

    Yields:
        The bound call id.
    """
    if call_id is None:
        call_id = uuid.uuid4().hex[:12]
    token = _call_id.set(call_id)
    try:
        yield call_id
    finally:
        _call_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 timestamp
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - call_id: Id of the orchestrated call, if any
        - module, function, line: Origin of the record

    Fields passed through the ``extra`` argument of logging calls (for
    example ``attempt`` or ``status_code``) are included as well.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from aresfetch.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("structured_example")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("attempt failed", extra={"attempt": 2})
        >>> json.loads(stream.getvalue())["attempt"]
        2

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        call_id = get_call_id()
        if call_id is not None:
            log_data["call_id"] = call_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format timestamp as ISO 8601 with millisecond precision."""
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message with structured data.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
    """
    logger.log(level, message, extra=extra)
