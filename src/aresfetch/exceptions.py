r"""Error taxonomy for orchestrated HTTP calls.

Every failure surfaced to the caller is a ``FetchError``. The subclasses
tell apart the ways a call can fail before a response is obtained:

- ``NetworkError``: connection, DNS or protocol failure
- ``RequestTimeoutError``: the per-attempt timeout fired
- ``CancelledByCallerError``: the caller's own token fired
- ``CancelledByGroupError``: ``cancel_all()`` fired on the client instance

``ServerError`` only drives the retry loop on 5xx responses and is never
raised to the caller.
"""

from __future__ import annotations

__all__ = [
    "CancelledByCallerError",
    "CancelledByGroupError",
    "FetchError",
    "NetworkError",
    "OperationCancelledError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "ServerError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class FetchError(Exception):
    r"""Base class of the errors raised by an orchestrated HTTP call.

    Args:
        method: The HTTP method of the failed call.
        url: The resolved URL of the failed call.
        message: A human readable description of the failure.
        status_code: The HTTP status code, if a response was obtained.
        response: The HTTP response, if one was obtained.
        cause: The underlying exception, if any. It is chained as
            ``__cause__``.

    Example:
        ```pycon
        >>> from aresfetch.exceptions import FetchError
        >>> error = FetchError(method="GET", url="https://api.example.com", message="boom")
        >>> error.method, error.url
        ('GET', 'https://api.example.com')
        >>> str(error)
        'boom'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        self.response = response
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return (
            f"{type(self).__qualname__}(method={self.method!r}, url={self.url!r}, "
            f"message={self.message!r}, status_code={self.status_code!r})"
        )


class NetworkError(FetchError):
    r"""Raised when the transport fails before any status code is obtained."""


class RequestTimeoutError(FetchError):
    r"""Raised when the per-attempt timeout of a call fires."""


class RequestCancelledError(FetchError):
    r"""Base class of the cancellation errors."""


class CancelledByCallerError(RequestCancelledError):
    r"""Raised when the cancellation token supplied by the caller fires."""


class CancelledByGroupError(RequestCancelledError):
    r"""Raised when the client's ``cancel_all()`` aborts the call."""


class ServerError(FetchError):
    r"""Internal signal for a 5xx response that is eligible for retry."""


class OperationCancelledError(Exception):
    r"""Raised when an effective cancellation token has tripped.

    Transports raise this error when the token they observe fires. It is
    translated by the retry loop into one of the ``RequestCancelledError``
    subclasses or into a ``RequestTimeoutError``.

    Args:
        reason: The reason carried by the token that tripped.
        origin: The input token that fired. For a combined token this is
            the component that tripped, otherwise the token itself.
    """

    def __init__(self, reason: Any = None, origin: Any = None) -> None:
        super().__init__(reason if reason is not None else "operation cancelled")
        self.reason = reason
        self.origin = origin
