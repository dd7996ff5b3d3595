r"""URL resolution and query parameter helpers."""

from __future__ import annotations

__all__ = ["apply_params", "is_absolute_url", "resolve_url"]

from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping


def is_absolute_url(url: str) -> bool:
    r"""Return ``True`` if ``url`` starts with an ``http`` or ``https`` scheme."""
    return url.lower().startswith(("http://", "https://"))


def resolve_url(url: str, base_url: str = "") -> str:
    r"""Resolve ``url`` against ``base_url``.

    Absolute URLs are returned untouched. Relative URLs are prefixed with
    ``base_url`` and exactly one slash separates both parts.

    Example:
        ```pycon
        >>> from aresfetch.core.url import resolve_url
        >>> resolve_url("users", "https://api.example.com/v1")
        'https://api.example.com/v1/users'
        >>> resolve_url("/users", "https://api.example.com/v1/")
        'https://api.example.com/v1/users'
        >>> resolve_url("https://other.example.com/x", "https://api.example.com")
        'https://other.example.com/x'

        ```
    """
    if is_absolute_url(url):
        return url
    path = url if url.startswith("/") else f"/{url}"
    return f"{base_url.rstrip('/')}{path}"


def apply_params(url: str, params: Mapping[str, Any] | None) -> str:
    r"""Append query parameters to ``url``.

    Each key maps to a scalar or to a list/tuple of scalars. Lists produce
    repeated entries. Keys and list elements keep their order, ``None``
    values are skipped, and booleans are rendered as ``true``/``false``.

    Example:
        ```pycon
        >>> from aresfetch.core.url import apply_params
        >>> apply_params("/items", {"tag": ["a", "b"], "page": 2, "skip": None})
        '/items?tag=a&tag=b&page=2'
        >>> apply_params("/items?sort=asc", {"page": 1})
        '/items?sort=asc&page=1'

        ```
    """
    if not params:
        return url
    pairs: list[tuple[str, Any]] = []
    for key, value in params.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        pairs.extend((key, item) for item in values if item is not None)
    if not pairs:
        return url

    query = str(httpx.QueryParams(pairs))
    base, has_fragment, fragment = url.partition("#")
    if "?" not in base:
        base = f"{base}?"
    elif not base.endswith(("?", "&")):
        base = f"{base}&"
    result = f"{base}{query}"
    return f"{result}#{fragment}" if has_fragment else result
