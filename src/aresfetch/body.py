r"""Header and body normalization.

Request bodies form a closed set of shapes that is resolved once, before the
retry loop starts:

- binary (``bytes``, ``bytearray``, ``memoryview``)
- stream (sync iterator, file object or async iterable of bytes), buffered
  into bytes by ``read_stream`` when the call may be retried
- form fields (``FormBody``), sent as multipart or url-encoded form data
- url-encoded pairs (``UrlEncodedBody``)
- structured object (``dict``, ``list``, ``tuple``), serialized to JSON
  unless an explicit non-JSON content type is set

Anything else (``str``, ``None``) is passed through unchanged.
"""

from __future__ import annotations

__all__ = [
    "JSON_CONTENT_TYPE",
    "BodyKind",
    "FormBody",
    "UrlEncodedBody",
    "body_kind",
    "is_json_content_type",
    "normalize_headers",
    "prepare_body",
    "read_stream",
]

import json
from collections.abc import AsyncIterable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class FormBody:
    r"""Form fields, with optional files for a multipart upload.

    Attributes:
        fields: The form fields.
        files: Optional files, in any shape accepted by ``httpx``.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)
    files: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class UrlEncodedBody:
    r"""Url-encoded key/value pairs. Keys may repeat.

    Attributes:
        pairs: The pairs, as a mapping or as a sequence of 2-tuples.
    """

    pairs: Mapping[str, Any] | Sequence[tuple[str, Any]] = ()


class BodyKind(str, Enum):
    r"""The shapes a request body can take."""

    EMPTY = "empty"
    BINARY = "binary"
    STREAM = "stream"
    FORM = "form"
    URLENCODED = "urlencoded"
    OBJECT = "object"
    RAW = "raw"


def body_kind(body: Any) -> BodyKind:
    r"""Return the shape of ``body``.

    Example:
        ```pycon
        >>> from aresfetch.body import body_kind
        >>> body_kind(b"data").value, body_kind({"a": 1}).value, body_kind("text").value
        ('binary', 'object', 'raw')

        ```
    """
    if body is None:
        return BodyKind.EMPTY
    if isinstance(body, (bytes, bytearray, memoryview)):
        return BodyKind.BINARY
    if isinstance(body, FormBody):
        return BodyKind.FORM
    if isinstance(body, UrlEncodedBody):
        return BodyKind.URLENCODED
    if isinstance(body, (dict, list, tuple)):
        return BodyKind.OBJECT
    if isinstance(body, (AsyncIterable, Iterator)):
        return BodyKind.STREAM
    return BodyKind.RAW


def normalize_headers(headers: Any = None) -> httpx.Headers:
    r"""Build a case-insensitive header mapping.

    ``None`` values are dropped and every other value is converted to
    ``str``.

    Args:
        headers: A mapping, a sequence of pairs, an ``httpx.Headers`` or
            ``None``.

    Returns:
        A new ``httpx.Headers`` instance.

    Example:
        ```pycon
        >>> from aresfetch.body import normalize_headers
        >>> headers = normalize_headers({"X-Page": 2, "X-Skip": None})
        >>> headers["x-page"], "x-skip" in headers
        ('2', False)

        ```
    """
    if headers is None:
        return httpx.Headers()
    if isinstance(headers, httpx.Headers):
        return httpx.Headers(headers)
    items = headers.items() if isinstance(headers, Mapping) else headers
    return httpx.Headers([(key, str(value)) for key, value in items if value is not None])


def is_json_content_type(content_type: str | None) -> bool:
    r"""Return ``True`` if ``content_type`` is ``application/json``.

    Media type parameters such as ``charset`` are ignored.
    """
    if content_type is None:
        return False
    return content_type.split(";", 1)[0].strip().lower() == JSON_CONTENT_TYPE


def prepare_body(body: Any, headers: httpx.Headers) -> tuple[Any, httpx.Headers]:
    r"""Decide how ``body`` is encoded and finalize the headers.

    Args:
        body: The request body.
        headers: The request headers. They are not modified.

    Returns:
        The body to hand to the transport, and the final headers.

    Example:
        ```pycon
        >>> import httpx
        >>> from aresfetch.body import prepare_body
        >>> body, headers = prepare_body({"a": 1}, httpx.Headers())
        >>> body, headers["content-type"]
        ('{"a": 1}', 'application/json')
        >>> body, headers = prepare_body({"a": 1}, httpx.Headers({"Content-Type": "text/plain"}))
        >>> body
        {'a': 1}

        ```
    """
    headers = httpx.Headers(headers)
    kind = body_kind(body)
    if kind == BodyKind.FORM:
        # The transport picks the content type (and the multipart boundary).
        headers.pop("content-type", None)
        return body, headers
    if kind != BodyKind.OBJECT:
        return body, headers

    content_type = headers.get("content-type")
    if content_type is not None and not is_json_content_type(content_type):
        return body, headers
    if content_type is None:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return json.dumps(body), headers


async def read_stream(body: AsyncIterable[bytes] | Iterable[bytes]) -> bytes:
    r"""Read a stream body into bytes.

    A stream can only be consumed once, so a body that may be sent by more
    than one attempt is buffered before the first one.

    Args:
        body: A sync iterator, a file object or an async iterable. ``str``
            chunks are encoded as UTF-8.

    Returns:
        The concatenated chunks.

    Example:
        ```pycon
        >>> import asyncio
        >>> import io
        >>> from aresfetch.body import read_stream
        >>> asyncio.run(read_stream(io.BytesIO(b"line 1\nline 2")))
        b'line 1\nline 2'
        >>> asyncio.run(read_stream(iter([b"a", "b"])))
        b'ab'

        ```
    """
    if isinstance(body, AsyncIterable):
        chunks = [chunk async for chunk in body]
    else:
        chunks = list(body)
    return b"".join(chunk.encode() if isinstance(chunk, str) else bytes(chunk) for chunk in chunks)
