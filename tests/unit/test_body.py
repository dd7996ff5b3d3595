from __future__ import annotations

import io
import json

import httpx
import pytest

from aresfetch.body import (
    JSON_CONTENT_TYPE,
    BodyKind,
    FormBody,
    UrlEncodedBody,
    body_kind,
    is_json_content_type,
    normalize_headers,
    prepare_body,
    read_stream,
)


async def _chunks():
    yield b"a"


def _lines():
    yield b"line 1\n"
    yield b"line 2"


###############################
#     Tests for body_kind     #
###############################


@pytest.mark.parametrize(
    ("body", "kind"),
    [
        (None, BodyKind.EMPTY),
        (b"data", BodyKind.BINARY),
        (bytearray(b"data"), BodyKind.BINARY),
        (memoryview(b"data"), BodyKind.BINARY),
        (FormBody({"a": "1"}), BodyKind.FORM),
        (UrlEncodedBody([("a", "1")]), BodyKind.URLENCODED),
        ({"a": 1}, BodyKind.OBJECT),
        ([1, 2], BodyKind.OBJECT),
        ((1, 2), BodyKind.OBJECT),
        (iter([b"a"]), BodyKind.STREAM),
        (_lines(), BodyKind.STREAM),
        (io.BytesIO(b"data"), BodyKind.STREAM),
        ("text", BodyKind.RAW),
        (42, BodyKind.RAW),
    ],
)
def test_body_kind(body: object, kind: BodyKind) -> None:
    assert body_kind(body) == kind


def test_body_kind_async_stream() -> None:
    stream = _chunks()
    assert body_kind(stream) == BodyKind.STREAM


#######################################
#     Tests for normalize_headers     #
#######################################


def test_normalize_headers_none() -> None:
    assert normalize_headers(None) == httpx.Headers()


def test_normalize_headers_drops_none_and_stringifies() -> None:
    headers = normalize_headers({"X-Page": 2, "X-Skip": None, "Accept": "text/plain"})
    assert headers == httpx.Headers({"x-page": "2", "accept": "text/plain"})


def test_normalize_headers_case_insensitive() -> None:
    headers = normalize_headers({"Content-Type": "text/plain"})
    assert headers["content-type"] == "text/plain"
    assert headers["CONTENT-TYPE"] == "text/plain"


def test_normalize_headers_copies_headers() -> None:
    original = httpx.Headers({"X-Key": "1"})
    headers = normalize_headers(original)
    headers["X-Key"] = "2"
    assert original["x-key"] == "1"


def test_normalize_headers_pairs() -> None:
    headers = normalize_headers([("X-Key", "1"), ("X-Other", None)])
    assert dict(headers) == {"x-key": "1"}


##########################################
#     Tests for is_json_content_type     #
##########################################


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("application/json", True),
        ("Application/JSON", True),
        ("application/json; charset=utf-8", True),
        ("text/plain", False),
        ("application/vnd.api+json", False),
        (None, False),
    ],
)
def test_is_json_content_type(content_type: str | None, expected: bool) -> None:
    assert is_json_content_type(content_type) is expected


##################################
#     Tests for prepare_body     #
##################################


def test_prepare_body_object_defaults_to_json() -> None:
    body, headers = prepare_body({"a": 1}, httpx.Headers())
    assert json.loads(body) == {"a": 1}
    assert headers["content-type"] == JSON_CONTENT_TYPE


def test_prepare_body_list_is_json() -> None:
    body, _ = prepare_body([1, 2, 3], httpx.Headers())
    assert body == "[1, 2, 3]"


def test_prepare_body_object_with_json_content_type() -> None:
    body, headers = prepare_body(
        {"a": 1}, httpx.Headers({"Content-Type": "application/json; charset=utf-8"})
    )
    assert body == '{"a": 1}'
    assert headers["content-type"] == "application/json; charset=utf-8"


def test_prepare_body_object_with_non_json_content_type() -> None:
    body, headers = prepare_body({"a": 1}, httpx.Headers({"Content-Type": "text/plain"}))
    assert body == {"a": 1}
    assert headers["content-type"] == "text/plain"


def test_prepare_body_form_drops_content_type() -> None:
    form = FormBody({"name": "Ada"})
    body, headers = prepare_body(form, httpx.Headers({"Content-Type": JSON_CONTENT_TYPE}))
    assert body is form
    assert "content-type" not in headers


@pytest.mark.parametrize("body", [None, b"raw", "text"])
def test_prepare_body_passthrough(body: object) -> None:
    result, headers = prepare_body(body, httpx.Headers({"X-Key": "1"}))
    assert result is body
    assert headers == httpx.Headers({"X-Key": "1"})


def test_prepare_body_does_not_modify_headers() -> None:
    headers = httpx.Headers()
    prepare_body({"a": 1}, headers)
    assert "content-type" not in headers


def test_prepare_body_stream_passthrough() -> None:
    stream = _lines()
    result, headers = prepare_body(stream, httpx.Headers())
    assert result is stream
    assert "content-type" not in headers


#################################
#     Tests for read_stream     #
#################################


@pytest.mark.asyncio
async def test_read_stream_generator() -> None:
    assert await read_stream(_lines()) == b"line 1\nline 2"


@pytest.mark.asyncio
async def test_read_stream_file_object() -> None:
    assert await read_stream(io.BytesIO(b"line 1\nline 2")) == b"line 1\nline 2"


@pytest.mark.asyncio
async def test_read_stream_async_iterable() -> None:
    assert await read_stream(_chunks()) == b"a"


@pytest.mark.asyncio
async def test_read_stream_str_chunks() -> None:
    assert await read_stream(iter(["café", b"!"])) == "café!".encode()


@pytest.mark.asyncio
async def test_read_stream_empty() -> None:
    assert await read_stream(iter([])) == b""
