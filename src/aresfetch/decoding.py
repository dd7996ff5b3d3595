r"""Decoding of final responses for ``FetchClient.request``."""

from __future__ import annotations

__all__ = ["decode_response"]

import json
import logging
from typing import TYPE_CHECKING, Any

from aresfetch.options import DEFAULT_RESPONSE_TYPE, ResponseType

if TYPE_CHECKING:
    import httpx

logger: logging.Logger = logging.getLogger(__name__)


def decode_response(
    response: httpx.Response, response_type: ResponseType | str = DEFAULT_RESPONSE_TYPE
) -> Any:
    r"""Decode ``response`` according to ``response_type``.

    - ``response``: the ``httpx.Response`` itself
    - ``bytes``: the raw body
    - ``text``: the decoded text
    - ``json``: the parsed JSON document, ``{}`` for a 204 response, or the
      raw text if the body is not valid JSON

    Example:
        ```pycon
        >>> import httpx
        >>> from aresfetch.decoding import decode_response
        >>> decode_response(httpx.Response(200, text='{"id": 1}'))
        {'id': 1}
        >>> decode_response(httpx.Response(200, text="plain"), "json")
        'plain'
        >>> decode_response(httpx.Response(204))
        {}

        ```
    """
    response_type = ResponseType(response_type)
    if response_type == ResponseType.RESPONSE:
        return response
    if response_type == ResponseType.BYTES:
        return response.content
    if response_type == ResponseType.TEXT:
        return response.text
    if response.status_code == 204:
        return {}
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        logger.debug(f"response body is not JSON, returning text ({len(text)} chars)")
        return text
