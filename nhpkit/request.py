"""Plain HTTP requests returning the response body."""

from __future__ import annotations

from typing import Mapping, Optional

import requests

CONTENT_TYPE = "application/x-www-form-urlencoded"
GET_TIMEOUT = 10.0


def get(url: str) -> str:
    """GET ``url`` with a ten-second timeout and return the body."""
    response = requests.get(url, timeout=GET_TIMEOUT)
    return response.text


def request(
    url: str, method: str, body: str, header: Optional[Mapping[str, str]]
) -> str:
    """Send ``body`` to ``url`` with ``method`` and headers; return the body."""
    response = requests.request(
        method, url, data=body.encode("utf-8"), headers=dict(header or {})
    )
    return response.text