"""
Shared bits for code that talks to this API over HTTP.
"""
import os
from typing import Any, Optional

import httpx

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
HTTP_TIMEOUT = float(os.getenv("API_HTTP_TIMEOUT", "30.0"))


class ApiError(Exception):
    """An error envelope returned by the API."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def unwrap_jsend(response: httpx.Response) -> Any:
    """
    Return the `data` of a JSend envelope.

    Raises:
        httpx.HTTPStatusError: On a non-2xx status
        ApiError: When the envelope is an error or a failure
    """
    response.raise_for_status()
    body = response.json()
    if body.get("status") != "success":
        raise ApiError(body.get("message") or "Request failed", body.get("code"))
    return body.get("data")
