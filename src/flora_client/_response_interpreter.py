"""Internal module for interpreting HTTP responses.

This module contains the response handling shared by both sync and
async clients.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from flora_client._defaults import JSON_CONTENT_TYPE
from flora_client.exceptions import ServerError

logger = logging.getLogger(__name__)


def _error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


def interpret_response(
    status_code: int,
    content_type: str | None,
    content: bytes | str,
    reason_phrase: str = "",
) -> Any:
    """
    Turn a raw HTTP response into the decoded payload.

    Args:
        status_code: HTTP status code.
        content_type: Value of the Content-Type header.
        content: Raw response body.
        reason_phrase: Status line reason, used for error messages.

    Returns:
        The decoded JSON payload for successful responses.

    Raises:
        ServerError: If the content type is not JSON or the status code
            indicates an error. JSON errors carry the decoded payload.
        json.JSONDecodeError: If a JSON response body cannot be parsed.
    """
    content_type = content_type or ""

    if not content_type.startswith(JSON_CONTENT_TYPE):
        invalid_type = f'Invalid content type: "{content_type}"'
        if status_code < httpx.codes.BAD_REQUEST:
            raise ServerError(f"Server Error: {invalid_type}", status_code)
        raise ServerError(
            f"Server Error: {reason_phrase or invalid_type}", status_code
        )

    # Parse errors propagate unwrapped
    payload = json.loads(content)

    if status_code < httpx.codes.BAD_REQUEST:
        return payload

    message = _error_message(payload) or (
        f"Server Error: {reason_phrase or 'Invalid JSON'}"
    )
    logger.debug(
        "Server returned an error",
        extra={"status_code": status_code, "error_message": message},
    )
    raise ServerError(message, status_code, payload=payload)


def interpret_httpx_response(response: httpx.Response) -> Any:
    """Interpret an httpx.Response (see interpret_response)."""
    return interpret_response(
        response.status_code,
        response.headers.get("content-type"),
        response.content,
        response.reason_phrase,
    )
