"""Exception classes for flora-client."""

from __future__ import annotations

from typing import Any

import httpx

from flora_client._defaults import TIMEOUT_ERROR_CODE


class FloraError(Exception):
    """
    Base exception for all flora-client errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FloraError):
    """
    Raised when a request description is structurally invalid.

    Detected before any I/O happens, e.g. an id that is neither a finite
    number nor a string, or an unsupported response format.
    """


class AuthError(FloraError):
    """Raised when an authenticated request is made without an auth handler."""


class ServerError(FloraError):
    """
    Raised when a completed HTTP exchange represents a failure.

    This covers error status codes, unexpected content types and JSON
    error envelopes.

    Attributes:
        message: Error message, taken from ``payload["error"]["message"]``
            when the server provides one.
        status_code: HTTP status code from the response.
        payload: The decoded JSON response, if the body was JSON.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_client_error(self) -> bool:
        """Check if this is a 4xx client error."""
        return httpx.codes.is_client_error(self.status_code)

    @property
    def is_server_error(self) -> bool:
        """Check if this is a 5xx server error."""
        return httpx.codes.is_server_error(self.status_code)

    def __str__(self) -> str:
        return f"{self.message} (status: {self.status_code})"


class TransportError(FloraError):
    """
    Raised when the underlying transport fails.

    Timeouts carry the ``ETIMEDOUT`` code; other failures carry the
    adapter's native error code (the httpx exception name for the
    bundled adapters).

    Attributes:
        code: Identifiable failure code.
        original_exception: The exception raised by the transport.
    """

    def __init__(
        self,
        message: str,
        code: str,
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.original_exception = original_exception

    @property
    def is_timeout(self) -> bool:
        """Check if the request was aborted because it timed out."""
        return self.code == TIMEOUT_ERROR_CODE

    def __str__(self) -> str:
        return f"{self.message} (code: {self.code})"
