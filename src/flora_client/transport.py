"""HTTP transports backed by httpx."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import httpx

from flora_client._defaults import DEFAULT_TIMEOUT_MS, TIMEOUT_ERROR_CODE
from flora_client.exceptions import TransportError
from flora_client.types import Headers, TransportRequest

logger = logging.getLogger(__name__)


def _script_referer() -> str | None:
    if sys.argv and sys.argv[0]:
        return f"file://{os.path.abspath(sys.argv[0])}"
    return None


def _with_referer(headers: Headers) -> Headers:
    if any(name.lower() == "referer" for name in headers):
        return headers
    referer = _script_referer()
    return {**headers, "Referer": referer} if referer else headers


def _client_timeout_ms(client: httpx.Client | httpx.AsyncClient) -> int | None:
    read_timeout = client.timeout.read
    return None if read_timeout is None else int(read_timeout * 1000)


def _timeout_error(timeout_ms: int | None, exc: Exception) -> TransportError:
    if timeout_ms is None:
        message = f"Request timed out: {exc}"
    else:
        message = f"Request timed out after {timeout_ms} milliseconds"
    return TransportError(
        message,
        code=TIMEOUT_ERROR_CODE,
        original_exception=exc,
    )


def _request_error(exc: httpx.RequestError) -> TransportError:
    return TransportError(
        f"Request failed: {exc}",
        code=type(exc).__name__,
        original_exception=exc,
    )


class HTTPXTransport:
    """
    Synchronous transport executing requests with httpx.Client.

    An injected ``client`` stays owned by the caller: its own timeout
    applies and ``close`` leaves it open.

    Attributes:
        timeout_ms: Timeout in milliseconds applied to every request, or
            the injected client's read timeout.

    Example:
        >>> with HTTPXTransport(timeout_ms=5000) as transport:
        >>>     response = transport.send(
        >>>         TransportRequest("GET", "https://api.example.com/user/")
        >>>     )
    """

    def __init__(
        self,
        timeout_ms: int | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            self.timeout_ms: int | None = timeout_ms or DEFAULT_TIMEOUT_MS
            client = httpx.Client(
                timeout=self.timeout_ms / 1000, follow_redirects=True
            )
        elif timeout_ms is None:
            self.timeout_ms = _client_timeout_ms(client)
        else:
            self.timeout_ms = timeout_ms
        self._httpx_client = client

    def send(self, request: TransportRequest) -> httpx.Response:
        """
        Execute a request and return the raw response.

        Raises:
            TransportError: On timeouts (code ``ETIMEDOUT``) and network
                failures (code is the httpx exception name).
        """
        logger.debug(
            "Sending request", extra={"method": request.method, "url": request.url}
        )
        try:
            return self._httpx_client.request(
                request.method,
                request.url,
                headers=_with_referer(request.headers),
                content=request.body,
            )
        except httpx.TimeoutException as e:
            raise _timeout_error(self.timeout_ms, e) from e
        except httpx.RequestError as e:
            raise _request_error(e) from e

    def __enter__(self) -> HTTPXTransport:
        """Support context manager protocol."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Close transport when exiting context."""
        self.close()

    def close(self) -> None:
        """Close the underlying httpx client unless it was injected."""
        if self._owns_client:
            self._httpx_client.close()


class AsyncHTTPXTransport:
    """Asynchronous transport executing requests with httpx.AsyncClient."""

    def __init__(
        self,
        timeout_ms: int | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            self.timeout_ms: int | None = timeout_ms or DEFAULT_TIMEOUT_MS
            client = httpx.AsyncClient(
                timeout=self.timeout_ms / 1000, follow_redirects=True
            )
        elif timeout_ms is None:
            self.timeout_ms = _client_timeout_ms(client)
        else:
            self.timeout_ms = timeout_ms
        self._httpx_client = client

    async def send(self, request: TransportRequest) -> httpx.Response:
        """Execute a request asynchronously (see HTTPXTransport.send)."""
        logger.debug(
            "Sending request", extra={"method": request.method, "url": request.url}
        )
        try:
            return await self._httpx_client.request(
                request.method,
                request.url,
                headers=_with_referer(request.headers),
                content=request.body,
            )
        except httpx.TimeoutException as e:
            raise _timeout_error(self.timeout_ms, e) from e
        except httpx.RequestError as e:
            raise _request_error(e) from e

    async def __aenter__(self) -> AsyncHTTPXTransport:
        """Support async context manager protocol."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close transport when exiting async context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying async httpx client unless it was injected."""
        if self._owns_client:
            await self._httpx_client.aclose()
