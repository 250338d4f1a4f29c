"""Async API client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flora_client._request_builder import (
    aauthenticate,
    build_request,
    to_request_spec,
    validate_request_spec,
)
from flora_client._response_interpreter import interpret_httpx_response
from flora_client.client import resolve_config
from flora_client.config import ClientConfig
from flora_client.transport import AsyncHTTPXTransport
from flora_client.types import AsyncTransport, RequestSpec

logger = logging.getLogger(__name__)


class AsyncClient:
    """
    Async client for resource-oriented JSON APIs.

    The request pipeline only suspends while awaiting the auth handler
    and the transport; the configuration is read-only, so concurrent
    ``execute`` calls are independent.

    Example:
        >>> async def add_token(request: RequestSpec) -> None:
        >>>     request.http_headers["Authorization"] = f"Bearer {await fetch_token()}"
        >>>
        >>> async with AsyncClient(url="https://api.example.com", auth=add_token) as client:
        >>>     users = await client.execute(resource="user", auth=True)
    """

    client_config: ClientConfig | None = None

    def __init__(
        self,
        config: ClientConfig | None = None,
        /,
        *,
        transport: AsyncTransport | None = None,
        **options: Any,
    ) -> None:
        """Initialize the client from a config or keyword options."""
        self.config = resolve_config(config, self.client_config, options)
        self._owns_transport = transport is None
        self._transport = transport or AsyncHTTPXTransport(self.config.timeout)

    async def execute(
        self,
        request: RequestSpec | Mapping[str, Any] | None = None,
        /,
        **params: Any,
    ) -> Any:
        """Execute a request and return the decoded JSON payload (see Client.execute)."""
        spec = to_request_spec(request, params)
        validate_request_spec(spec)
        spec = await aauthenticate(self.config, spec)

        transport_request = build_request(self.config, spec)
        response = await self._transport.send(transport_request)
        logger.debug(
            "Received response",
            extra={"url": transport_request.url, "status_code": response.status_code},
        )
        return interpret_httpx_response(response)

    async def __aenter__(self) -> AsyncClient:
        """Support async context manager protocol."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close client when exiting async context."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying async transport unless it was injected."""
        if self._owns_transport:
            await self._transport.aclose()
