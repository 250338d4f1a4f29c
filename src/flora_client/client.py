"""Synchronous API client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flora_client._request_builder import (
    authenticate,
    build_request,
    to_request_spec,
    validate_request_spec,
)
from flora_client._response_interpreter import interpret_httpx_response
from flora_client.config import ClientConfig
from flora_client.transport import HTTPXTransport
from flora_client.types import RequestSpec, Transport

logger = logging.getLogger(__name__)


def resolve_config(
    config: ClientConfig | None,
    class_config: ClientConfig | None,
    options: dict[str, Any],
) -> ClientConfig:
    """Pick the explicit config, keyword options or the class-level config."""
    if config is not None:
        if options:
            raise TypeError("Pass either a ClientConfig or keyword options, not both")
        return config
    if class_config is not None and not options:
        return class_config
    return ClientConfig(**options)


class Client:
    """
    Client for resource-oriented JSON APIs.

    Turns declarative requests into HTTP calls against a single API
    endpoint and returns the decoded JSON response.

    Attributes:
        client_config: Optional class-level configuration for subclasses.
        config: The configuration used by this instance.

    Example:
        >>> client = Client(url="https://api.example.com", default_params={"client_id": 1})
        >>> client.execute(resource="user", id=1337, select=["id", "name"])
        >>>
        >>> # Declarative configuration
        >>> class APIClient(Client):
        >>>     client_config = ClientConfig(url="https://api.example.com")
        >>>
        >>> with APIClient() as client:
        >>>     client.execute({"resource": "article", "action": "create", "data": {...}})
    """

    client_config: ClientConfig | None = None

    def __init__(
        self,
        config: ClientConfig | None = None,
        /,
        *,
        transport: Transport | None = None,
        **options: Any,
    ) -> None:
        """Initialize the client from a config or keyword options."""
        self.config = resolve_config(config, self.client_config, options)
        self._owns_transport = transport is None
        self._transport = transport or HTTPXTransport(self.config.timeout)

    def execute(
        self,
        request: RequestSpec | Mapping[str, Any] | None = None,
        /,
        **params: Any,
    ) -> Any:
        """
        Execute a request and return the decoded JSON response.

        Args:
            request: A RequestSpec or mapping describing the request.
            **params: Request fields, as an alternative to ``request``.

        Returns:
            The decoded JSON payload.

        Raises:
            ValidationError: If the request is structurally invalid.
            AuthError: If ``auth`` is requested without an auth handler.
            TransportError: If the transport fails or times out.
            ServerError: If the server responds with an error.
            json.JSONDecodeError: If a JSON response cannot be parsed.
        """
        spec = to_request_spec(request, params)
        validate_request_spec(spec)
        spec = authenticate(self.config, spec)

        transport_request = build_request(self.config, spec)
        response = self._transport.send(transport_request)
        logger.debug(
            "Received response",
            extra={"url": transport_request.url, "status_code": response.status_code},
        )
        return interpret_httpx_response(response)

    def __enter__(self) -> Client:
        """Support context manager protocol."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Close client when exiting context."""
        self.close()

    def close(self) -> None:
        """Close the underlying transport unless it was injected."""
        if self._owns_transport:
            self._transport.close()
