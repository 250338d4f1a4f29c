"""Client for resource-oriented JSON APIs, built on HTTPX and Pydantic."""

__version__ = "0.1.0"

from flora_client._querystring import querystringify
from flora_client._request_builder import build_request, select_method
from flora_client._response_interpreter import interpret_response
from flora_client._stringify import stringify
from flora_client.async_client import AsyncClient
from flora_client.client import Client
from flora_client.config import ClientConfig
from flora_client.exceptions import (
    AuthError,
    FloraError,
    ServerError,
    TransportError,
    ValidationError,
)
from flora_client.transport import AsyncHTTPXTransport, HTTPXTransport
from flora_client.types import (
    VALID_HTTP_METHODS,
    AsyncTransport,
    AuthHandler,
    HTTPMethod,
    RequestSpec,
    Transport,
    TransportRequest,
)

__all__ = [
    "__version__",
    "ClientConfig",
    "RequestSpec",
    "TransportRequest",
    "Client",
    "AsyncClient",
    "Transport",
    "AsyncTransport",
    "HTTPXTransport",
    "AsyncHTTPXTransport",
    "AuthHandler",
    "FloraError",
    "ValidationError",
    "AuthError",
    "ServerError",
    "TransportError",
    "build_request",
    "select_method",
    "interpret_response",
    "stringify",
    "querystringify",
    "HTTPMethod",
    "VALID_HTTP_METHODS",
]
