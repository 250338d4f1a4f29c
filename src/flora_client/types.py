"""Type definitions and protocols for flora-client."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, TypeAlias, Union

import httpx
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    PrivateAttr,
    model_validator,
)
from typing_extensions import Self

from flora_client._defaults import STRUCTURAL_KEYS


class HTTPMethod(str, Enum):
    """HTTP method enumeration."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


VALID_HTTP_METHODS: set[str] = {method.value for method in HTTPMethod}

Headers: TypeAlias = dict[str, str]
QueryParams: TypeAlias = dict[str, Any]
Scalar: TypeAlias = Union[str, int, float, bool]

_FIELD_ALIASES = {"httpMethod": "http_method", "httpHeaders": "http_headers"}


class RequestSpec(BaseModel):
    """
    Declarative description of a single API request.

    Any keyword not declared below is accepted as a free-form request
    parameter (``client_id``, ``access_token``, custom filters, ...).
    Parameters keep the order in which the caller supplied them.

    Attributes:
        resource: Resource name, used as the first path segment.
        id: Optional entity id (finite number or string).
        format: Response format; only ``json`` is supported.
        action: Action name; ``retrieve`` is the implicit default.
        select: Field selection, as a string or nested select spec.
        data: Payload sent as JSON request body.
        cache: Set to False to append a cache-busting parameter; None
            counts as absent.
        http_method: Explicit HTTP method, bypassing method selection.
        http_headers: Extra request headers.
        auth: Invoke the configured auth handler before sending.

    Example:
        >>> RequestSpec(resource="user", id=1337, select=["id", "name"])
        >>> RequestSpec.model_validate({"resource": "article", "httpMethod": "PUT"})
    """

    model_config = ConfigDict(extra="allow")

    resource: str
    id: Any = None
    format: Scalar | None = None
    action: Scalar | None = None
    select: Any = None
    filter: Scalar | None = None
    order: Scalar | None = None
    limit: Scalar | None = None
    page: Scalar | None = None
    search: Scalar | None = None
    data: Any = None
    cache: bool | None = True
    http_method: str | None = Field(
        default=None, validation_alias=AliasChoices("http_method", "httpMethod")
    )
    http_headers: dict[str, str] | None = Field(
        default=None, validation_alias=AliasChoices("http_headers", "httpHeaders")
    )
    auth: bool | None = False

    _field_order: tuple[str, ...] = PrivateAttr(default=())

    @model_validator(mode="wrap")
    @classmethod
    def _remember_field_order(
        cls, data: Any, handler: ModelWrapValidatorHandler[Self]
    ) -> Self:
        spec = handler(data)
        if isinstance(data, Mapping):
            spec._field_order = tuple(_FIELD_ALIASES.get(key, key) for key in data)
        return spec

    def request_params(self) -> dict[str, Any]:
        """
        Collect the parameters to transmit, in caller order.

        Structural fields (resource, id, cache, data, auth, http_method,
        http_headers) are never parameters. ``None`` values are skipped.
        """
        fields = type(self).model_fields
        extra = self.model_extra or {}
        names = [*self._field_order, *fields, *extra]
        params: dict[str, Any] = {}
        for name in names:
            if name in STRUCTURAL_KEYS or name in params:
                continue
            # Extras may shadow BaseModel attributes such as copy or json
            if name in fields:
                value = getattr(self, name)
            else:
                value = extra.get(name)
            if value is not None:
                params[name] = value
        return params


@dataclass
class TransportRequest:
    """
    Fully resolved HTTP request handed to a transport.

    Attributes:
        method: HTTP method.
        url: Absolute URL including the query string.
        headers: Request headers.
        body: Encoded request body, if any.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=dict)
    body: str | None = None


AuthHandler: TypeAlias = Callable[[RequestSpec], Any]


class Transport(Protocol):
    """Executes one HTTP request and returns the raw response."""

    def send(self, request: TransportRequest) -> httpx.Response: ...

    def close(self) -> None: ...


class AsyncTransport(Protocol):
    """Async counterpart of Transport."""

    async def send(self, request: TransportRequest) -> httpx.Response: ...

    async def aclose(self) -> None: ...
