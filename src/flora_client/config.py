"""Client configuration."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from flora_client._defaults import DEFAULT_TIMEOUT_MS, FORCE_GET_PARAMS


class ClientConfig(BaseModel):
    """
    Immutable configuration for Client and AsyncClient.

    Created once per client and only read afterwards, so it can be
    shared between concurrent requests.

    Attributes:
        url: Base URL of the API, always ending with ``/``.
        default_params: Parameters added to each request unless the
            request supplies its own value.
        force_get_params: Parameter names always sent in the query string.
            Starts with ``client_id``, ``action`` and ``access_token``;
            configured names are appended, duplicates dropped.
        auth: Optional handler invoked for requests with ``auth=True``.
        timeout: Request timeout in milliseconds.

    Example:
        >>> config = ClientConfig(
        >>>     url="https://api.example.com",
        >>>     default_params={"client_id": 1},
        >>>     force_get_params=["portfolio_id"],
        >>> )
        >>> config.force_get_params
        ('client_id', 'action', 'access_token', 'portfolio_id')
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(default="", validate_default=True)
    default_params: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("default_params", "defaultParams"),
    )
    force_get_params: tuple[str, ...] = Field(
        default=FORCE_GET_PARAMS,
        validation_alias=AliasChoices("force_get_params", "forceGetParams"),
    )
    auth: Callable[..., Any] | None = None
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> str:
        if not value:
            raise ValueError("Flora API url must be set")
        url = str(value)
        return url if url.endswith("/") else f"{url}/"

    @field_validator("default_params", mode="before")
    @classmethod
    def _copy_default_params(cls, value: Any) -> dict[str, Any]:
        return dict(value or {})

    @field_validator("force_get_params", mode="before")
    @classmethod
    def _merge_force_get_params(cls, value: Any) -> tuple[str, ...]:
        names = list(FORCE_GET_PARAMS)
        for name in value or ():
            if name not in names:
                names.append(name)
        return tuple(names)

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Any:
        if not value:
            return DEFAULT_TIMEOUT_MS
        try:
            return int(value)
        except (TypeError, ValueError):
            return DEFAULT_TIMEOUT_MS
