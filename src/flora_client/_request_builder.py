"""Internal module for turning request specs into transport requests.

This module contains the request pipeline shared by both sync and
async clients: validation, auth delegation, parameter merging, method
selection and URL/body assembly. Each step returns new values, the
caller's RequestSpec and its header mapping are never mutated.
"""

from __future__ import annotations

import inspect
import json
import logging
import math
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from flora_client._defaults import (
    CACHE_BUSTER_PARAM,
    DEFAULT_ACTION,
    FORM_CONTENT_TYPE,
    JSON_BODY_CONTENT_TYPE,
    MAX_QUERY_LENGTH,
)
from flora_client._querystring import querystringify, render_value
from flora_client._stringify import stringify
from flora_client.config import ClientConfig
from flora_client.exceptions import AuthError, ValidationError
from flora_client.types import HTTPMethod, RequestSpec, TransportRequest

logger = logging.getLogger(__name__)


def to_request_spec(
    request: RequestSpec | Mapping[str, Any] | None,
    params: Mapping[str, Any] | None = None,
) -> RequestSpec:
    """Coerce a RequestSpec, a mapping or keyword parameters into a RequestSpec."""
    if request is None:
        return RequestSpec.model_validate(dict(params or {}))
    if params:
        raise TypeError("Pass either a request or keyword parameters, not both")
    if isinstance(request, RequestSpec):
        return request
    return RequestSpec.model_validate(dict(request))


def is_valid_request_id(value: Any) -> bool:
    """Check that an id is a finite number or a string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, str)


def validate_request_spec(spec: RequestSpec) -> None:
    """
    Reject structurally invalid requests before any I/O happens.

    Raises:
        ValidationError: If the id has an unsupported type or the
            requested format is not JSON.
    """
    if spec.id is not None and not is_valid_request_id(spec.id):
        raise ValidationError("Request id must be of type number or string")
    if spec.format and str(spec.format).lower() != "json":
        raise ValidationError("Only JSON format supported")


def _prepare_auth_request(config: ClientConfig, spec: RequestSpec) -> RequestSpec:
    if config.auth is None:
        raise AuthError("Auth requests require an auth handler")
    return spec.model_copy(
        update={"http_headers": dict(spec.http_headers or {})}, deep=True
    )


def _auth_result(result: Any, prepared: RequestSpec) -> RequestSpec:
    if result is None:
        return prepared
    return to_request_spec(result)


def authenticate(config: ClientConfig, spec: RequestSpec) -> RequestSpec:
    """
    Run the configured auth handler for requests flagged with ``auth``.

    The handler receives a copy of the request with ``http_headers``
    guaranteed to be a dict. It may modify that copy in place and return
    None, or return a new request.

    Raises:
        AuthError: If the request asks for auth and no handler is configured.
        TypeError: If the handler is asynchronous.
    """
    if not spec.auth:
        return spec

    prepared = _prepare_auth_request(config, spec)
    result = config.auth(prepared)  # type: ignore[misc]
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise TypeError(
            "Client requires a synchronous auth handler, use AsyncClient instead"
        )
    return _auth_result(result, prepared)


async def aauthenticate(config: ClientConfig, spec: RequestSpec) -> RequestSpec:
    """Async counterpart of authenticate; accepts sync and async handlers."""
    if not spec.auth:
        return spec

    prepared = _prepare_auth_request(config, spec)
    result = config.auth(prepared)  # type: ignore[misc]
    if inspect.isawaitable(result):
        result = await result
    return _auth_result(result, prepared)


def select_method(params: Mapping[str, Any], has_json_body: bool) -> HTTPMethod:
    """
    Choose GET or POST from the shape of the resolved parameters.

    POST is used for JSON bodies, for any action other than ``retrieve``,
    and when the encoded parameters would exceed the URL length limit.
    """
    if has_json_body:
        return HTTPMethod.POST

    action = params.get("action")
    if action and action != DEFAULT_ACTION:
        return HTTPMethod.POST

    if len(querystringify(params)) > MAX_QUERY_LENGTH:
        return HTTPMethod.POST

    return HTTPMethod.GET


def convert_method_to_string(method: HTTPMethod | str) -> str:
    """Convert HTTPMethod enum to string."""
    return method.value if isinstance(method, HTTPMethod) else method


def _stringify_select(params: dict[str, Any]) -> dict[str, Any]:
    select = params.get("select")
    if select is None or isinstance(select, str):
        return params
    return {**params, "select": stringify(select)}


def _merge_defaults(
    params: dict[str, Any], defaults: Mapping[str, Any]
) -> dict[str, Any]:
    missing = {key: value for key, value in defaults.items() if key not in params}
    return {**params, **missing}


def _elide_default_action(params: dict[str, Any]) -> dict[str, Any]:
    if params.get("action") != DEFAULT_ACTION:
        return params
    return {key: value for key, value in params.items() if key != "action"}


def _split_force_get(
    params: dict[str, Any], names: Iterable[str]
) -> tuple[dict[str, Any], dict[str, Any]]:
    query = {name: params[name] for name in names if name in params}
    rest = {key: value for key, value in params.items() if key not in query}
    return query, rest


def _encode_json_body(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class _CacheBuster:
    """Strictly increasing millisecond values for the cache busting parameter."""

    def __init__(self, clock: Callable[[], int] = _epoch_millis) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return self._last


_next_cache_buster = _CacheBuster()


def build_request(config: ClientConfig, spec: RequestSpec) -> TransportRequest:
    """
    Build a transport-ready request from a request spec.

    Args:
        config: Client configuration (base URL, default and force-get params).
        spec: The request to build.

    Returns:
        TransportRequest with resolved method, URL, headers and body.

    Raises:
        ValidationError: If the request id or format is invalid.

    Example:
        >>> config = ClientConfig(url="https://api.example.com")
        >>> request = build_request(config, RequestSpec(resource="user", id=1337))
        >>> request.method, request.url
        ('GET', 'https://api.example.com/user/1337')
    """
    validate_request_spec(spec)

    headers = dict(spec.http_headers or {})
    body: str | None = None

    params = _stringify_select(spec.request_params())

    if spec.data is not None:
        body = _encode_json_body(spec.data)
        headers["Content-Type"] = JSON_BODY_CONTENT_TYPE
    has_json_body = body is not None

    params = _merge_defaults(params, config.default_params)
    params = _elide_default_action(params)

    if spec.http_method is not None:
        method = spec.http_method
    else:
        method = convert_method_to_string(select_method(params, has_json_body))

    if method == HTTPMethod.POST.value and not has_json_body:
        headers["Content-Type"] = FORM_CONTENT_TYPE

    query, params = _split_force_get(params, config.force_get_params)

    if params and (has_json_body or method == HTTPMethod.GET.value):
        query = {**query, **params}
        params = {}

    # Whatever is left travels form-encoded in the body.
    if params:
        body = querystringify(params)
        headers.setdefault("Content-Type", FORM_CONTENT_TYPE)

    if body is not None:
        headers["Content-Length"] = str(len(body.encode("utf-8")))

    request_id = "" if spec.id is None else render_value(spec.id)
    url = f"{config.url}{spec.resource}/{request_id}"
    if query:
        url = f"{url}?{querystringify(query)}"

    if spec.cache is False:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{CACHE_BUSTER_PARAM}={_next_cache_buster()}"

    logger.debug(
        "Built request",
        extra={"method": method, "url": url, "has_body": body is not None},
    )
    return TransportRequest(method=method, url=url, headers=headers, body=body)
