"""Default configuration values and request constants.

This module centralizes the values shared by the request builder,
the clients and the transports.
"""

from __future__ import annotations

DEFAULT_TIMEOUT_MS = 15000

# Always sent in the query string, regardless of the HTTP method.
FORCE_GET_PARAMS: tuple[str, ...] = ("client_id", "action", "access_token")

# RequestSpec fields that shape the request but are never sent as parameters.
STRUCTURAL_KEYS = frozenset(
    {"resource", "id", "cache", "data", "auth", "http_method", "http_headers"}
)

DEFAULT_ACTION = "retrieve"
MAX_QUERY_LENGTH = 2000
CACHE_BUSTER_PARAM = "_"

JSON_CONTENT_TYPE = "application/json"
JSON_BODY_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

TIMEOUT_ERROR_CODE = "ETIMEDOUT"
