"""Query string encoding for flat parameter mappings."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# Characters left unescaped by browsers' encodeURIComponent besides [A-Za-z0-9_.-~]
_SAFE_CHARS = "!*'()"


def render_value(value: Any) -> str:
    """Render a scalar parameter value as it appears on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_component(value: Any) -> str:
    """Percent-encode a single key or value."""
    return quote(render_value(value), safe=_SAFE_CHARS)


def querystringify(params: Mapping[str, Any]) -> str:
    """
    Encode a flat mapping as ``key=value`` pairs joined by ``&``.

    Pairs keep the mapping's iteration order.

    Example:
        >>> querystringify({"search": "full text", "page": 2})
        'search=full%20text&page=2'
    """
    return "&".join(
        f"{encode_component(key)}={encode_component(value)}"
        for key, value in params.items()
    )
