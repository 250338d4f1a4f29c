"""Compact serialization of nested ``select`` specifications."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias, Union

SelectSpec: TypeAlias = Union[str, Sequence["SelectSpec"], Mapping[str, "SelectSpec"]]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _has_multiple_items(value: Any) -> bool:
    """Check whether a group value needs brackets instead of dot notation."""
    if _is_sequence(value):
        if len(value) > 1:
            return True
        count = sum(
            len(item) if isinstance(item, Mapping) or _is_sequence(item) else 1
            for item in value
        )
        return count > 1
    if isinstance(value, Mapping):
        return len(value) > 1
    return False


def stringify(spec: SelectSpec) -> str:
    """
    Render a select specification into the compact select grammar.

    Sequences are joined with ``,``. Mapping entries render as
    ``key[items]`` when the value holds more than one item and as
    ``key.item`` otherwise. Scalars render as themselves.

    Example:
        >>> stringify(["id", "name"])
        'id,name'
        >>> stringify({"groupA": ["attr1", "attr2"]})
        'groupA[attr1,attr2]'
        >>> stringify({"subGroup": ["attr"]})
        'subGroup.attr'
    """
    if _is_sequence(spec):
        return ",".join(stringify(item) for item in spec)

    if isinstance(spec, Mapping):
        parts = []
        for key, value in spec.items():
            rendered = stringify(value)
            if _has_multiple_items(value):
                parts.append(f"{key}[{rendered}]")
            else:
                parts.append(f"{key}.{rendered}")
        return ",".join(parts)

    return str(spec)
