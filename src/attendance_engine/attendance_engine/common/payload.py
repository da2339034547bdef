from __future__ import annotations

from typing import Any, Mapping


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def pick(payload: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read ``name`` from a plain record, accepting snake_case or camelCase keys."""

    if name in payload and payload[name] is not None:
        return payload[name]
    alt = camel(name)
    if alt in payload and payload[alt] is not None:
        return payload[alt]
    return default


def has(payload: Mapping[str, Any], name: str) -> bool:
    return pick(payload, name) is not None
