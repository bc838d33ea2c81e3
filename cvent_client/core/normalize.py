"""
normalize.py — Shape helpers for Cvent SOAP payloads.

The API collapses one-element arrays into a bare value and sometimes hands
back the response wrapper instead of its body.  These helpers paper over
both so the rest of the code only ever sees lists and bodies.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any


def as_list(value: Any) -> list[Any]:
    """Coerce a single-or-many payload value into a list.

    ``None`` becomes ``[]``, a list is returned unchanged, and anything
    else is wrapped in a one-element list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def unwrap(payload: Any, key: str) -> Any:
    """Return ``payload[key]`` when *payload* is the response wrapper.

    zeep unwraps single-child responses on its own, so the same call can
    come back as ``{"SearchResult": {...}}`` or just ``{...}``.
    """
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return payload


def collection(payload: Any, wrapper: str, item: str) -> list[Any]:
    """Extract the repeated *item* element from a response as a list.

    Example: ``collection(result, "SearchResult", "Id")`` handles
    ``{"SearchResult": {"Id": "A"}}``, ``{"Id": ["A", "B"]}`` and ``None``.
    """
    body = unwrap(payload, wrapper)
    if isinstance(body, dict):
        return as_list(body.get(item))
    return as_list(body)


def is_blank(value: Any) -> bool:
    """``True`` for ``None``, empty strings, and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def as_text(value: Any) -> str:
    """Render a scalar payload value as the string stored in a field map."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
