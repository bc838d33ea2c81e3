"""
schema.py — Flatten ``DescribeCvObject`` responses.

Turns the describe payload for one object type into ``FieldDescriptor``s
and plain field-name lists.  No I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cvent_client.core.normalize import as_list, as_text, collection


@dataclass
class FieldDescriptor:
    """A describe entry reduced to its name and whether it is a custom field."""

    name: str
    is_custom: bool = False


def first_description(payload: Any) -> dict[str, Any]:
    """Return the first object description in a ``DescribeCvObject`` response.

    The response nests ``DescribeCvObjectResult`` entries inside a
    ``DescribeCvObjectResult`` wrapper.  Returns ``{}`` if there are none.
    """
    for entry in collection(payload, "DescribeCvObjectResult", "DescribeCvObjectResult"):
        if isinstance(entry, dict):
            return entry
    return {}


def field_descriptors(description: dict[str, Any], include_custom: bool = True) -> list[FieldDescriptor]:
    """Standard fields in service order, then custom fields if requested."""
    descriptors = [
        FieldDescriptor(as_text(f.get("Name")))
        for f in as_list(description.get("Field"))
        if isinstance(f, dict) and f.get("Name")
    ]
    if include_custom:
        descriptors.extend(
            FieldDescriptor(as_text(f.get("Name")), is_custom=True)
            for f in as_list(description.get("CustomField"))
            if isinstance(f, dict) and f.get("Name")
        )
    return descriptors


def field_names(description: dict[str, Any], include_custom: bool = True) -> list[str]:
    return [d.name for d in field_descriptors(description, include_custom)]
