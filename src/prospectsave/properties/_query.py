"""Path lookup over nested property lists."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from prospectsave.properties._types import ArrayProperty, Property, StructProperty

if TYPE_CHECKING:
    from collections.abc import Iterable

_SEGMENT = re.compile(r"^(?P<name>[^.\[\]]+)(?:\[(?P<index>\d+)\])?$")


def _parse_segment(segment: str) -> tuple[str, int | None]:
    match = _SEGMENT.match(segment)
    if match is None:
        msg = f"Invalid property path segment {segment!r}."
        raise ValueError(msg)
    index = match.group("index")
    return match.group("name"), int(index) if index is not None else None


def _struct_element(prop: Property, index: int) -> StructProperty | None:
    """Return element ``index`` of a struct array as a StructProperty."""
    if not isinstance(prop, ArrayProperty) or prop.inner_type != "StructProperty":
        return None
    if index >= len(prop.values):
        return None
    return StructProperty(
        prop.element_name or prop.name,
        prop.struct_type or "",
        prop.values[index],  # type: ignore[arg-type]
        struct_guid=prop.struct_guid,
    )


def find_property(properties: Iterable[Property], path: str) -> Property | None:
    """Find a nested property by dot-separated path.

    Segments descend into struct members; ``Name[i]`` selects element ``i`` of a
    struct array. Examples::

        find_property(props, "ProspectInfo.LobbyName")
        find_property(props, "StateRecorderBlobs[0].BinaryData")
    """
    scope: tuple[Property, ...] | None = tuple(properties)
    current: Property | None = None
    for segment in path.split("."):
        name, index = _parse_segment(segment)
        if scope is None:
            return None
        current = next((prop for prop in scope if prop.name == name), None)
        if current is None:
            return None
        if index is not None:
            current = _struct_element(current, index)
            if current is None:
                return None
        if isinstance(current, StructProperty) and not current.is_binary:
            scope = current.value  # type: ignore[assignment]
        else:
            scope = None
    return current
