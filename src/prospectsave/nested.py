"""Nested property streams carried as the bytes of a single byte-array property."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prospectsave.errors import InvalidCarrierError, PropertyStreamError
from prospectsave.properties import (
    ENGINE_ERRORS,
    ICARUS_PACKAGE_VERSION,
    ByteArrayProperty,
    decode_properties,
    encode_properties,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prospectsave.properties import Property

logger = logging.getLogger(__name__)

DEFAULT_CARRIER_NAME = "BinaryData"


def flatten_properties(properties: Iterable[Property], *, name: str = DEFAULT_CARRIER_NAME) -> ByteArrayProperty:
    """Encode ``properties`` as a terminated stream inside a byte-array property.

    Unlike the top-level prospect blob, the nested stream ends with the
    end-of-list tag because its parent stores it as opaque bytes.
    """
    try:
        raw = encode_properties(properties, ICARUS_PACKAGE_VERSION, include_terminator=True)
    except ENGINE_ERRORS as exc:
        raise PropertyStreamError("flatten", exc) from exc
    logger.debug("Flattened nested property stream into %s (%d bytes)", name, len(raw))
    return ByteArrayProperty(name, raw)


def unflatten_properties(carrier: Property) -> list[Property]:
    """Decode the property list stored in a byte-array carrier."""
    if not isinstance(carrier, ByteArrayProperty):
        raise InvalidCarrierError(getattr(carrier, "name", None), _describe(carrier))
    try:
        properties = decode_properties(carrier.value, ICARUS_PACKAGE_VERSION, include_terminator=True)
    except ENGINE_ERRORS as exc:
        raise PropertyStreamError("unflatten", exc) from exc
    logger.debug("Unflattened %d properties from %s", len(properties), carrier.name)
    return properties


def _describe(value: object) -> str:
    type_name = getattr(value, "type_name", None)
    inner_type = getattr(value, "inner_type", None)
    if isinstance(type_name, str) and isinstance(inner_type, str):
        return f"{type_name}<{inner_type}>"
    if isinstance(type_name, str):
        return type_name
    return type(value).__name__
