"""Validation helpers for reading and writing envelope JSON payloads."""

from collections.abc import Mapping

from prospectsave.errors import MalformedEnvelopeError


def to_plain_data(value: object) -> object:
    """Recursively normalize Mapping/tuple containers into plain dict/list values."""
    if isinstance(value, Mapping):
        return {str(key): to_plain_data(item) for key, item in value.items()}
    if isinstance(value, (tuple, list)):
        return [to_plain_data(item) for item in value]
    return value


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a JSON object into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a JSON object."
        raise MalformedEnvelopeError(msg)
    return {str(key): item for key, item in value.items()}


def require_string(value: object, *, field_name: str) -> str:
    """Validate a required string field."""
    if not isinstance(value, str):
        msg = f"{field_name} must be a string."
        raise MalformedEnvelopeError(msg)
    return value


def optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    return require_string(value, field_name=field_name)


def require_int(value: object, *, field_name: str) -> int:
    """Validate a required integer field (rejects booleans)."""
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an integer."
        raise MalformedEnvelopeError(msg)
    return value


def optional_int(value: object, *, field_name: str) -> int | None:
    """Validate an optional integer field (rejects booleans)."""
    if value is None:
        return None
    return require_int(value, field_name=field_name)


def optional_bool(value: object, *, field_name: str) -> bool | None:
    """Validate an optional boolean field."""
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"{field_name} must be a boolean or null."
        raise MalformedEnvelopeError(msg)
    return value
