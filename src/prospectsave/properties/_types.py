"""Property variants: the closed set of typed values a property stream can hold."""

from __future__ import annotations

import struct
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, TypeAlias

ZERO_GUID = bytes(16)

# struct.pack formats for fixed-width numeric properties (little-endian).
NUMERIC_FORMATS: Mapping[str, str] = MappingProxyType(
    {
        "Int8Property": "<b",
        "Int16Property": "<h",
        "IntProperty": "<i",
        "Int64Property": "<q",
        "UInt16Property": "<H",
        "UInt32Property": "<I",
        "UInt64Property": "<Q",
        "FloatProperty": "<f",
        "DoubleProperty": "<d",
    }
)
_FLOAT_TYPES = frozenset({"FloatProperty", "DoubleProperty"})

STRING_TYPES = frozenset({"StrProperty", "NameProperty", "ObjectProperty"})

# Structs serialized as a fixed binary layout rather than a nested property list.
FIXED_LAYOUT_STRUCTS = frozenset(
    {
        "Box",
        "Color",
        "DateTime",
        "Guid",
        "IntPoint",
        "IntVector",
        "LinearColor",
        "Quat",
        "Rotator",
        "Timespan",
        "Vector",
        "Vector2D",
        "Vector4",
    }
)

# Structs serialized natively as variable-length bytes (an FString path).
VARIABLE_LAYOUT_STRUCTS = frozenset({"SoftClassPath", "SoftObjectPath"})

# Structs whose value is kept as raw bytes rather than a nested property list.
BINARY_STRUCTS = FIXED_LAYOUT_STRUCTS | VARIABLE_LAYOUT_STRUCTS

# Number of FString type names a raw property carries in its tag header.
RAW_HEADER_ARITY: Mapping[str, int] = MappingProxyType(
    {
        "ArrayProperty": 1,
        "SetProperty": 1,
        "MapProperty": 2,
    }
)

ARRAY_INNER_TYPES = frozenset(
    {"BoolProperty", "EnumProperty", "StructProperty", *NUMERIC_FORMATS, *STRING_TYPES},
)


def _check_tag(name: str, array_index: int, guid: bytes | None) -> None:
    """Validate the fields shared by every property tag."""
    if not isinstance(name, str) or not name or name == "None":
        msg = f"Property name must be a non-empty string other than 'None'; got {name!r}."
        raise ValueError(msg)
    if not isinstance(array_index, int) or isinstance(array_index, bool) or array_index < 0:
        msg = f"{name}: array_index must be a non-negative int."
        raise ValueError(msg)
    if guid is not None and len(guid) != 16:
        msg = f"{name}: property guid must be 16 bytes."
        raise ValueError(msg)


def _check_int(value: object, *, field_name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int; got {type(value).__name__}."
        raise TypeError(msg)


def _numeric_value(type_name: str, value: object, *, field_name: str) -> int | float:
    """Validate a numeric value; ``FloatProperty`` values are rounded to float32 as stored."""
    if type_name not in _FLOAT_TYPES:
        _check_int(value, field_name=field_name)
        return value  # type: ignore[return-value]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{field_name}: {type_name} value must be a number; got {type(value).__name__}."
        raise TypeError(msg)
    if type_name == "DoubleProperty":
        return float(value)
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as exc:
        msg = f"{field_name}: {value!r} is out of range for FloatProperty."
        raise ValueError(msg) from exc


def _array_element(inner_type: str, value: object, *, field_name: str) -> object:
    """Validate one scalar array element for ``inner_type``."""
    if inner_type in NUMERIC_FORMATS:
        return _numeric_value(inner_type, value, field_name=field_name)
    if inner_type == "BoolProperty":
        if not isinstance(value, bool):
            msg = f"{field_name} must be a bool; got {type(value).__name__}."
            raise TypeError(msg)
        return value
    if value is not None and not isinstance(value, str):
        msg = f"{field_name} must be a string or None; got {type(value).__name__}."
        raise TypeError(msg)
    return value


def _struct_payload(struct_type: str, value: object, *, field_name: str) -> tuple[Property, ...] | bytes:
    """Normalize a struct value: raw bytes for binary structs, a property tuple otherwise."""
    if struct_type in BINARY_STRUCTS:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            msg = f"{field_name}: {struct_type} structs hold raw bytes."
            raise TypeError(msg)
        return bytes(value)
    if isinstance(value, (bytes, bytearray, memoryview, str)):
        msg = f"{field_name}: {struct_type} structs hold a sequence of properties."
        raise TypeError(msg)
    return tuple(value)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class BoolProperty:
    """Boolean property; the value lives in the tag header."""

    name: str
    value: bool
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "BoolProperty"

    def __post_init__(self) -> None:
        """Validate tag fields."""
        _check_tag(self.name, self.array_index, self.guid)
        object.__setattr__(self, "value", bool(self.value))


@dataclass(frozen=True, slots=True)
class NumericProperty:
    """Fixed-width integer or floating point property (see ``NUMERIC_FORMATS``)."""

    name: str
    type_name: str
    value: int | float
    array_index: int = 0
    guid: bytes | None = None

    def __post_init__(self) -> None:
        """Validate the numeric type and coerce float values."""
        _check_tag(self.name, self.array_index, self.guid)
        if self.type_name not in NUMERIC_FORMATS:
            msg = f"{self.name}: unknown numeric property type {self.type_name!r}."
            raise ValueError(msg)
        object.__setattr__(self, "value", _numeric_value(self.type_name, self.value, field_name=f"{self.name}.value"))


@dataclass(frozen=True, slots=True)
class StringProperty:
    """String-valued property: ``StrProperty``, ``NameProperty`` or ``ObjectProperty``."""

    name: str
    type_name: str
    value: str | None
    array_index: int = 0
    guid: bytes | None = None

    def __post_init__(self) -> None:
        """Validate the string type."""
        _check_tag(self.name, self.array_index, self.guid)
        if self.type_name not in STRING_TYPES:
            msg = f"{self.name}: unknown string property type {self.type_name!r}."
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ByteProperty:
    """Single byte, or an enum name when ``enum_name`` is not ``"None"``."""

    name: str
    value: int | str | None
    enum_name: str = "None"
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "ByteProperty"

    def __post_init__(self) -> None:
        """Validate that the value matches the enum/raw form."""
        _check_tag(self.name, self.array_index, self.guid)
        if self.enum_name == "None":
            _check_int(self.value, field_name=f"{self.name}.value")
            if not 0 <= self.value <= 0xFF:  # type: ignore[operator]
                msg = f"{self.name}: byte value out of range."
                raise ValueError(msg)
        elif self.value is not None and not isinstance(self.value, str):
            msg = f"{self.name}: enum byte value must be a string."
            raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class EnumProperty:
    """Enum property stored by value name."""

    name: str
    enum_type: str
    value: str | None
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "EnumProperty"

    def __post_init__(self) -> None:
        """Validate tag fields."""
        _check_tag(self.name, self.array_index, self.guid)


@dataclass(frozen=True, slots=True)
class StructProperty:
    """Struct property.

    Binary structs (``BINARY_STRUCTS``: fixed layouts and natively serialized
    paths) keep their raw bytes; every other struct holds its members as a
    property tuple.
    """

    name: str
    struct_type: str
    value: tuple[Property, ...] | bytes
    struct_guid: bytes = ZERO_GUID
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "StructProperty"

    def __post_init__(self) -> None:
        """Normalize the struct payload."""
        _check_tag(self.name, self.array_index, self.guid)
        if len(self.struct_guid) != 16:
            msg = f"{self.name}: struct guid must be 16 bytes."
            raise ValueError(msg)
        object.__setattr__(self, "value", _struct_payload(self.struct_type, self.value, field_name=self.name))

    @property
    def is_binary(self) -> bool:
        """Return whether the value is raw struct bytes."""
        return self.struct_type in BINARY_STRUCTS


@dataclass(frozen=True, slots=True)
class ArrayProperty:
    """Array of scalar, enum, string or struct elements.

    Struct arrays hold one payload per element (bytes or property tuple, as in
    ``StructProperty``); ``element_name`` defaults to the array's own name.
    Byte arrays are modelled by ``ByteArrayProperty``.
    """

    name: str
    inner_type: str
    values: tuple[object, ...]
    struct_type: str | None = None
    element_name: str | None = None
    struct_guid: bytes = ZERO_GUID
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "ArrayProperty"

    def __post_init__(self) -> None:
        """Validate the inner type and normalize element containers."""
        _check_tag(self.name, self.array_index, self.guid)
        if self.inner_type == "ByteProperty":
            msg = f"{self.name}: byte arrays are represented by ByteArrayProperty."
            raise ValueError(msg)
        if self.inner_type not in ARRAY_INNER_TYPES:
            msg = f"{self.name}: unsupported array inner type {self.inner_type!r}."
            raise ValueError(msg)

        if self.inner_type != "StructProperty":
            if self.struct_type is not None:
                msg = f"{self.name}: struct_type is only valid for struct arrays."
                raise ValueError(msg)
            values = tuple(
                _array_element(self.inner_type, value, field_name=f"{self.name}[{index}]")
                for index, value in enumerate(self.values)
            )
            object.__setattr__(self, "values", values)
            return

        if not self.struct_type:
            msg = f"{self.name}: struct arrays require a struct_type."
            raise ValueError(msg)
        if self.struct_type in VARIABLE_LAYOUT_STRUCTS:
            msg = f"{self.name}: {self.struct_type} arrays are kept as RawProperty."
            raise ValueError(msg)
        if len(self.struct_guid) != 16:
            msg = f"{self.name}: struct guid must be 16 bytes."
            raise ValueError(msg)
        if self.element_name is None:
            object.__setattr__(self, "element_name", self.name)
        elements = tuple(
            _struct_payload(self.struct_type, element, field_name=f"{self.name}[{index}]")
            for index, element in enumerate(self.values)
        )
        object.__setattr__(self, "values", elements)


@dataclass(frozen=True, slots=True)
class ByteArrayProperty:
    """Array of raw bytes (``ArrayProperty`` with inner type ``ByteProperty``)."""

    name: str
    value: bytes
    array_index: int = 0
    guid: bytes | None = None

    type_name: ClassVar[str] = "ArrayProperty"
    inner_type: ClassVar[str] = "ByteProperty"

    def __post_init__(self) -> None:
        """Copy the payload into immutable bytes."""
        _check_tag(self.name, self.array_index, self.guid)
        if self.value is None or isinstance(self.value, str):
            msg = f"{self.name}: byte array value must be bytes-like or a sequence of ints."
            raise TypeError(msg)
        object.__setattr__(self, "value", bytes(self.value))


@dataclass(frozen=True, slots=True)
class RawProperty:
    """Property kept as opaque value bytes (maps, sets, text, unmodelled arrays).

    ``header_types`` are the type names written in the tag header
    (``RAW_HEADER_ARITY`` gives how many a type carries).
    """

    name: str
    type_name: str
    value: bytes
    header_types: tuple[str | None, ...] = ()
    array_index: int = 0
    guid: bytes | None = None

    def __post_init__(self) -> None:
        """Validate header arity and copy the payload."""
        _check_tag(self.name, self.array_index, self.guid)
        header_types = tuple(self.header_types)
        expected = RAW_HEADER_ARITY.get(self.type_name, 0)
        if len(header_types) != expected:
            msg = f"{self.name}: {self.type_name} carries {expected} header type name(s); got {len(header_types)}."
            raise ValueError(msg)
        object.__setattr__(self, "header_types", header_types)
        object.__setattr__(self, "value", bytes(self.value))


Property: TypeAlias = (
    BoolProperty
    | NumericProperty
    | StringProperty
    | ByteProperty
    | EnumProperty
    | StructProperty
    | ArrayProperty
    | ByteArrayProperty
    | RawProperty
)

PROPERTY_CLASSES = (
    BoolProperty,
    NumericProperty,
    StringProperty,
    ByteProperty,
    EnumProperty,
    StructProperty,
    ArrayProperty,
    ByteArrayProperty,
    RawProperty,
)
