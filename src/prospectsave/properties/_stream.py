"""Property stream codec: tag framing for ordered property lists.

A tag is framed as::

    FString name, FString type, int32 value size, int32 array index,
    type header, [property GUID flag (+ GUID)], value

Nested property lists (struct members) always end with the ``None`` end-of-list
tag. Top-level streams either run to the end of the buffer
(``include_terminator=False``) or end with the ``None`` tag followed by a
4-byte zero trailer (``include_terminator=True``).
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from prospectsave.properties._binary import PropertyReader, PropertyWriter
from prospectsave.properties._types import (
    ARRAY_INNER_TYPES,
    BINARY_STRUCTS,
    FIXED_LAYOUT_STRUCTS,
    NUMERIC_FORMATS,
    PROPERTY_CLASSES,
    RAW_HEADER_ARITY,
    STRING_TYPES,
    VARIABLE_LAYOUT_STRUCTS,
    ZERO_GUID,
    ArrayProperty,
    BoolProperty,
    ByteArrayProperty,
    ByteProperty,
    EnumProperty,
    NumericProperty,
    Property,
    RawProperty,
    StringProperty,
    StructProperty,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prospectsave.properties._version import PackageVersion

# Exceptions the engine raises for streams or values it cannot frame.
ENGINE_ERRORS: tuple[type[Exception], ...] = (EOFError, ValueError, TypeError)

_END_OF_LIST = "None"


def read_property_stream(
    reader: PropertyReader,
    version: PackageVersion,
    *,
    include_terminator: bool,
) -> list[Property]:
    """Read an ordered property list from ``reader``."""
    version.ensure_supported()
    if include_terminator:
        properties = _read_terminated_list(reader, version)
        trailer = reader.read_int32()
        if trailer != 0:
            msg = f"Expected a zero trailer after the end-of-list tag; got {trailer}."
            raise ValueError(msg)
        return properties

    properties = []
    while not reader.at_end():
        start = reader.position
        prop = _read_property(reader, version)
        if prop is None:
            msg = f"Unexpected end-of-list tag at offset {start} in an unterminated property stream."
            raise ValueError(msg)
        properties.append(prop)
    return properties


def write_property_stream(
    properties: Iterable[Property],
    writer: PropertyWriter,
    version: PackageVersion,
    *,
    include_terminator: bool,
) -> None:
    """Write an ordered property list to ``writer``."""
    version.ensure_supported()
    for prop in properties:
        _write_property(writer, prop, version)
    if include_terminator:
        writer.write_fstring(_END_OF_LIST)
        writer.write_int32(0)


def decode_properties(data: bytes, version: PackageVersion, *, include_terminator: bool) -> list[Property]:
    """Decode a complete byte buffer; trailing bytes are an error."""
    reader = PropertyReader(data)
    properties = read_property_stream(reader, version, include_terminator=include_terminator)
    if not reader.at_end():
        msg = f"{reader.remaining} trailing bytes after the property stream."
        raise ValueError(msg)
    return properties


def encode_properties(properties: Iterable[Property], version: PackageVersion, *, include_terminator: bool) -> bytes:
    """Encode a property list into a new byte buffer."""
    writer = PropertyWriter()
    write_property_stream(properties, writer, version, include_terminator=include_terminator)
    return writer.getvalue()


def _require_name(value: str | None, *, what: str, offset: int) -> str:
    if value is None:
        msg = f"Null {what} at offset {offset}."
        raise ValueError(msg)
    return value


def _read_terminated_list(reader: PropertyReader, version: PackageVersion) -> list[Property]:
    properties = []
    while True:
        prop = _read_property(reader, version)
        if prop is None:
            return properties
        properties.append(prop)


def _read_property_guid(reader: PropertyReader, version: PackageVersion) -> bytes | None:
    if not version.has_property_guid:
        return None
    flag = reader.read_byte()
    if flag == 0:
        return None
    if flag != 1:
        msg = f"Invalid property GUID flag {flag} at offset {reader.position - 1}."
        raise ValueError(msg)
    return reader.read_guid()


def _read_property(reader: PropertyReader, version: PackageVersion) -> Property | None:
    """Read one tag and its value; return ``None`` at the end-of-list tag."""
    start = reader.position
    name = _require_name(reader.read_fstring(), what="property name", offset=start)
    if name == _END_OF_LIST:
        return None
    type_name = _require_name(reader.read_fstring(), what=f"type name for {name!r}", offset=start)
    size = reader.read_int32()
    if size < 0:
        msg = f"{name}: negative value size {size} at offset {start}."
        raise ValueError(msg)
    array_index = reader.read_int32()

    header: tuple[str | None, ...] = ()
    struct_guid = ZERO_GUID
    bool_value = 0
    if type_name == "StructProperty":
        header = (reader.read_fstring(),)
        if version.has_struct_guid:
            struct_guid = reader.read_guid()
    elif type_name == "BoolProperty":
        bool_value = reader.read_byte()
    elif type_name in ("ByteProperty", "EnumProperty"):
        header = (reader.read_fstring(),)
    else:
        header = tuple(reader.read_fstring() for _ in range(RAW_HEADER_ARITY.get(type_name, 0)))
    guid = _read_property_guid(reader, version)
    raw_value = reader.read_bytes(size)

    if type_name == "BoolProperty":
        if size != 0 or bool_value > 1:
            msg = f"{name}: malformed BoolProperty tag at offset {start}."
            raise ValueError(msg)
        return BoolProperty(name, bool(bool_value), array_index=array_index, guid=guid)
    if type_name == "ArrayProperty" and not _is_modelled_array(header[0], raw_value):
        return RawProperty(name, type_name, raw_value, header, array_index=array_index, guid=guid)
    if type_name in RAW_HEADER_ARITY and type_name != "ArrayProperty":
        return RawProperty(name, type_name, raw_value, header, array_index=array_index, guid=guid)

    body = PropertyReader(raw_value)
    prop = _read_value(body, version, name=name, type_name=type_name, header=header, struct_guid=struct_guid)
    if prop is None:
        return RawProperty(name, type_name, raw_value, header, array_index=array_index, guid=guid)
    if not body.at_end():
        msg = f"{name}: {body.remaining} unread bytes in {type_name} value at offset {start}."
        raise ValueError(msg)
    if array_index or guid is not None:
        prop = replace(prop, array_index=array_index, guid=guid)
    return prop


def _is_modelled_array(inner_type: str | None, raw_value: bytes) -> bool:
    """Return whether an array value decodes to ArrayProperty/ByteArrayProperty."""
    if inner_type in ARRAY_INNER_TYPES:
        return True
    if inner_type != "ByteProperty" or len(raw_value) < 4:
        return False
    # Byte arrays of enum names carry FStrings, not one byte per element.
    count = int.from_bytes(raw_value[:4], "little", signed=True)
    return len(raw_value) == 4 + count


def _read_value(
    body: PropertyReader,
    version: PackageVersion,
    *,
    name: str,
    type_name: str,
    header: tuple[str | None, ...],
    struct_guid: bytes,
) -> Property | None:
    """Decode a tag value; return ``None`` for types the engine keeps raw."""
    if type_name in NUMERIC_FORMATS:
        return NumericProperty(name, type_name, body.read_format(NUMERIC_FORMATS[type_name]))
    if type_name in STRING_TYPES:
        return StringProperty(name, type_name, body.read_fstring())
    if type_name == "ByteProperty":
        enum_name = _require_name(header[0], what=f"{name} enum name", offset=0)
        value = body.read_byte() if enum_name == "None" else body.read_fstring()
        return ByteProperty(name, value, enum_name=enum_name)
    if type_name == "EnumProperty":
        enum_type = _require_name(header[0], what=f"{name} enum type", offset=0)
        return EnumProperty(name, enum_type, body.read_fstring())
    if type_name == "StructProperty":
        struct_type = _require_name(header[0], what=f"{name} struct type", offset=0)
        if struct_type in BINARY_STRUCTS:
            value: tuple[Property, ...] | bytes = body.read_bytes(body.remaining)
        else:
            value = tuple(_read_terminated_list(body, version))
        return StructProperty(name, struct_type, value, struct_guid=struct_guid)
    if type_name == "ArrayProperty":
        return _read_array(body, version, name=name, inner_type=header[0] or "")
    return None


def _read_array(body: PropertyReader, version: PackageVersion, *, name: str, inner_type: str) -> Property | None:
    count = body.read_int32()
    if count < 0:
        msg = f"{name}: negative array length {count}."
        raise ValueError(msg)
    if inner_type == "ByteProperty":
        return ByteArrayProperty(name, body.read_bytes(count))
    if inner_type == "StructProperty":
        return _read_struct_array(body, version, name=name, count=count)
    values = tuple(_read_element(body, inner_type) for _ in range(count))
    return ArrayProperty(name, inner_type, values)


def _read_element(body: PropertyReader, inner_type: str) -> object:
    if inner_type == "BoolProperty":
        value = body.read_byte()
        if value > 1:
            msg = f"Invalid bool array element {value}."
            raise ValueError(msg)
        return bool(value)
    if inner_type in NUMERIC_FORMATS:
        return body.read_format(NUMERIC_FORMATS[inner_type])
    return body.read_fstring()


def _read_struct_array(
    body: PropertyReader, version: PackageVersion, *, name: str, count: int
) -> ArrayProperty | None:
    """Read a struct array: one prototype tag, then the element payloads.

    Arrays of variable-length binary structs return ``None`` and are kept raw.
    """
    start = body.position
    element_name = _require_name(body.read_fstring(), what=f"{name} element name", offset=start)
    prototype_type = body.read_fstring()
    if prototype_type != "StructProperty":
        msg = f"{name}: struct array prototype has type {prototype_type!r}."
        raise ValueError(msg)
    data_size = body.read_int32()
    prototype_index = body.read_int32()
    struct_type = _require_name(body.read_fstring(), what=f"{name} struct type", offset=start)
    struct_guid = body.read_guid() if version.has_struct_guid else ZERO_GUID
    if prototype_index != 0 or _read_property_guid(body, version) is not None:
        msg = f"{name}: struct array prototype carries an array index or property GUID."
        raise ValueError(msg)
    if data_size < 0:
        msg = f"{name}: negative struct array data size {data_size}."
        raise ValueError(msg)
    if struct_type in VARIABLE_LAYOUT_STRUCTS:
        return None

    elements_body = PropertyReader(body.read_bytes(data_size))
    elements: list[tuple[Property, ...] | bytes] = []
    if struct_type in FIXED_LAYOUT_STRUCTS:
        if count and data_size % count:
            msg = f"{name}: {data_size} bytes do not split into {count} {struct_type} elements."
            raise ValueError(msg)
        width = data_size // count if count else 0
        elements.extend(elements_body.read_bytes(width) for _ in range(count))
    else:
        elements.extend(tuple(_read_terminated_list(elements_body, version)) for _ in range(count))
    if not elements_body.at_end():
        msg = f"{name}: {elements_body.remaining} unread bytes in struct array elements."
        raise ValueError(msg)

    return ArrayProperty(
        name,
        "StructProperty",
        tuple(elements),
        struct_type=struct_type,
        element_name=element_name,
        struct_guid=struct_guid,
    )


def _write_terminated_list(writer: PropertyWriter, properties: Iterable[Property], version: PackageVersion) -> None:
    for prop in properties:
        _write_property(writer, prop, version)
    writer.write_fstring(_END_OF_LIST)


def _write_property_guid(writer: PropertyWriter, guid: bytes | None, version: PackageVersion) -> None:
    if not version.has_property_guid:
        if guid is not None:
            msg = f"Package version {version} cannot store property GUIDs."
            raise ValueError(msg)
        return
    if guid is None:
        writer.write_byte(0)
        return
    writer.write_byte(1)
    writer.write_guid(guid)


def _write_property(writer: PropertyWriter, prop: Property, version: PackageVersion) -> None:
    """Write one tag; the value is staged first so its size can precede it."""
    if not isinstance(prop, PROPERTY_CLASSES):
        msg = f"Expected a property; got {type(prop).__name__}."
        raise TypeError(msg)

    body = PropertyWriter()
    _write_value(body, prop, version)
    value = body.getvalue()

    writer.write_fstring(prop.name)
    writer.write_fstring(prop.type_name)
    writer.write_int32(len(value))
    writer.write_int32(prop.array_index)
    if isinstance(prop, StructProperty):
        writer.write_fstring(prop.struct_type)
        if version.has_struct_guid:
            writer.write_guid(prop.struct_guid)
    elif isinstance(prop, BoolProperty):
        writer.write_byte(1 if prop.value else 0)
    elif isinstance(prop, ByteProperty):
        writer.write_fstring(prop.enum_name)
    elif isinstance(prop, EnumProperty):
        writer.write_fstring(prop.enum_type)
    elif isinstance(prop, (ArrayProperty, ByteArrayProperty)):
        writer.write_fstring(prop.inner_type)
    elif isinstance(prop, RawProperty):
        for header_type in prop.header_types:
            writer.write_fstring(header_type)
    _write_property_guid(writer, prop.guid, version)
    writer.write_bytes(value)


def _write_value(body: PropertyWriter, prop: Property, version: PackageVersion) -> None:
    if isinstance(prop, BoolProperty):
        return
    if isinstance(prop, NumericProperty):
        body.write_format(NUMERIC_FORMATS[prop.type_name], prop.value)
    elif isinstance(prop, (StringProperty, EnumProperty)):
        body.write_fstring(prop.value)
    elif isinstance(prop, ByteProperty):
        if prop.enum_name == "None":
            body.write_byte(prop.value)  # type: ignore[arg-type]
        else:
            body.write_fstring(prop.value)  # type: ignore[arg-type]
    elif isinstance(prop, StructProperty):
        if isinstance(prop.value, bytes):
            body.write_bytes(prop.value)
        else:
            _write_terminated_list(body, prop.value, version)
    elif isinstance(prop, ByteArrayProperty):
        body.write_int32(len(prop.value))
        body.write_bytes(prop.value)
    elif isinstance(prop, ArrayProperty):
        _write_array(body, prop, version)
    else:
        body.write_bytes(prop.value)


def _write_array(body: PropertyWriter, prop: ArrayProperty, version: PackageVersion) -> None:
    body.write_int32(len(prop.values))
    if prop.inner_type == "StructProperty":
        _write_struct_array(body, prop, version)
        return
    for value in prop.values:
        if prop.inner_type == "BoolProperty":
            if not isinstance(value, bool):
                msg = f"{prop.name}: bool array elements must be bool; got {type(value).__name__}."
                raise TypeError(msg)
            body.write_byte(1 if value else 0)
        elif prop.inner_type in NUMERIC_FORMATS:
            body.write_format(NUMERIC_FORMATS[prop.inner_type], value)  # type: ignore[arg-type]
        else:
            body.write_fstring(value)  # type: ignore[arg-type]


def _write_struct_array(body: PropertyWriter, prop: ArrayProperty, version: PackageVersion) -> None:
    elements = PropertyWriter()
    for element in prop.values:
        if isinstance(element, bytes):
            elements.write_bytes(element)
        else:
            _write_terminated_list(elements, element, version)  # type: ignore[arg-type]
    data = elements.getvalue()

    body.write_fstring(prop.element_name)
    body.write_fstring("StructProperty")
    body.write_int32(len(data))
    body.write_int32(0)
    body.write_fstring(prop.struct_type)
    if version.has_struct_guid:
        body.write_guid(prop.struct_guid)
    _write_property_guid(body, None, version)
    body.write_bytes(data)
