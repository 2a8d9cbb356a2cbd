"""Property engine: typed property values and their binary stream format."""

from prospectsave.properties._binary import PropertyReader, PropertyWriter
from prospectsave.properties._query import find_property
from prospectsave.properties._stream import (
    ENGINE_ERRORS,
    decode_properties,
    encode_properties,
    read_property_stream,
    write_property_stream,
)
from prospectsave.properties._types import (
    BINARY_STRUCTS,
    FIXED_LAYOUT_STRUCTS,
    NUMERIC_FORMATS,
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
from prospectsave.properties._version import ICARUS_PACKAGE_VERSION, PackageVersion

__all__ = [
    "BINARY_STRUCTS",
    "ENGINE_ERRORS",
    "FIXED_LAYOUT_STRUCTS",
    "ICARUS_PACKAGE_VERSION",
    "NUMERIC_FORMATS",
    "STRING_TYPES",
    "VARIABLE_LAYOUT_STRUCTS",
    "ZERO_GUID",
    "ArrayProperty",
    "BoolProperty",
    "ByteArrayProperty",
    "ByteProperty",
    "EnumProperty",
    "NumericProperty",
    "PackageVersion",
    "Property",
    "PropertyReader",
    "PropertyWriter",
    "RawProperty",
    "StringProperty",
    "StructProperty",
    "decode_properties",
    "encode_properties",
    "find_property",
    "read_property_stream",
    "write_property_stream",
]
