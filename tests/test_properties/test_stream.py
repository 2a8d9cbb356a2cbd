"""Tests for prospectsave.properties._stream."""

import struct

import pytest

from prospectsave.properties import (
    ICARUS_PACKAGE_VERSION,
    ArrayProperty,
    BoolProperty,
    ByteArrayProperty,
    ByteProperty,
    EnumProperty,
    NumericProperty,
    PackageVersion,
    Property,
    PropertyReader,
    PropertyWriter,
    RawProperty,
    StringProperty,
    StructProperty,
    decode_properties,
    encode_properties,
    read_property_stream,
    write_property_stream,
)

END_OF_LIST = b"\x05\x00\x00\x00None\x00"


def _fstring(value: str) -> bytes:
    encoded = value.encode("ascii") + b"\x00"
    return struct.pack("<i", len(encoded)) + encoded


def _roundtrip(properties: list[Property], *, include_terminator: bool = False) -> list[Property]:
    data = encode_properties(properties, ICARUS_PACKAGE_VERSION, include_terminator=include_terminator)
    return decode_properties(data, ICARUS_PACKAGE_VERSION, include_terminator=include_terminator)


# =============================================================================
# Framing
# =============================================================================


def test_int_property_wire_layout() -> None:
    data = encode_properties(
        [NumericProperty("Level", "IntProperty", 7)],
        ICARUS_PACKAGE_VERSION,
        include_terminator=False,
    )
    assert data == (
        _fstring("Level")
        + _fstring("IntProperty")
        + struct.pack("<i", 4)
        + struct.pack("<i", 0)
        + b"\x00"
        + struct.pack("<i", 7)
    )


def test_empty_unterminated_stream_is_empty() -> None:
    assert encode_properties([], ICARUS_PACKAGE_VERSION, include_terminator=False) == b""
    assert decode_properties(b"", ICARUS_PACKAGE_VERSION, include_terminator=False) == []


def test_empty_terminated_stream_is_end_tag_and_trailer() -> None:
    data = encode_properties([], ICARUS_PACKAGE_VERSION, include_terminator=True)
    assert data == END_OF_LIST + b"\x00\x00\x00\x00"
    assert decode_properties(data, ICARUS_PACKAGE_VERSION, include_terminator=True) == []


def test_bool_value_lives_in_tag_header() -> None:
    data = encode_properties([BoolProperty("Insurance", value=True)], ICARUS_PACKAGE_VERSION, include_terminator=False)
    assert data == (
        _fstring("Insurance") + _fstring("BoolProperty") + struct.pack("<ii", 0, 0) + b"\x01" + b"\x00"
    )


def test_stream_functions_share_reader_and_writer() -> None:
    writer = PropertyWriter()
    props = [StringProperty("LobbyName", "StrProperty", "Lobby")]
    write_property_stream(props, writer, ICARUS_PACKAGE_VERSION, include_terminator=True)
    writer.write_int32(99)

    reader = PropertyReader(writer.getvalue())
    assert read_property_stream(reader, ICARUS_PACKAGE_VERSION, include_terminator=True) == props
    assert reader.read_int32() == 99


# =============================================================================
# Round-trips
# =============================================================================


def test_every_variant_roundtrips() -> None:
    member = (
        StringProperty("AccountName", "StrProperty", "Ann"),
        NumericProperty("ChrSlot", "IntProperty", 1),
    )
    props: list[Property] = [
        BoolProperty("Insurance", value=False),
        NumericProperty("Cost", "IntProperty", -25),
        NumericProperty("ExpireTime", "Int64Property", 2**40),
        NumericProperty("Seed", "UInt64Property", 2**64 - 1),
        NumericProperty("Scale", "FloatProperty", 1.5),
        NumericProperty("Elapsed", "DoubleProperty", 1234.5),
        StringProperty("LobbyName", "StrProperty", "Lobby é"),
        StringProperty("Map", "NameProperty", "Olympus"),
        StringProperty("Owner", "ObjectProperty", None),
        ByteProperty("Tier", 3),
        ByteProperty("Mode", "EMode::Fast", enum_name="EMode"),
        EnumProperty("State", "EProspectState", "EProspectState::Active"),
        StructProperty("Location", "Vector", struct.pack("<fff", 1.0, 2.0, 3.0)),
        StructProperty("Member", "AssociatedMember", member),
        ArrayProperty("Flags", "BoolProperty", (True, False, True)),
        ArrayProperty("Scores", "IntProperty", (1, -2, 3)),
        ArrayProperty("Names", "StrProperty", ("a", None, "ü")),
        ArrayProperty("States", "EnumProperty", ("E::A", "E::B")),
        ArrayProperty("Members", "StructProperty", (member, member), struct_type="AssociatedMember"),
        ArrayProperty("Points", "StructProperty", (bytes(12), b"\x01" * 12), struct_type="Vector"),
        ByteArrayProperty("BinaryData", b"\x00\x01\x02\xff"),
        RawProperty("Inventory", "MapProperty", struct.pack("<ii", 0, 0), ("StrProperty", "IntProperty")),
        RawProperty("Tags", "SetProperty", struct.pack("<ii", 0, 0), ("NameProperty",)),
        RawProperty("Title", "TextProperty", b"\x00\x00\x00\x00\xff"),
    ]
    assert _roundtrip(props) == props


def test_order_is_preserved() -> None:
    props: list[Property] = [NumericProperty(f"P{index}", "IntProperty", index) for index in range(10)]
    assert [prop.name for prop in _roundtrip(props)] == [f"P{index}" for index in range(10)]


def test_array_index_and_property_guid_roundtrip() -> None:
    props: list[Property] = [
        NumericProperty("Slots", "IntProperty", 4, array_index=0),
        NumericProperty("Slots", "IntProperty", 5, array_index=1, guid=bytes(range(16))),
    ]
    assert _roundtrip(props) == props


def test_struct_guid_roundtrips() -> None:
    props: list[Property] = [StructProperty("Id", "Guid", bytes(16), struct_guid=b"\x07" * 16)]
    assert _roundtrip(props) == props


def test_enum_byte_array_stays_raw() -> None:
    value = struct.pack("<i", 1) + _fstring("E::A")
    props: list[Property] = [RawProperty("Modes", "ArrayProperty", value, ("ByteProperty",))]
    assert _roundtrip(props) == props


def test_unmodelled_array_inner_type_stays_raw() -> None:
    props: list[Property] = [RawProperty("Texts", "ArrayProperty", struct.pack("<i", 0), ("TextProperty",))]
    assert _roundtrip(props) == props


def test_float_values_roundtrip_exactly() -> None:
    props: list[Property] = [
        NumericProperty("Health", "FloatProperty", 0.1),
        ArrayProperty("Weights", "FloatProperty", (0.1, 0.2, 1e-7)),
    ]
    assert _roundtrip(props) == props
    assert _roundtrip(props, include_terminator=True) == props


def test_soft_object_path_struct_decodes_as_bytes() -> None:
    path = _fstring("/Game/Items/Axe.Axe")
    data = (
        _fstring("Item")
        + _fstring("StructProperty")
        + struct.pack("<ii", len(path), 0)
        + _fstring("SoftObjectPath")
        + bytes(16)
        + b"\x00"
        + path
    )
    props = decode_properties(data, ICARUS_PACKAGE_VERSION, include_terminator=False)
    assert props == [StructProperty("Item", "SoftObjectPath", path)]
    assert encode_properties(props, ICARUS_PACKAGE_VERSION, include_terminator=False) == data


def test_soft_object_path_array_stays_raw() -> None:
    paths = _fstring("/Game/Items/Axe.Axe") + _fstring("/Game/Items/Pick.Pick")
    value = (
        struct.pack("<i", 2)
        + _fstring("Items")
        + _fstring("StructProperty")
        + struct.pack("<ii", len(paths), 0)
        + _fstring("SoftObjectPath")
        + bytes(16)
        + b"\x00"
        + paths
    )
    props: list[Property] = [RawProperty("Items", "ArrayProperty", value, ("StructProperty",))]
    assert _roundtrip(props) == props


def test_terminated_roundtrip() -> None:
    props: list[Property] = [StringProperty("ComponentClass", "StrProperty", "/Script/Icarus.Recorder")]
    assert _roundtrip(props, include_terminator=True) == props


# =============================================================================
# Failures
# =============================================================================


def test_end_of_list_tag_in_unterminated_stream_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unexpected end-of-list tag"):
        decode_properties(END_OF_LIST, ICARUS_PACKAGE_VERSION, include_terminator=False)


def test_missing_trailer_is_rejected() -> None:
    with pytest.raises(EOFError):
        decode_properties(END_OF_LIST, ICARUS_PACKAGE_VERSION, include_terminator=True)


def test_nonzero_trailer_is_rejected() -> None:
    with pytest.raises(ValueError, match="zero trailer"):
        decode_properties(END_OF_LIST + b"\x01\x00\x00\x00", ICARUS_PACKAGE_VERSION, include_terminator=True)


def test_trailing_bytes_are_rejected() -> None:
    data = encode_properties([], ICARUS_PACKAGE_VERSION, include_terminator=True) + b"\x00"
    with pytest.raises(ValueError, match="trailing bytes"):
        decode_properties(data, ICARUS_PACKAGE_VERSION, include_terminator=True)


def test_truncated_stream_raises_eof() -> None:
    props: list[Property] = [NumericProperty("Cost", "IntProperty", 1)]
    data = encode_properties(props, ICARUS_PACKAGE_VERSION, include_terminator=False)
    with pytest.raises(EOFError):
        decode_properties(data[:-2], ICARUS_PACKAGE_VERSION, include_terminator=False)


def test_value_size_mismatch_is_rejected() -> None:
    data = (
        _fstring("Cost")
        + _fstring("IntProperty")
        + struct.pack("<ii", 6, 0)
        + b"\x00"
        + struct.pack("<i", 1)
        + b"\x00\x00"
    )
    with pytest.raises(ValueError, match="unread bytes"):
        decode_properties(data, ICARUS_PACKAGE_VERSION, include_terminator=False)


def test_writer_rejects_non_properties() -> None:
    with pytest.raises(TypeError, match="Expected a property"):
        encode_properties(["Cost"], ICARUS_PACKAGE_VERSION, include_terminator=False)  # type: ignore[list-item]


def test_unsupported_version_is_rejected() -> None:
    with pytest.raises(ValueError, match="complete type names"):
        encode_properties([], PackageVersion(ue4=522, ue5=1012), include_terminator=False)


def test_old_version_cannot_store_property_guid() -> None:
    props: list[Property] = [NumericProperty("Cost", "IntProperty", 1, guid=bytes(16))]
    with pytest.raises(ValueError, match="cannot store property GUIDs"):
        encode_properties(props, PackageVersion(ue4=400), include_terminator=False)


def test_old_version_omits_struct_and_property_guids() -> None:
    version = PackageVersion(ue4=400)
    props: list[Property] = [StructProperty("Location", "Vector", bytes(12))]
    data = encode_properties(props, version, include_terminator=False)
    assert data == (
        _fstring("Location") + _fstring("StructProperty") + struct.pack("<ii", 12, 0) + _fstring("Vector") + bytes(12)
    )
    assert decode_properties(data, version, include_terminator=False) == props
