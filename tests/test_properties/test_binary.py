"""Tests for prospectsave.properties._binary."""

import pytest

from prospectsave.properties import PropertyReader, PropertyWriter

# =============================================================================
# PropertyReader
# =============================================================================


def test_reader_reads_little_endian_primitives() -> None:
    reader = PropertyReader(b"\x2a\x00\x00\x00\xff")
    assert reader.read_int32() == 42
    assert reader.read_byte() == 255
    assert reader.at_end()


def test_reader_tracks_position_and_remaining() -> None:
    reader = PropertyReader(b"abcdef")
    reader.read_bytes(2)
    assert reader.position == 2
    assert reader.remaining == 4


def test_reader_raises_eof_on_overrun() -> None:
    reader = PropertyReader(b"\x01\x02")
    with pytest.raises(EOFError, match="Cannot read 4 bytes"):
        reader.read_int32()


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        pytest.param(b"\x00\x00\x00\x00", None, id="null"),
        pytest.param(b"\x01\x00\x00\x00\x00", "", id="empty"),
        pytest.param(b"\x03\x00\x00\x00Hi\x00", "Hi", id="ascii"),
        pytest.param(b"\xfe\xff\xff\xff\xe9\x00\x00\x00", "é", id="utf16"),
    ],
)
def test_reader_decodes_fstrings(data: bytes, expected: str | None) -> None:
    reader = PropertyReader(data)
    assert reader.read_fstring() == expected
    assert reader.at_end()


def test_reader_rejects_unterminated_fstring() -> None:
    reader = PropertyReader(b"\x02\x00\x00\x00Hi")
    with pytest.raises(ValueError, match="not NUL-terminated"):
        reader.read_fstring()


def test_reader_rejects_truncated_fstring() -> None:
    reader = PropertyReader(b"\x10\x00\x00\x00abc")
    with pytest.raises(EOFError):
        reader.read_fstring()


# =============================================================================
# PropertyWriter
# =============================================================================


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param(None, b"\x00\x00\x00\x00", id="null"),
        pytest.param("Hi", b"\x03\x00\x00\x00Hi\x00", id="ascii"),
        pytest.param("é", b"\xfe\xff\xff\xff\xe9\x00\x00\x00", id="utf16"),
    ],
)
def test_writer_encodes_fstrings(value: str | None, expected: bytes) -> None:
    writer = PropertyWriter()
    writer.write_fstring(value)
    assert writer.getvalue() == expected


def test_writer_output_reads_back() -> None:
    writer = PropertyWriter()
    writer.write_int32(-5)
    writer.write_format("<d", 0.25)
    writer.write_fstring("Prospect")
    writer.write_guid(bytes(range(16)))

    reader = PropertyReader(writer.getvalue())
    assert reader.read_int32() == -5
    assert reader.read_format("<d") == 0.25
    assert reader.read_fstring() == "Prospect"
    assert reader.read_guid() == bytes(range(16))
    assert reader.at_end()


def test_writer_rejects_out_of_range_values() -> None:
    writer = PropertyWriter()
    with pytest.raises(ValueError, match="cannot be packed"):
        writer.write_byte(256)


def test_writer_rejects_float_overflow() -> None:
    with pytest.raises(ValueError, match="cannot be packed"):
        PropertyWriter().write_format("<f", 1e40)


def test_writer_rejects_short_guid() -> None:
    with pytest.raises(ValueError, match="16 bytes"):
        PropertyWriter().write_guid(b"\x00" * 8)


def test_writer_rejects_non_string_fstring() -> None:
    with pytest.raises(TypeError, match="string or None"):
        PropertyWriter().write_fstring(5)  # type: ignore[arg-type]
