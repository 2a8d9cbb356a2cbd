"""PropertyReader / PropertyWriter: little-endian primitives and FString framing."""

from __future__ import annotations

import struct
from io import BytesIO


class PropertyReader:
    """Cursor over an in-memory byte buffer.

    Reads past the end of the buffer raise ``EOFError``.
    """

    def __init__(self, data: bytes) -> None:
        """Initialize over ``data`` with the cursor at offset 0."""
        self._data = bytes(data)
        self._offset = 0

    @property
    def position(self) -> int:
        """Return the current read offset."""
        return self._offset

    @property
    def remaining(self) -> int:
        """Return the number of unread bytes."""
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        """Return whether every byte has been consumed."""
        return self._offset >= len(self._data)

    def read_bytes(self, count: int) -> bytes:
        """Read exactly ``count`` bytes."""
        if count < 0:
            msg = f"Negative read length {count} at offset {self._offset}."
            raise ValueError(msg)
        if count > self.remaining:
            msg = f"Cannot read {count} bytes at offset {self._offset}; only {self.remaining} remaining."
            raise EOFError(msg)
        chunk = self._data[self._offset : self._offset + count]
        self._offset += count
        return chunk

    def read_format(self, fmt: str) -> int | float:
        """Read one value packed with the given ``struct`` format."""
        return struct.unpack(fmt, self.read_bytes(struct.calcsize(fmt)))[0]

    def read_byte(self) -> int:
        """Read an unsigned 8-bit integer."""
        return self.read_bytes(1)[0]

    def read_int32(self) -> int:
        """Read a signed 32-bit integer."""
        return struct.unpack("<i", self.read_bytes(4))[0]

    def read_guid(self) -> bytes:
        """Read a raw 16-byte GUID."""
        return self.read_bytes(16)

    def read_fstring(self) -> str | None:
        """Read a length-prefixed FString.

        - length == 0: null string (``None``)
        - length > 0: ASCII, length includes the NUL terminator
        - length < 0: UTF-16LE, ``-length`` characters including the NUL terminator
        """
        start = self._offset
        length = self.read_int32()
        if length == 0:
            return None
        if length > 0:
            raw = self.read_bytes(length)
            terminator, body = raw[-1:], raw[:-1]
            text = body.decode("ascii")
        else:
            raw = self.read_bytes(-length * 2)
            terminator, body = raw[-2:], raw[:-2]
            text = body.decode("utf-16-le")
        if terminator.strip(b"\x00"):
            msg = f"FString at offset {start} is not NUL-terminated."
            raise ValueError(msg)
        return text


class PropertyWriter:
    """Append-only byte sink mirroring ``PropertyReader``."""

    def __init__(self) -> None:
        """Initialize an empty buffer."""
        self._stream = BytesIO()

    @property
    def position(self) -> int:
        """Return the number of bytes written so far."""
        return self._stream.tell()

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return self._stream.getvalue()

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes."""
        self._stream.write(data)

    def write_format(self, fmt: str, value: int | float) -> None:
        """Write one value packed with the given ``struct`` format."""
        try:
            self._stream.write(struct.pack(fmt, value))
        except (struct.error, OverflowError) as exc:
            msg = f"Value {value!r} cannot be packed as {fmt!r}: {exc}"
            raise ValueError(msg) from exc

    def write_byte(self, value: int) -> None:
        """Write an unsigned 8-bit integer."""
        self.write_format("<B", value)

    def write_int32(self, value: int) -> None:
        """Write a signed 32-bit integer."""
        self.write_format("<i", value)

    def write_guid(self, value: bytes) -> None:
        """Write a raw 16-byte GUID."""
        if len(value) != 16:
            msg = f"GUID must be 16 bytes; got {len(value)}."
            raise ValueError(msg)
        self._stream.write(value)

    def write_fstring(self, value: str | None) -> None:
        """Write an FString; ASCII when possible, UTF-16LE otherwise."""
        if value is None:
            self.write_int32(0)
            return
        if not isinstance(value, str):
            msg = f"FString value must be a string or None; got {type(value).__name__}."
            raise TypeError(msg)
        try:
            encoded = value.encode("ascii") + b"\x00"
        except UnicodeEncodeError:
            encoded = value.encode("utf-16-le") + b"\x00\x00"
            self.write_int32(-(len(encoded) // 2))
        else:
            self.write_int32(len(encoded))
        self._stream.write(encoded)
