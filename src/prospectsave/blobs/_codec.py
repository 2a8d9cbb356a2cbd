"""Byte-level blob transforms: zlib compression and SHA-1 fingerprinting."""

import hashlib
import zlib

from prospectsave.errors import CorruptBlobError


def compress(raw: bytes, *, level: int = zlib.Z_DEFAULT_COMPRESSION) -> bytes:
    """Compress bytes into a zlib stream (header and adler32 checksum included)."""
    return zlib.compress(raw, level)


def decompress(compressed: bytes) -> bytes:
    """Decompress a complete zlib stream.

    Truncated or malformed streams, and data trailing the end of the stream,
    raise ``CorruptBlobError``.
    """
    decompressor = zlib.decompressobj()
    try:
        raw = decompressor.decompress(compressed) + decompressor.flush()
    except zlib.error as exc:
        msg = f"Blob is not a valid zlib stream: {exc}"
        raise CorruptBlobError(msg) from exc
    if not decompressor.eof:
        msg = f"Blob zlib stream is truncated ({len(compressed)} bytes)."
        raise CorruptBlobError(msg)
    if decompressor.unused_data:
        msg = f"Blob has {len(decompressor.unused_data)} bytes after the end of the zlib stream."
        raise CorruptBlobError(msg)
    return raw


def digest(raw: bytes) -> str:
    """Return the lowercase hex SHA-1 fingerprint of ``raw``."""
    return hashlib.sha1(raw, usedforsecurity=False).hexdigest()
