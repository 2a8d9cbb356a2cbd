"""BlobEnvelope: the compressed, fingerprinted property blob of a prospect."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import zlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prospectsave.blobs._codec import compress, decompress, digest
from prospectsave.errors import CorruptBlobError, IntegrityMismatchError, MalformedEnvelopeError
from prospectsave.serde import as_str_object_dict, optional_string, require_int, require_string

if TYPE_CHECKING:
    from prospectsave.options import IntegrityMode

logger = logging.getLogger(__name__)

_BASE64_TEXT = re.compile(r"[A-Za-z0-9+/]*={0,2}")


@dataclass(frozen=True, slots=True)
class BlobEnvelope:
    """Derived blob fields persisted under ``ProspectBlob``.

    ``payload`` is base64 of the zlib-compressed property stream; the digest and
    ``uncompressed_length`` describe the stream before compression.
    """

    key: str | None = None
    integrity_digest: str = ""
    total_length: int = 0
    data_length: int = 0
    uncompressed_length: int = 0
    payload: str = ""

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON mapping; ``Key`` is omitted when ``None``."""
        payload: dict[str, object] = {}
        if self.key is not None:
            payload["Key"] = self.key
        payload["Hash"] = self.integrity_digest
        payload["TotalLength"] = self.total_length
        payload["DataLength"] = self.data_length
        payload["UncompressedLength"] = self.uncompressed_length
        payload["BinaryBlob"] = self.payload
        return payload

    @classmethod
    def from_dict(cls, value: object, *, field_name: str = "ProspectBlob") -> BlobEnvelope:
        """Deserialize from the JSON mapping, validating every field."""
        data = as_str_object_dict(value, field_name=field_name)
        return cls(
            key=optional_string(data.get("Key"), field_name=f"{field_name}.Key"),
            integrity_digest=require_string(data.get("Hash"), field_name=f"{field_name}.Hash"),
            total_length=require_int(data.get("TotalLength"), field_name=f"{field_name}.TotalLength"),
            data_length=require_int(data.get("DataLength"), field_name=f"{field_name}.DataLength"),
            uncompressed_length=require_int(
                data.get("UncompressedLength"), field_name=f"{field_name}.UncompressedLength"
            ),
            payload=require_string(data.get("BinaryBlob"), field_name=f"{field_name}.BinaryBlob"),
        )


def pack_blob(raw: bytes, *, key: str | None = None, level: int = zlib.Z_DEFAULT_COMPRESSION) -> BlobEnvelope:
    """Build a complete envelope for an encoded property stream."""
    compressed = compress(raw, level=level)
    return BlobEnvelope(
        key=key,
        integrity_digest=digest(raw),
        total_length=len(compressed),
        data_length=len(compressed),
        uncompressed_length=len(raw),
        payload=base64.b64encode(compressed).decode("ascii"),
    )


def decode_payload(payload: str) -> bytes:
    """Decode the base64 payload into compressed bytes.

    Text outside the base64 alphabet is a malformed envelope; a well-formed
    payload cut short mid-quantum is a corrupt (truncated) blob.
    """
    if _BASE64_TEXT.fullmatch(payload) is None:
        msg = "ProspectBlob.BinaryBlob is not base64 text."
        raise MalformedEnvelopeError(msg)
    if len(payload) % 4:
        msg = f"ProspectBlob.BinaryBlob is truncated ({len(payload)} base64 characters)."
        raise CorruptBlobError(msg)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        msg = "ProspectBlob.BinaryBlob must be valid base64."
        raise MalformedEnvelopeError(msg) from exc


def verify_digest(envelope: BlobEnvelope, raw: bytes, *, integrity: IntegrityMode = "strict") -> None:
    """Check ``raw`` against the stored digest according to ``integrity``."""
    if integrity == "ignore":
        return
    actual = digest(raw)
    if actual == envelope.integrity_digest.lower():
        return
    if integrity == "strict":
        raise IntegrityMismatchError(envelope.integrity_digest, actual)
    logger.warning(
        "Prospect blob digest mismatch (expected sha1=%s, got %s); loading anyway",
        envelope.integrity_digest,
        actual,
    )


def unpack_blob(envelope: BlobEnvelope, *, integrity: IntegrityMode = "strict") -> bytes:
    """Recover the encoded property stream from an envelope."""
    raw = decompress(decode_payload(envelope.payload))
    verify_digest(envelope, raw, integrity=integrity)
    if len(raw) != envelope.uncompressed_length:
        logger.debug(
            "Prospect blob declares %d uncompressed bytes but holds %d",
            envelope.uncompressed_length,
            len(raw),
        )
    return raw

