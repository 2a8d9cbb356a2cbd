"""Blob codec: compressed, fingerprinted, base64-encoded property blobs."""

from prospectsave.blobs._codec import compress, decompress, digest
from prospectsave.blobs._envelope import BlobEnvelope, decode_payload, pack_blob, unpack_blob, verify_digest

__all__ = [
    "BlobEnvelope",
    "compress",
    "decode_payload",
    "decompress",
    "digest",
    "pack_blob",
    "unpack_blob",
    "verify_digest",
]
