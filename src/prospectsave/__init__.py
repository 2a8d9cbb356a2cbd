"""prospectsave: Icarus prospect save envelopes and nested property streams."""

import importlib.metadata as importlib_metadata

from prospectsave.blobs import BlobEnvelope, compress, decompress, digest, pack_blob, unpack_blob
from prospectsave.errors import (
    CorruptBlobError,
    IntegrityMismatchError,
    InvalidCarrierError,
    MalformedEnvelopeError,
    PropertyStreamError,
    ProspectSaveError,
)
from prospectsave.info import AssociatedMember, ProspectInfo
from prospectsave.nested import flatten_properties, unflatten_properties
from prospectsave.options import CodecOptions, IntegrityMode
from prospectsave.properties import ICARUS_PACKAGE_VERSION, PackageVersion, Property
from prospectsave.prospect import ProspectDocument


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("prospectsave")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "ICARUS_PACKAGE_VERSION",
    "AssociatedMember",
    "BlobEnvelope",
    "CodecOptions",
    "CorruptBlobError",
    "IntegrityMismatchError",
    "IntegrityMode",
    "InvalidCarrierError",
    "MalformedEnvelopeError",
    "PackageVersion",
    "Property",
    "PropertyStreamError",
    "ProspectDocument",
    "ProspectInfo",
    "ProspectSaveError",
    "compress",
    "decompress",
    "digest",
    "flatten_properties",
    "pack_blob",
    "unflatten_properties",
    "unpack_blob",
]
