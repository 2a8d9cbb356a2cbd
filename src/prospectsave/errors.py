"""Typed errors for prospectsave."""


class ProspectSaveError(Exception):
    """Base exception for all prospectsave errors.

    ``stage`` names the save/load step that failed.
    """

    stage: str = "unknown"


class MalformedEnvelopeError(ProspectSaveError):
    """Raised when the JSON envelope or its base64 payload is structurally invalid."""

    stage = "envelope"


class CorruptBlobError(ProspectSaveError):
    """Raised when the compressed blob cannot be decompressed."""

    stage = "decompress"


class IntegrityMismatchError(ProspectSaveError):
    """Raised when decompressed blob data does not match its stored SHA-1 digest."""

    stage = "verify"

    def __init__(self, expected: str, actual: str) -> None:
        """Initialize with the stored and computed digests."""
        self.expected = expected
        self.actual = actual
        super().__init__(f"Blob integrity check failed: expected sha1={expected}, got {actual}")


class PropertyStreamError(ProspectSaveError):
    """Raised when the property engine rejects a property stream.

    The underlying engine exception is kept on ``cause`` (and ``__cause__``).
    """

    def __init__(self, stage: str, cause: BaseException) -> None:
        """Initialize with the failing stage and the engine exception."""
        self.stage = stage
        self.cause = cause
        super().__init__(f"Property stream {stage} failed: {cause}")


class InvalidCarrierError(ProspectSaveError):
    """Raised when a nested-stream carrier is not a byte-array property."""

    stage = "unflatten"

    def __init__(self, property_name: str | None, type_name: str) -> None:
        """Initialize with the rejected carrier's name and type."""
        self.property_name = property_name
        self.type_name = type_name
        super().__init__(
            f"Nested property stream carrier {property_name!r} must be a byte array property; got {type_name}"
        )
