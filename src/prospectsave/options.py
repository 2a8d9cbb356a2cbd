"""CodecOptions: configuration for prospect save/load calls."""

import zlib
from dataclasses import dataclass
from typing import Literal

IntegrityMode = Literal["strict", "warn", "ignore"]
_INTEGRITY_MODES = frozenset({"strict", "warn", "ignore"})


@dataclass(frozen=True, slots=True)
class CodecOptions:
    """Tunable behavior of the envelope codec.

    - `integrity`: what to do when a loaded blob's SHA-1 digest does not match its
      content. ``"strict"`` raises, ``"warn"`` logs and continues, ``"ignore"``
      skips the check (envelopes written by non-conforming tools).
    - `compression_level`: zlib level used on save (``-1`` is zlib's default).
    - `indent`: JSON indentation on save; ``None`` writes a single line.
    """

    integrity: IntegrityMode = "strict"
    compression_level: int = zlib.Z_DEFAULT_COMPRESSION
    indent: int | None = 2

    def __post_init__(self) -> None:
        """Validate option values."""
        if self.integrity not in _INTEGRITY_MODES:
            msg = f"integrity must be one of {sorted(_INTEGRITY_MODES)!r}; got {self.integrity!r}."
            raise ValueError(msg)
        if isinstance(self.compression_level, bool) or not -1 <= self.compression_level <= 9:
            msg = f"compression_level must be between -1 and 9; got {self.compression_level!r}."
            raise ValueError(msg)
        if self.indent is not None and self.indent < 0:
            msg = "indent must be >= 0 or None."
            raise ValueError(msg)


DEFAULT_OPTIONS = CodecOptions()
