"""ProspectDocument: the prospect save envelope and its save/load paths."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING

from prospectsave.blobs import BlobEnvelope, pack_blob, unpack_blob
from prospectsave.errors import MalformedEnvelopeError, PropertyStreamError
from prospectsave.info import ProspectInfo
from prospectsave.options import DEFAULT_OPTIONS, CodecOptions
from prospectsave.properties import ENGINE_ERRORS, ICARUS_PACKAGE_VERSION, decode_properties, encode_properties
from prospectsave.serde import as_str_object_dict

if TYPE_CHECKING:
    from prospectsave.properties import Property

logger = logging.getLogger(__name__)

INFO_KEY = "ProspectInfo"
BLOB_KEY = "ProspectBlob"


@dataclass(slots=True)
class ProspectDocument:
    """A prospect save: metadata, the property list, and its derived blob.

    ``data`` is the authoritative property list. ``blob`` is recomputed from it
    in full by ``refresh_blob`` on every save and is never edited in place.
    """

    info: ProspectInfo = field(default_factory=ProspectInfo)
    data: list[Property] = field(default_factory=list)
    blob: BlobEnvelope = field(default_factory=BlobEnvelope)

    def refresh_blob(self, options: CodecOptions | None = None) -> BlobEnvelope:
        """Re-encode ``data`` into a new blob and store it on the document.

        The blob key is carried over. On failure the previous blob is kept.
        """
        opts = options or DEFAULT_OPTIONS
        try:
            raw = encode_properties(self.data, ICARUS_PACKAGE_VERSION, include_terminator=False)
        except ENGINE_ERRORS as exc:
            raise PropertyStreamError("encode", exc) from exc
        blob = pack_blob(raw, key=self.blob.key, level=opts.compression_level)
        logger.debug(
            "Packed %d properties: %d raw bytes, %d compressed bytes",
            len(self.data),
            blob.uncompressed_length,
            blob.total_length,
        )
        self.blob = blob
        return blob

    def to_dict(self, options: CodecOptions | None = None) -> dict[str, object]:
        """Refresh the blob and return the JSON object for this document."""
        blob = self.refresh_blob(options)
        return {
            INFO_KEY: self.info.to_dict(),
            BLOB_KEY: blob.to_dict(),
        }

    def dumps(self, options: CodecOptions | None = None) -> str:
        """Serialize to pretty-printed JSON text."""
        opts = options or DEFAULT_OPTIONS
        return json.dumps(self.to_dict(opts), indent=opts.indent, ensure_ascii=False)

    def save(self, stream: IO[bytes], options: CodecOptions | None = None) -> None:
        """Write the UTF-8 JSON document to a binary stream."""
        text = self.dumps(options)
        stream.write(text.encode("utf-8"))
        logger.info("Saved prospect %s (%d properties)", self.info.prospect_id, len(self.data))

    @classmethod
    def from_dict(cls, value: object, options: CodecOptions | None = None) -> ProspectDocument:
        """Build a document from a parsed JSON object, decoding its blob."""
        opts = options or DEFAULT_OPTIONS
        data = as_str_object_dict(value, field_name="Prospect document")
        if BLOB_KEY not in data:
            msg = f"Prospect document is missing {BLOB_KEY!r}."
            raise MalformedEnvelopeError(msg)

        info_value = data.get(INFO_KEY)
        info = ProspectInfo() if info_value is None else ProspectInfo.from_dict(info_value, field_name=INFO_KEY)
        blob = BlobEnvelope.from_dict(data[BLOB_KEY], field_name=BLOB_KEY)

        raw = unpack_blob(blob, integrity=opts.integrity)
        try:
            properties = decode_properties(raw, ICARUS_PACKAGE_VERSION, include_terminator=False)
        except ENGINE_ERRORS as exc:
            raise PropertyStreamError("decode", exc) from exc
        logger.debug("Decoded %d properties from %d raw bytes", len(properties), len(raw))
        return cls(info=info, data=properties, blob=blob)

    @classmethod
    def loads(cls, text: str | bytes, options: CodecOptions | None = None) -> ProspectDocument:
        """Parse JSON text (``str`` or UTF-8 ``bytes``, BOM allowed)."""
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                msg = f"Prospect document is not valid UTF-8: {exc}"
                raise MalformedEnvelopeError(msg) from exc
        else:
            text = text.removeprefix("\ufeff")
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Prospect document is not valid JSON: {exc}"
            raise MalformedEnvelopeError(msg) from exc
        return cls.from_dict(value, options)

    @classmethod
    def load(cls, stream: IO[bytes], options: CodecOptions | None = None) -> ProspectDocument:
        """Read and parse a prospect document from a binary stream."""
        document = cls.loads(stream.read(), options)
        logger.info("Loaded prospect %s (%d properties)", document.info.prospect_id, len(document.data))
        return document
