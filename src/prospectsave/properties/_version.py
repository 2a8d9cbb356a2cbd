"""PackageVersion: the engine file-version token that selects tag framing rules."""

from dataclasses import dataclass

VER_UE4_STRUCT_GUID_IN_PROPERTY_TAG = 441
VER_UE4_PROPERTY_GUID_IN_PROPERTY_TAG = 503
VER_UE4_CORRECT_LICENSEE_FLAG = 522
VER_UE5_PROPERTY_TAG_COMPLETE_TYPE_NAME = 1012


@dataclass(frozen=True, slots=True)
class PackageVersion:
    """Immutable (UE4, UE5) package file version pair."""

    ue4: int
    ue5: int = 0

    @property
    def has_struct_guid(self) -> bool:
        """Return whether struct tags carry a 16-byte struct GUID."""
        return self.ue4 >= VER_UE4_STRUCT_GUID_IN_PROPERTY_TAG

    @property
    def has_property_guid(self) -> bool:
        """Return whether tags carry the optional property GUID flag."""
        return self.ue4 >= VER_UE4_PROPERTY_GUID_IN_PROPERTY_TAG

    def ensure_supported(self) -> None:
        """Raise ``ValueError`` for versions whose tag layout this engine cannot frame."""
        if self.ue5 >= VER_UE5_PROPERTY_TAG_COMPLETE_TYPE_NAME:
            msg = f"Package version {self} uses complete type names in property tags, which are not supported."
            raise ValueError(msg)


# Icarus ships on the last UE4 file version.
ICARUS_PACKAGE_VERSION = PackageVersion(ue4=VER_UE4_CORRECT_LICENSEE_FLAG, ue5=0)
