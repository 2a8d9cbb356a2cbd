"""ProspectInfo: the metadata record persisted alongside a prospect blob."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from prospectsave.errors import MalformedEnvelopeError
from prospectsave.serde import (
    as_str_object_dict,
    optional_bool,
    optional_int,
    optional_string,
    to_plain_data,
)

_MEMBER_KEYS = frozenset(
    {
        "AccountName",
        "CharacterName",
        "UserID",
        "ChrSlot",
        "Experience",
        "Status",
        "Settled",
        "IsCurrentlyPlaying",
    }
)

_INFO_KEYS = frozenset(
    {
        "ProspectID",
        "ClaimedAccountID",
        "ClaimedAccountCharacter",
        "ProspectDTKey",
        "FactionMissionDTKey",
        "LobbyName",
        "ExpireTime",
        "ProspectState",
        "AssociatedMembers",
        "Cost",
        "Reward",
        "Difficulty",
        "Insurance",
        "NoRespawns",
        "ElapsedTime",
        "SelectedDropPoint",
    }
)


def _freeze_value(value: object) -> object:
    """Freeze nested JSON containers so records stay immutable."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): _freeze_value(item) for key, item in value.items()})
    if isinstance(value, (tuple, list)):
        return tuple(_freeze_value(item) for item in value)
    return value


def _freeze_extra(value: Mapping[str, object] | None, known: frozenset[str]) -> Mapping[str, object]:
    """Freeze passthrough keys; keys with a typed field are rejected."""
    if value is None:
        return MappingProxyType({})
    shadowed = sorted(str(key) for key in value if key in known)
    if shadowed:
        msg = f"extra must not repeat typed fields: {shadowed!r}."
        raise ValueError(msg)
    return MappingProxyType({str(key): _freeze_value(item) for key, item in value.items()})


def _without_nulls(payload: dict[str, object]) -> dict[str, object]:
    return {key: item for key, item in payload.items() if item is not None}


def _unknown_keys(data: Mapping[str, object], known: frozenset[str]) -> dict[str, object]:
    return {key: item for key, item in data.items() if key not in known}


@dataclass(frozen=True, slots=True)
class AssociatedMember:
    """A player associated with a prospect."""

    account_name: str | None = None
    character_name: str | None = None
    user_id: str | None = None
    chr_slot: int | None = None
    experience: int | None = None
    status: str | None = None
    settled: bool | None = None
    is_currently_playing: bool | None = None
    extra: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Freeze passthrough keys."""
        object.__setattr__(self, "extra", _freeze_extra(self.extra, _MEMBER_KEYS))

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON mapping, omitting ``None`` fields."""
        payload = _without_nulls(
            {
                "AccountName": self.account_name,
                "CharacterName": self.character_name,
                "UserID": self.user_id,
                "ChrSlot": self.chr_slot,
                "Experience": self.experience,
                "Status": self.status,
                "Settled": self.settled,
                "IsCurrentlyPlaying": self.is_currently_playing,
            }
        )
        payload.update(_without_nulls(to_plain_data(self.extra)))  # type: ignore[arg-type]
        return payload

    @classmethod
    def from_dict(cls, value: object, *, field_name: str = "AssociatedMember") -> AssociatedMember:
        """Deserialize from the JSON mapping; unknown keys land in ``extra``."""
        data = as_str_object_dict(value, field_name=field_name)
        return cls(
            account_name=optional_string(data.get("AccountName"), field_name=f"{field_name}.AccountName"),
            character_name=optional_string(data.get("CharacterName"), field_name=f"{field_name}.CharacterName"),
            user_id=optional_string(data.get("UserID"), field_name=f"{field_name}.UserID"),
            chr_slot=optional_int(data.get("ChrSlot"), field_name=f"{field_name}.ChrSlot"),
            experience=optional_int(data.get("Experience"), field_name=f"{field_name}.Experience"),
            status=optional_string(data.get("Status"), field_name=f"{field_name}.Status"),
            settled=optional_bool(data.get("Settled"), field_name=f"{field_name}.Settled"),
            is_currently_playing=optional_bool(
                data.get("IsCurrentlyPlaying"), field_name=f"{field_name}.IsCurrentlyPlaying"
            ),
            extra=_unknown_keys(data, _MEMBER_KEYS),
        )


@dataclass(frozen=True, slots=True)
class ProspectInfo:
    """Prospect metadata: identity, owner, lobby, timing and members.

    Every field is optional. Keys this record does not model are kept in
    ``extra`` and written back unchanged unless their value is null.
    """

    prospect_id: str | None = None
    claimed_account_id: str | None = None
    claimed_account_character: int | None = None
    prospect_dt_key: str | None = None
    faction_mission_dt_key: str | None = None
    lobby_name: str | None = None
    expire_time: int | None = None
    prospect_state: str | None = None
    associated_members: tuple[AssociatedMember, ...] | None = None
    cost: int | None = None
    reward: int | None = None
    difficulty: str | None = None
    insurance: bool | None = None
    no_respawns: bool | None = None
    elapsed_time: int | None = None
    selected_drop_point: int | None = None
    extra: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Normalize the member container and freeze passthrough keys."""
        if self.associated_members is not None:
            object.__setattr__(self, "associated_members", tuple(self.associated_members))
        object.__setattr__(self, "extra", _freeze_extra(self.extra, _INFO_KEYS))

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON mapping, omitting ``None`` fields."""
        members = (
            [member.to_dict() for member in self.associated_members] if self.associated_members is not None else None
        )
        payload = _without_nulls(
            {
                "ProspectID": self.prospect_id,
                "ClaimedAccountID": self.claimed_account_id,
                "ClaimedAccountCharacter": self.claimed_account_character,
                "ProspectDTKey": self.prospect_dt_key,
                "FactionMissionDTKey": self.faction_mission_dt_key,
                "LobbyName": self.lobby_name,
                "ExpireTime": self.expire_time,
                "ProspectState": self.prospect_state,
                "AssociatedMembers": members,
                "Cost": self.cost,
                "Reward": self.reward,
                "Difficulty": self.difficulty,
                "Insurance": self.insurance,
                "NoRespawns": self.no_respawns,
                "ElapsedTime": self.elapsed_time,
                "SelectedDropPoint": self.selected_drop_point,
            }
        )
        payload.update(_without_nulls(to_plain_data(self.extra)))  # type: ignore[arg-type]
        return payload

    @classmethod
    def from_dict(cls, value: object, *, field_name: str = "ProspectInfo") -> ProspectInfo:
        """Deserialize from the JSON mapping; unknown keys land in ``extra``."""
        data = as_str_object_dict(value, field_name=field_name)
        return cls(
            prospect_id=optional_string(data.get("ProspectID"), field_name=f"{field_name}.ProspectID"),
            claimed_account_id=optional_string(
                data.get("ClaimedAccountID"), field_name=f"{field_name}.ClaimedAccountID"
            ),
            claimed_account_character=optional_int(
                data.get("ClaimedAccountCharacter"), field_name=f"{field_name}.ClaimedAccountCharacter"
            ),
            prospect_dt_key=optional_string(data.get("ProspectDTKey"), field_name=f"{field_name}.ProspectDTKey"),
            faction_mission_dt_key=optional_string(
                data.get("FactionMissionDTKey"), field_name=f"{field_name}.FactionMissionDTKey"
            ),
            lobby_name=optional_string(data.get("LobbyName"), field_name=f"{field_name}.LobbyName"),
            expire_time=optional_int(data.get("ExpireTime"), field_name=f"{field_name}.ExpireTime"),
            prospect_state=optional_string(data.get("ProspectState"), field_name=f"{field_name}.ProspectState"),
            associated_members=_members_from_dict_value(
                data.get("AssociatedMembers"), field_name=f"{field_name}.AssociatedMembers"
            ),
            cost=optional_int(data.get("Cost"), field_name=f"{field_name}.Cost"),
            reward=optional_int(data.get("Reward"), field_name=f"{field_name}.Reward"),
            difficulty=optional_string(data.get("Difficulty"), field_name=f"{field_name}.Difficulty"),
            insurance=optional_bool(data.get("Insurance"), field_name=f"{field_name}.Insurance"),
            no_respawns=optional_bool(data.get("NoRespawns"), field_name=f"{field_name}.NoRespawns"),
            elapsed_time=optional_int(data.get("ElapsedTime"), field_name=f"{field_name}.ElapsedTime"),
            selected_drop_point=optional_int(
                data.get("SelectedDropPoint"), field_name=f"{field_name}.SelectedDropPoint"
            ),
            extra=_unknown_keys(data, _INFO_KEYS),
        )


def _members_from_dict_value(value: object, *, field_name: str) -> tuple[AssociatedMember, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        msg = f"{field_name} must be a list."
        raise MalformedEnvelopeError(msg)
    return tuple(
        AssociatedMember.from_dict(item, field_name=f"{field_name}[{index}]") for index, item in enumerate(value)
    )
