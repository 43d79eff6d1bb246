"""Team and roster DTOs.

Member records arrive in loosely-typed shapes (camelCase or snake_case keys,
"role" or "type", inconsistent casing). ``normalize_member`` is the single
place where they are turned into the canonical ``RosterMember``.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from eventreg.constants import DEFAULT_ROLE

logger = logging.getLogger(__name__)


def normalize_role(role: str | None) -> str:
    """役割文字列を先頭のみ大文字に正規化する

    Args:
        role: 役割（例: "COACH", "athlete", None）

    Returns:
        正規化された役割。空の場合はDEFAULT_ROLE。
    """
    if role is None:
        return DEFAULT_ROLE
    role = str(role).strip()
    if not role:
        return DEFAULT_ROLE
    return role[0].upper() + role[1:].lower()


def _optional_str(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _optional_int(value, field_name: str, default: int | None = None) -> int | None:
    """整数に変換する（変換できない値は警告を出してdefault）"""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Malformed %s: %r", field_name, value)
        return default


def _optional_float(value, field_name: str, default: float | None = None) -> float | None:
    """数値に変換する（"1,495.00" のような変換できない値は警告を出してdefault）"""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Malformed %s: %r", field_name, value)
        return default


def _roster_or_none(raw, field_name: str) -> tuple["RosterMember", ...] | None:
    """members をロスターに変換する（None は未読込、リスト以外は警告してNone）"""
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        logger.warning("Malformed %s: %r", field_name, type(raw))
        return None
    return normalize_roster(raw)


@dataclass(frozen=True)
class RosterMember:
    """A canonical roster member.

    Attributes:
        id: Member identifier (optional for ad-hoc entries).
        name: Display name.
        first_name: Given name.
        last_name: Family name.
        email: Contact e-mail.
        phone: Contact phone number.
        dob: Date of birth ("YYYY-MM-DD").
        role: Normalized role ("Athlete", "Coach", ...).
    """

    name: str
    role: str = DEFAULT_ROLE
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    dob: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "RosterMember":
        first_name = _optional_str(data.get("firstName", data.get("first_name")))
        last_name = _optional_str(data.get("lastName", data.get("last_name")))
        name = _optional_str(data.get("name"))
        if name is None:
            name = " ".join(part for part in (first_name, last_name) if part)

        return cls(
            name=name,
            role=normalize_role(data.get("role", data.get("type"))),
            id=_optional_str(data.get("id")),
            first_name=first_name,
            last_name=last_name,
            email=_optional_str(data.get("email")),
            phone=_optional_str(data.get("phone")),
            dob=_optional_str(data.get("dob")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "dob": self.dob,
            "role": self.role,
        }


def normalize_member(record: "RosterMember | Mapping") -> RosterMember:
    """任意形式のメンバーレコードをRosterMemberに変換する"""
    if isinstance(record, RosterMember):
        return replace(record, role=normalize_role(record.role))
    return RosterMember.from_dict(record)


def normalize_roster(records: Iterable | None) -> tuple[RosterMember, ...]:
    """メンバーレコードのリストを正規化する

    辞書以外の要素は警告を出して読み飛ばす。
    """
    if not records:
        return ()
    members = []
    for record in records:
        if isinstance(record, (RosterMember, Mapping)):
            members.append(normalize_member(record))
        else:
            logger.warning("Skipping malformed roster member: %r", record)
    return tuple(members)


@dataclass(frozen=True)
class TeamEntry:
    """A team registered into one division.

    Attributes:
        id: Stable team identifier.
        division: Division name (must match a DivisionPricing name to be priced).
        name: Team display name.
        members: Roster, or None when no roster has been loaded yet.
        team_size: Declared size used when no roster is loaded.
        detail_id: Club-side team identifier, also checked for duplicates.
    """

    id: str
    division: str
    name: str = ""
    members: tuple[RosterMember, ...] | None = None
    team_size: int | None = None
    detail_id: str | None = None

    @property
    def member_count(self) -> int:
        """請求数量（ロスター人数、未読込ならteam_size、どちらもなければ0）"""
        if self.members is not None:
            return len(self.members)
        if self.team_size is not None:
            return self.team_size
        return 0

    def with_members(self, members: Iterable) -> "TeamEntry":
        return replace(self, members=normalize_roster(members))

    @classmethod
    def from_dict(cls, data: Mapping) -> "TeamEntry":
        """辞書から復元する（数値やロスターの形が合わない場合は未設定として扱う）"""
        return cls(
            id=str(data["id"]),
            division=str(data.get("division") or ""),
            name=str(data.get("name") or ""),
            members=_roster_or_none(data.get("members"), "members"),
            team_size=_optional_int(data.get("teamSize", data.get("team_size")), "teamSize"),
            detail_id=_optional_str(data.get("detailId", data.get("detail_id"))),
        )

    def to_dict(self) -> dict:
        result: dict = {
            "id": self.id,
            "name": self.name,
            "division": self.division,
            "detailId": self.detail_id,
        }
        if self.members is not None:
            result["members"] = [member.to_dict() for member in self.members]
        if self.team_size is not None:
            result["teamSize"] = self.team_size
        return result


@dataclass(frozen=True)
class TeamOption:
    """A club team that can be selected for registration."""

    id: str
    name: str
    division: str | None = None
    size: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "TeamOption":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            division=_optional_str(data.get("division")),
            size=_optional_int(data.get("size"), "size"),
        )


@dataclass(frozen=True)
class RegistrationEntry:
    """A request to register a team, from direct selection, import or manual entry.

    Attributes:
        id: Entry identifier (used as the team id when team_id is absent).
        division: Target division.
        team_id: Existing club team id, when registering a club team.
        team_name: Name supplied with the entry.
        team_size: Declared team size.
        members: Roster supplied with the entry (uploaded rows).
    """

    id: str
    division: str
    team_id: str | None = None
    team_name: str | None = None
    team_size: int | None = None
    members: tuple[RosterMember, ...] | None = None

    @property
    def check_id(self) -> str:
        """重複判定に使うID"""
        return self.team_id or self.id

    @classmethod
    def from_dict(cls, data: Mapping) -> "RegistrationEntry":
        return cls(
            id=str(data["id"]),
            division=str(data.get("division") or ""),
            team_id=_optional_str(data.get("teamId", data.get("team_id"))),
            team_name=_optional_str(data.get("teamName", data.get("team_name"))),
            team_size=_optional_int(data.get("teamSize", data.get("team_size")), "teamSize"),
            members=_roster_or_none(data.get("members"), "members"),
        )
