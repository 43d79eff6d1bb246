"""ロスター編集の変換処理

ロスター編集画面とのやり取りで使う2方向の変換を提供する。
"""

from collections.abc import Iterable, Mapping

from eventreg.models.team import RosterMember, TeamEntry, normalize_member


def build_saved_roster(team_id: str, members: Iterable) -> tuple[RosterMember, ...]:
    """編集画面から保存されたメンバーを正規化してロスターにする

    メンバーIDは "<チームID>-member-<連番>" で振り直し、
    名前は最初の空白で名と姓に分割する。

    Args:
        team_id: チームID
        members: メンバーレコード（辞書またはRosterMember）

    Returns:
        正規化済みのロスター
    """
    roster = []
    for index, record in enumerate(members):
        member = normalize_member(record)
        name_parts = member.name.split(" ") if member.name else []
        roster.append(
            RosterMember(
                id=f"{team_id}-member-{index}",
                name=member.name,
                first_name=name_parts[0] if name_parts else None,
                last_name=" ".join(name_parts[1:]) if name_parts else None,
                email=member.email,
                phone=member.phone,
                dob=member.dob,
                role=member.role,
            )
        )
    return tuple(roster)


def members_for_editor(team: TeamEntry | None) -> list[dict]:
    """チームのロスターを編集画面用の形式に変換する

    Args:
        team: チーム（Noneまたはロスター未読込なら空リスト）

    Returns:
        {"name", "type", "dob", "email", "phone"} のリスト
    """
    if team is None or not team.members:
        return []
    return [
        {
            "name": member.name,
            "type": member.role,
            "dob": member.dob,
            "email": member.email,
            "phone": member.phone,
        }
        for member in team.members
    ]


def member_names(members: Iterable[RosterMember | Mapping]) -> list[str]:
    """メンバーの表示名リスト"""
    return [normalize_member(member).name for member in members]
