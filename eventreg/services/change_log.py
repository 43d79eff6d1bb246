"""変更履歴の生成

編集セッションの正味の変更（追加・削除・ロスター変更）を表示用の文字列にする。
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from eventreg.constants import CHANGE_ADDED, CHANGE_MODIFIED, CHANGE_REMOVED
from eventreg.models.team import RosterMember, TeamEntry
from eventreg.services.roster import member_names

MEMBER_ADDED = "member-added"
MEMBER_REMOVED = "member-removed"


@dataclass(frozen=True)
class ChangeLogEntry:
    """変更履歴の1行"""

    id: str
    type: str
    description: str


@dataclass(frozen=True)
class MemberChange:
    """ロスター内の1メンバー単位の変更"""

    id: str
    type: str
    member_name: str
    team_name: str
    team_division: str
    previous_count: int
    new_count: int


def compute_member_changes(
    original_teams: Iterable[TeamEntry],
    modified_rosters: Mapping[str, tuple[RosterMember, ...]],
) -> list[MemberChange]:
    """元チームのロスターと差し替え後のロスターを名前で比較する

    同名のメンバーは人数として数える。削除されたメンバー、追加されたメンバーの順に出力する。

    Args:
        original_teams: 元のチーム
        modified_rosters: チームID -> 差し替え後のロスター

    Returns:
        MemberChangeのリスト
    """
    changes = []
    for team in original_teams:
        new_members = modified_rosters.get(team.id)
        if new_members is None:
            continue

        before_names = member_names(team.members or ())
        after_names = member_names(new_members)
        previous_count = len(before_names)
        new_count = len(after_names)

        removed = Counter(before_names) - Counter(after_names)
        added = Counter(after_names) - Counter(before_names)

        for index, name in enumerate(removed.elements()):
            changes.append(
                MemberChange(
                    id=f"{team.id}-member-removed-{index}",
                    type=MEMBER_REMOVED,
                    member_name=name,
                    team_name=team.name,
                    team_division=team.division,
                    previous_count=previous_count,
                    new_count=new_count,
                )
            )
        for index, name in enumerate(added.elements()):
            changes.append(
                MemberChange(
                    id=f"{team.id}-member-added-{index}",
                    type=MEMBER_ADDED,
                    member_name=name,
                    team_name=team.name,
                    team_division=team.division,
                    previous_count=previous_count,
                    new_count=new_count,
                )
            )
    return changes


def build_change_log(
    original_teams_by_division: Mapping[str, Iterable[TeamEntry]],
    added_teams: Iterable[TeamEntry],
    removed_team_ids: Iterable[str],
    modified_rosters: Mapping[str, tuple[RosterMember, ...]],
) -> list[ChangeLogEntry]:
    """編集セッションの変更履歴を作る

    追加チーム、削除チーム（元の並び順）、メンバー単位の変更の順に並べる。
    元のデータに見つからない削除IDは "Team removed" としてID順に末尾へ追加する。

    Args:
        original_teams_by_division: 元のディビジョン別チーム
        added_teams: 追加チーム
        removed_team_ids: 削除した元チームのID
        modified_rosters: ロスター差し替え

    Returns:
        ChangeLogEntryのリスト
    """
    original_teams = [
        team for teams in original_teams_by_division.values() for team in teams
    ]
    removed = set(removed_team_ids)
    changes = []

    for team in added_teams:
        changes.append(
            ChangeLogEntry(
                id=f"added-{team.id}",
                type=CHANGE_ADDED,
                description=f"{team.name} added to {team.division}",
            )
        )

    known_ids = set()
    for team in original_teams:
        known_ids.add(team.id)
        if team.id in removed:
            changes.append(
                ChangeLogEntry(
                    id=f"removed-{team.id}",
                    type=CHANGE_REMOVED,
                    description=f"{team.name} removed from {team.division}",
                )
            )
    for team_id in sorted(removed - known_ids):
        changes.append(
            ChangeLogEntry(id=f"removed-{team_id}", type=CHANGE_REMOVED, description="Team removed")
        )

    for change in compute_member_changes(original_teams, modified_rosters):
        verb = "removed from" if change.type == MEMBER_REMOVED else "added to"
        changes.append(
            ChangeLogEntry(
                id=change.id,
                type=CHANGE_MODIFIED,
                description=(
                    f"{change.member_name} was {verb} {change.team_name} roster "
                    f"({change.previous_count} → {change.new_count} members)"
                ),
            )
        )

    return changes
