"""編集セッションの状態"""

from dataclasses import dataclass, field

from eventreg.models.snapshot import StoredRegistrationChanges
from eventreg.models.team import RosterMember, TeamEntry


@dataclass
class EditSession:
    """送信前の変更を保持する編集セッション

    呼び出し側が所有し、エンジンの各操作に渡す。セッション同士は状態を共有しない。

    Attributes:
        added_teams: このセッションで追加したチーム
        removed_team_ids: このセッションで取り下げた元チームのID
            （追加後に削除したチームはadded_teamsから消すだけでここには入らない）
        modified_rosters: 元チームのロスター差し替え
            （追加チームのロスター編集はadded_teamsを直接更新する）
    """

    added_teams: list[TeamEntry] = field(default_factory=list)
    removed_team_ids: set[str] = field(default_factory=set)
    modified_rosters: dict[str, tuple[RosterMember, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added_teams or self.removed_team_ids or self.modified_rosters)

    def clear(self) -> None:
        self.added_teams.clear()
        self.removed_team_ids.clear()
        self.modified_rosters.clear()

    def find_added_team(self, team_id: str) -> TeamEntry | None:
        return next((team for team in self.added_teams if team.id == team_id), None)

    @classmethod
    def from_stored(cls, stored: StoredRegistrationChanges | None) -> "EditSession":
        """保存済みの変更からセッションを復元する"""
        if stored is None:
            return cls()
        return cls(
            added_teams=list(stored.added_teams),
            removed_team_ids=set(stored.removed_team_ids),
            modified_rosters=dict(stored.modified_rosters),
        )
