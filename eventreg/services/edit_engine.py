"""RegistrationEditEngine - 送信済み登録に対する編集差分エンジン

元の登録（スナップショット）と編集セッションの変更を突き合わせ、
統合後のチーム構成、差分注記付きの請求書、変更履歴を導出する。

どの操作も例外を送出しない。重複登録などの検証エラーは OperationResult で返す。
送信ボタンを変更有無で制御するのは呼び出し側の責務で、submit() 自体は変更なしでも実行できる。
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from eventreg.config.billing import DEFAULT_TEAM_SIZE, DEFAULT_UNIT_PRICE
from eventreg.constants import DEFAULT_IMPORTED_TEAM_NAME, DEFAULT_NEW_TEAM_NAME
from eventreg.models.invoice import EditModeInvoice, EditModeLineItem
from eventreg.models.pricing import DivisionPricing
from eventreg.models.session import EditSession
from eventreg.models.snapshot import (
    OriginalRegistration,
    StoredInvoiceInfo,
    StoredRegistrationChanges,
)
from eventreg.models.team import RegistrationEntry, RosterMember, TeamEntry, TeamOption
from eventreg.services.change_log import ChangeLogEntry, build_change_log
from eventreg.services.invoice_calculator import derive_tax_rate, index_pricing
from eventreg.services.roster import build_saved_roster, members_for_editor

logger = logging.getLogger(__name__)

# OperationResult.reason
DUPLICATE_TEAM = "duplicate_team"
ALL_DUPLICATES = "all_duplicates"
UNKNOWN_TEAM = "unknown_team"

_VERSIONED_INVOICE_NUMBER = re.compile(r"^(.+)-(\d{3})$")
_TRAILING_NUMBER = re.compile(r"-\d+$")


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def next_invoice_number(current: str) -> str:
    """次の請求書番号を求める

    "<base>-<NNN>" 形式なら末尾の版番号を1つ進める（3桁ゼロ埋め）。
    それ以外は末尾の "-<数字>" を取り除いて "-002" を付ける。

    Args:
        current: 現在の請求書番号

    Returns:
        新しい請求書番号
    """
    match = _VERSIONED_INVOICE_NUMBER.match(current)
    if match:
        return f"{match.group(1)}-{int(match.group(2)) + 1:03d}"
    return f"{_TRAILING_NUMBER.sub('', current)}-002"


@dataclass(frozen=True)
class OperationResult:
    """操作結果

    Attributes:
        success: 成功したか
        message: 呼び出し側に表示するメッセージ
        reason: 失敗理由（DUPLICATE_TEAM / ALL_DUPLICATES / UNKNOWN_TEAM）
        imported: 取り込んだチーム数
        skipped: 重複として読み飛ばしたチーム数
    """

    success: bool
    message: str
    reason: str | None = None
    imported: int = 0
    skipped: int = 0


@dataclass
class RemovalReceipt:
    """チーム削除の控え。undo() で削除前のコレクションに戻す。

    Attributes:
        team_id: 削除したチームID
        team: 削除したチーム（元データに見つからない場合はNone）
        from_added: 追加チームからの削除ならTrue、元チームの取り下げならFalse
        message: 表示用メッセージ
    """

    team_id: str
    team: TeamEntry | None
    from_added: bool
    message: str
    _session: EditSession = field(repr=False)
    _index: int = 0

    def undo(self) -> OperationResult:
        """削除を取り消す"""
        name = self.team.name if self.team is not None else "Team"
        if self.from_added:
            if self._session.find_added_team(self.team_id) is None:
                index = min(self._index, len(self._session.added_teams))
                self._session.added_teams.insert(index, self.team)
        else:
            self._session.removed_team_ids.discard(self.team_id)
        return OperationResult(success=True, message=f"{name} has been added back.")


class RegistrationEditEngine:
    """送信済み登録の編集差分エンジン

    エンジンは元の登録・価格表・チームカタログだけを保持し、
    変更状態は呼び出し側が所有する EditSession として各操作に渡す。
    """

    def __init__(
        self,
        original: OriginalRegistration,
        division_pricing: Iterable[DivisionPricing] = (),
        team_options: Iterable[TeamOption] = (),
        team_rosters: Mapping[str, Iterable[RosterMember]] | None = None,
    ):
        """初期化

        Args:
            original: 差分の基準となる元の登録
            division_pricing: イベントの価格表
            team_options: 登録可能なクラブチーム
            team_rosters: チームID -> ロスター（追加時のロスター補完に使う）
        """
        self._original = original
        self._pricing = index_pricing(division_pricing)
        self._team_options = {option.id: option for option in team_options}
        self._team_rosters = {
            team_id: tuple(members) for team_id, members in (team_rosters or {}).items()
        }

    @property
    def original(self) -> OriginalRegistration:
        return self._original

    # === 登録状況 ===

    def registered_team_ids(self, session: EditSession) -> set[str]:
        """現在登録されているチームID（detail_idを含む）"""
        ids = set()
        for team in self._original.teams:
            if team.id not in session.removed_team_ids:
                ids.add(team.id)
                if team.detail_id:
                    ids.add(team.detail_id)
        for team in session.added_teams:
            ids.add(team.id)
            if team.detail_id:
                ids.add(team.detail_id)
        return ids

    def is_team_registered(self, session: EditSession, team_id: str) -> bool:
        return team_id in self.registered_team_ids(session)

    def _find_original_team(self, team_id: str) -> TeamEntry | None:
        return next((team for team in self._original.teams if team.id == team_id), None)

    def _build_team(self, entry: RegistrationEntry, default_name: str) -> TeamEntry:
        """登録リクエストからチームを作る

        名前とロスターはエントリ、チームカタログの順に補完する。
        """
        team_id = entry.check_id
        option = self._team_options.get(entry.team_id) if entry.team_id else None
        roster = self._team_rosters.get(entry.team_id) if entry.team_id else None

        members = entry.members if entry.members is not None else roster
        team_size = entry.team_size
        if team_size is None and option is not None:
            team_size = option.size

        return TeamEntry(
            id=team_id,
            division=entry.division,
            name=entry.team_name or (option.name if option else None) or default_name,
            members=members,
            team_size=team_size,
            detail_id=team_id,
        )

    # === 操作 ===

    def add_team(self, session: EditSession, entry: RegistrationEntry) -> OperationResult:
        """チームを追加する

        既に登録済みのチームIDなら何も変更せず失敗を返す。
        """
        if self.is_team_registered(session, entry.check_id):
            logger.info("Rejected duplicate team %s", entry.check_id)
            return OperationResult(
                success=False,
                message=f"{entry.team_name or 'This team'} is already in your registration.",
                reason=DUPLICATE_TEAM,
            )

        team = self._build_team(entry, DEFAULT_NEW_TEAM_NAME)
        session.added_teams.append(team)
        return OperationResult(
            success=True,
            message=f"{team.name} has been added to {entry.division}.",
            imported=1,
        )

    def bulk_import(
        self, session: EditSession, entries: Iterable[RegistrationEntry]
    ) -> OperationResult:
        """複数チームを一括で取り込む

        登録済みのチーム（同じ取り込み内で先に出てきたものを含む）は読み飛ばす。
        一部でも取り込めれば成功とし、全件が重複の場合のみ何も変更せず失敗を返す。
        """
        entries = list(entries)
        registered = self.registered_team_ids(session)
        unique_entries = []
        for entry in entries:
            if entry.check_id in registered:
                continue
            registered.add(entry.check_id)
            unique_entries.append(entry)

        skipped = len(entries) - len(unique_entries)

        if not unique_entries:
            logger.info("Bulk import rejected: all %d entries already registered", len(entries))
            return OperationResult(
                success=False,
                message="All teams in the import are already registered.",
                reason=ALL_DUPLICATES,
                skipped=skipped,
            )

        new_teams = [self._build_team(entry, DEFAULT_IMPORTED_TEAM_NAME) for entry in unique_entries]
        session.added_teams.extend(new_teams)

        imported_label = f"{_plural(len(new_teams), 'team')} imported"
        if skipped > 0:
            verb = "was" if skipped == 1 else "were"
            message = f"{imported_label}; {_plural(skipped, 'duplicate')} {verb} skipped."
        else:
            message = f"{imported_label}. Teams have been added to your registration."

        return OperationResult(
            success=True, message=message, imported=len(new_teams), skipped=skipped
        )

    def remove_team(self, session: EditSession, team_id: str) -> RemovalReceipt:
        """チームを削除する

        追加チームならadded_teamsから消し、元チームならremoved_team_idsに記録する。
        """
        for index, team in enumerate(session.added_teams):
            if team.id == team_id:
                del session.added_teams[index]
                return RemovalReceipt(
                    team_id=team_id,
                    team=team,
                    from_added=True,
                    message=f"{team.name} has been removed from your registration.",
                    _session=session,
                    _index=index,
                )

        session.removed_team_ids.add(team_id)
        team = self._find_original_team(team_id)
        name = team.name if team is not None else "Team"
        return RemovalReceipt(
            team_id=team_id,
            team=team,
            from_added=False,
            message=f"{name} has been removed from your registration.",
            _session=session,
        )

    def save_roster(
        self, session: EditSession, team: TeamEntry | str, members: Iterable
    ) -> OperationResult:
        """チームのロスターを保存する

        追加チームはその場でロスターを差し替え、元チームはmodified_rostersに記録する。
        """
        team_id = team if isinstance(team, str) else team.id
        roster = build_saved_roster(team_id, members)

        for index, added in enumerate(session.added_teams):
            if added.id == team_id:
                session.added_teams[index] = replace(added, members=roster)
                name = added.name
                break
        else:
            original = self._find_original_team(team_id)
            if original is None and isinstance(team, str):
                return OperationResult(
                    success=False,
                    message=f"Team {team_id} is not part of this registration.",
                    reason=UNKNOWN_TEAM,
                )
            session.modified_rosters[team_id] = roster
            name = original.name if original is not None else team.name

        return OperationResult(
            success=True,
            message=f"{name} roster has been updated with {_plural(len(roster), 'member')}.",
        )

    def members_for_editor(self, team: TeamEntry | None) -> list[dict]:
        return members_for_editor(team)

    def discard(self, session: EditSession) -> OperationResult:
        """セッションの変更をすべて破棄する"""
        session.clear()
        return OperationResult(
            success=True, message="Your registration has been reset to its original state."
        )

    # === 導出 ===

    def merged_teams_by_division(self, session: EditSession) -> dict[str, list[TeamEntry]]:
        """元のチーム構成に変更を適用したディビジョン別チームを作る

        毎回セッション状態から作り直す。チームが残らないディビジョンは含めない。
        """
        merged: dict[str, list[TeamEntry]] = {}

        for division, teams in self._original.teams_by_division.items():
            remaining = []
            for team in teams:
                if team.id in session.removed_team_ids:
                    continue
                override = session.modified_rosters.get(team.id)
                remaining.append(replace(team, members=override) if override is not None else team)
            if remaining:
                merged[division] = remaining

        for team in session.added_teams:
            merged.setdefault(team.division, []).append(team)

        return merged

    def _added_team_unit_price(self, division: str) -> float:
        pricing = self._pricing.get(division)
        if pricing is None:
            logger.warning(
                "No pricing for division %r; using default unit price %s",
                division,
                DEFAULT_UNIT_PRICE,
            )
            return DEFAULT_UNIT_PRICE
        return pricing.regular.price

    def edit_mode_invoice(self, session: EditSession) -> EditModeInvoice:
        """差分注記付きの請求書を計算する

        元の明細は、そのディビジョンの最初の元チームをアンカーとして削除・変更を判定する。
        単価は元の明細のまま据え置き、数量の変化だけを反映する。
        追加チームは1チーム1行の新規明細になる。
        """
        items: list[EditModeLineItem] = []

        for index, item in enumerate(self._original.line_items):
            teams_in_division = self._original.teams_by_division.get(item.category, ())
            anchor_id = teams_in_division[0].id if teams_in_division else f"original-{index}"
            is_removed = anchor_id in session.removed_team_ids

            override = session.modified_rosters.get(anchor_id)
            new_member_count = len(override) if override is not None else item.qty
            is_modified = override is not None and new_member_count != item.qty

            items.append(
                EditModeLineItem(
                    category=item.category,
                    unit=item.unit,
                    qty=new_member_count,
                    has_pricing=item.has_pricing,
                    tier=item.tier,
                    id=anchor_id,
                    is_removed=is_removed,
                    is_modified=is_modified,
                    original_qty=item.qty if is_modified else None,
                )
            )

        for team in session.added_teams:
            items.append(
                EditModeLineItem(
                    category=team.division,
                    unit=self._added_team_unit_price(team.division),
                    qty=len(team.members) if team.members is not None else DEFAULT_TEAM_SIZE,
                    id=team.id,
                    is_new=True,
                )
            )

        subtotal = sum((item.line_total for item in items if not item.is_removed), 0.0)
        tax_rate = derive_tax_rate(self._original.subtotal, self._original.total_tax)
        tax = subtotal * tax_rate

        return EditModeInvoice(
            items=tuple(items),
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            has_changes=(
                bool(session.added_teams)
                or bool(session.removed_team_ids)
                or any(item.is_modified for item in items)
            ),
        )

    def change_log(self, session: EditSession) -> list[ChangeLogEntry]:
        return build_change_log(
            self._original.teams_by_division,
            session.added_teams,
            session.removed_team_ids,
            session.modified_rosters,
        )

    # === 送信 ===

    def submit(
        self,
        session: EditSession,
        stored: StoredRegistrationChanges | None = None,
        now: datetime | None = None,
    ) -> StoredRegistrationChanges:
        """現在のセッションから新しいスナップショットを作る

        新しい請求書番号は直前の請求書番号（保存済みがあればそれ、なければ元の番号）から導出する。
        元の請求書情報は初回送信時に元の登録から作り、以降は引き継ぐ。
        保存は呼び出し側がリポジトリで行う。

        Args:
            session: 編集セッション
            stored: 現在保存されているスナップショット
            now: 発行日時（Noneなら現在時刻）

        Returns:
            新しいStoredRegistrationChanges
        """
        now = now or datetime.now(timezone.utc)
        invoice = self.edit_mode_invoice(session)

        current_number = self._original.invoice_number
        if stored is not None and stored.new_invoice is not None:
            current_number = stored.new_invoice.invoice_number

        original_invoice = stored.original_invoice if stored is not None else None
        if original_invoice is None:
            original_invoice = StoredInvoiceInfo(
                invoice_number=self._original.invoice_number,
                invoice_date=self._original.invoice_date,
                total=self._original.total,
                subtotal=self._original.subtotal,
                tax=self._original.total_tax,
            )

        new_number = next_invoice_number(current_number)
        logger.info("Submitting registration changes as invoice %s", new_number)

        return StoredRegistrationChanges(
            added_teams=tuple(session.added_teams),
            removed_team_ids=tuple(sorted(session.removed_team_ids)),
            modified_rosters=dict(session.modified_rosters),
            new_invoice=StoredInvoiceInfo(
                invoice_number=new_number,
                invoice_date=now.isoformat(),
                total=invoice.total,
                subtotal=invoice.subtotal,
                tax=invoice.tax,
            ),
            original_invoice=original_invoice,
            past_invoices=stored.past_invoices if stored is not None else (),
        )
