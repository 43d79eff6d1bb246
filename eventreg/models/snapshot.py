"""登録スナップショットDTO

送信済みの登録変更（スナップショット）と、差分計算の基準となる元の登録を表す。
永続化層の形は検証されないため、from_dict は欠けた項目を空のデフォルトで補う。
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from eventreg.models.invoice import InvoiceLineItem
from eventreg.models.team import (
    RosterMember,
    TeamEntry,
    _optional_float,
    normalize_roster,
)

logger = logging.getLogger(__name__)


def _parse_teams(raw, field_name: str) -> tuple[TeamEntry, ...]:
    """チーム辞書のリストを復元する（不正な要素は読み飛ばす）"""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        logger.warning("Malformed %s in stored registration: %r", field_name, type(raw))
        return ()
    teams = []
    for item in raw:
        if not isinstance(item, Mapping) or item.get("id") is None:
            logger.warning("Skipping malformed team in %s: %r", field_name, item)
            continue
        teams.append(TeamEntry.from_dict(item))
    return tuple(teams)


def _parse_ids(raw, field_name: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple, set)):
        logger.warning("Malformed %s in stored registration: %r", field_name, type(raw))
        return ()
    return tuple(str(team_id) for team_id in raw)


def _parse_rosters(raw, field_name: str) -> dict[str, tuple[RosterMember, ...]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        logger.warning("Malformed %s in stored registration: %r", field_name, type(raw))
        return {}
    rosters = {}
    for team_id, members in raw.items():
        if not isinstance(members, list):
            logger.warning("Skipping malformed roster for team %s", team_id)
            continue
        rosters[str(team_id)] = normalize_roster(members)
    return rosters


def _rosters_to_dict(rosters: Mapping[str, tuple[RosterMember, ...]]) -> dict:
    return {
        team_id: [member.to_dict() for member in members]
        for team_id, members in rosters.items()
    }


@dataclass(frozen=True)
class StoredInvoiceInfo:
    """保存された請求書情報

    Attributes:
        invoice_number: 請求書番号（例: "INV-1042-002"）
        invoice_date: 発行日時（ISO形式）
        total: 合計金額
        subtotal: 小計（記録されている場合）
        tax: 税額（記録されている場合）
        status: "paid" / "unpaid" / "void"
        added_teams: この請求書発行時点の追加チーム
        removed_team_ids: この請求書発行時点の削除チームID
        modified_rosters: この請求書発行時点のロスター変更
    """

    invoice_number: str
    invoice_date: str
    total: float
    subtotal: float | None = None
    tax: float | None = None
    status: str | None = None
    added_teams: tuple[TeamEntry, ...] | None = None
    removed_team_ids: tuple[str, ...] | None = None
    modified_rosters: dict[str, tuple[RosterMember, ...]] | None = None

    @classmethod
    def from_dict(cls, data) -> "StoredInvoiceInfo | None":
        if not isinstance(data, Mapping):
            if data is not None:
                logger.warning("Malformed invoice info in stored registration: %r", data)
            return None
        return cls(
            invoice_number=str(data.get("invoiceNumber", "")),
            invoice_date=str(data.get("invoiceDate", "")),
            total=_optional_float(data.get("total"), "invoice total", default=0.0),
            subtotal=_optional_float(data.get("subtotal"), "invoice subtotal"),
            tax=_optional_float(data.get("tax"), "invoice tax"),
            status=data.get("status"),
            added_teams=(
                _parse_teams(data["addedTeams"], "addedTeams")
                if "addedTeams" in data
                else None
            ),
            removed_team_ids=(
                _parse_ids(data["removedTeamIds"], "removedTeamIds")
                if "removedTeamIds" in data
                else None
            ),
            modified_rosters=(
                _parse_rosters(data["modifiedRosters"], "modifiedRosters")
                if "modifiedRosters" in data
                else None
            ),
        )

    def to_dict(self) -> dict:
        result: dict = {
            "invoiceNumber": self.invoice_number,
            "invoiceDate": self.invoice_date,
            "total": self.total,
        }
        if self.subtotal is not None:
            result["subtotal"] = self.subtotal
        if self.tax is not None:
            result["tax"] = self.tax
        if self.status is not None:
            result["status"] = self.status
        if self.added_teams is not None:
            result["addedTeams"] = [team.to_dict() for team in self.added_teams]
        if self.removed_team_ids is not None:
            result["removedTeamIds"] = list(self.removed_team_ids)
        if self.modified_rosters is not None:
            result["modifiedRosters"] = _rosters_to_dict(self.modified_rosters)
        return result


@dataclass(frozen=True)
class StoredRegistrationChanges:
    """送信済みの登録変更（スナップショット）

    一度作成されたら変更せず、再送信時は新しいインスタンスで置き換える。

    Attributes:
        added_teams: 追加されたチーム
        removed_team_ids: 削除された元チームのID
        modified_rosters: 元チームのロスター差し替え（チームID -> メンバー）
        submitted_at: 保存日時（ISO形式）
        new_invoice: 現在有効な請求書
        original_invoice: 変更前の最初の請求書
        past_invoices: 置き換えられた請求書の履歴（古い順）
    """

    added_teams: tuple[TeamEntry, ...] = ()
    removed_team_ids: tuple[str, ...] = ()
    modified_rosters: dict[str, tuple[RosterMember, ...]] = field(default_factory=dict)
    submitted_at: str | None = None
    new_invoice: StoredInvoiceInfo | None = None
    original_invoice: StoredInvoiceInfo | None = None
    past_invoices: tuple[StoredInvoiceInfo, ...] = ()

    @property
    def has_changes(self) -> bool:
        """保存された変更が1件でもあるか"""
        return bool(self.added_teams or self.removed_team_ids or self.modified_rosters)

    @classmethod
    def from_dict(cls, data) -> "StoredRegistrationChanges":
        """保存データから復元する

        欠けている項目や型の合わない項目は空のデフォルトとして扱い、例外は送出しない。
        """
        if not isinstance(data, Mapping):
            logger.warning("Stored registration is not an object: %r", type(data))
            return cls()

        past_raw = data.get("pastInvoices")
        past_invoices = []
        if isinstance(past_raw, list):
            for item in past_raw:
                info = StoredInvoiceInfo.from_dict(item)
                if info is not None:
                    past_invoices.append(info)
        elif past_raw is not None:
            logger.warning("Malformed pastInvoices in stored registration: %r", type(past_raw))

        return cls(
            added_teams=_parse_teams(data.get("addedTeams"), "addedTeams"),
            removed_team_ids=_parse_ids(data.get("removedTeamIds"), "removedTeamIds"),
            modified_rosters=_parse_rosters(data.get("modifiedRosters"), "modifiedRosters"),
            submitted_at=data.get("submittedAt"),
            new_invoice=StoredInvoiceInfo.from_dict(data.get("newInvoice")),
            original_invoice=StoredInvoiceInfo.from_dict(data.get("originalInvoice")),
            past_invoices=tuple(past_invoices),
        )

    def to_dict(self) -> dict:
        result: dict = {
            "addedTeams": [team.to_dict() for team in self.added_teams],
            "removedTeamIds": list(self.removed_team_ids),
            "modifiedRosters": _rosters_to_dict(self.modified_rosters),
            "pastInvoices": [invoice.to_dict() for invoice in self.past_invoices],
        }
        if self.submitted_at is not None:
            result["submittedAt"] = self.submitted_at
        if self.new_invoice is not None:
            result["newInvoice"] = self.new_invoice.to_dict()
        if self.original_invoice is not None:
            result["originalInvoice"] = self.original_invoice.to_dict()
        return result


@dataclass(frozen=True)
class OriginalRegistration:
    """差分計算の基準となる元の登録

    Attributes:
        teams_by_division: ディビジョン名 -> 元のチーム（入力順を保持）
        line_items: 元の請求明細（ディビジョンごとに1行）
        subtotal: 元の小計
        total_tax: 元の税額
        total: 元の合計
        invoice_number: 元の請求書番号
        invoice_date: 元の請求書発行日
    """

    teams_by_division: dict[str, tuple[TeamEntry, ...]] = field(default_factory=dict)
    line_items: tuple[InvoiceLineItem, ...] = ()
    subtotal: float = 0.0
    total_tax: float = 0.0
    total: float = 0.0
    invoice_number: str = ""
    invoice_date: str = ""

    @property
    def teams(self) -> tuple[TeamEntry, ...]:
        return tuple(team for teams in self.teams_by_division.values() for team in teams)

    @classmethod
    def from_dict(cls, data: Mapping) -> "OriginalRegistration":
        """camelCase形式の辞書から復元する

        teamsByDivision は {division: [team, ...]} と [[division, [team, ...]], ...]
        のどちらの形でも受け付ける。
        """
        raw_groups = data.get("teamsByDivision") or {}
        if isinstance(raw_groups, Mapping):
            pairs = list(raw_groups.items())
        else:
            pairs = [tuple(pair) for pair in raw_groups]

        teams_by_division = {}
        for division, teams in pairs:
            teams_by_division[str(division)] = _parse_teams(teams, f"teamsByDivision[{division}]")

        line_items = tuple(
            InvoiceLineItem.from_dict(item)
            for item in data.get("lineItems") or []
            if isinstance(item, Mapping)
        )
        return cls(
            teams_by_division=teams_by_division,
            line_items=line_items,
            subtotal=float(data.get("subtotal") or 0),
            total_tax=float(data.get("totalTax", data.get("tax")) or 0),
            total=float(data.get("total") or 0),
            invoice_number=str(data.get("invoiceNumber", "")),
            invoice_date=str(data.get("invoiceDate", "")),
        )
