"""CLI入力ファイルの読み込み

イベント（価格表・チームカタログ）、元の登録、編集セッションをJSONファイルから読み込む。
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from eventreg.models import (
    DivisionPricing,
    EditSession,
    OriginalRegistration,
    Payment,
    RegistrationEntry,
    StoredRegistrationChanges,
    TeamEntry,
    TeamOption,
    normalize_roster,
)
from eventreg.services.edit_engine import RegistrationEditEngine
from eventreg.cli.utils.date_parser import parse_reference_date


@dataclass(frozen=True)
class EventData:
    """イベントの価格表とチームカタログ"""

    division_pricing: tuple[DivisionPricing, ...] = ()
    team_options: tuple[TeamOption, ...] = ()
    team_rosters: dict = field(default_factory=dict)


def load_json_file(path: str):
    """JSONファイルを読み込む

    Raises:
        ValueError: JSONとして解析できない場合
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def _require_mapping(value, label: str) -> Mapping:
    """オブジェクトであることを確認する

    Raises:
        ValueError: オブジェクトでない場合
    """
    if not isinstance(value, Mapping):
        raise ValueError(f"{label} must be an object, got {type(value).__name__}")
    return value


def _mapping_list(value, label: str) -> list[Mapping]:
    """オブジェクトのリストであることを確認する（Noneは空リスト）

    Raises:
        ValueError: リストでない場合、またはオブジェクト以外の要素を含む場合
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{label} must be a list, got {type(value).__name__}")
    return [_require_mapping(item, f"{label}[{index}]") for index, item in enumerate(value)]


def load_event(path: str | None) -> EventData:
    """イベントファイルを読み込む（Noneなら空のイベント）

    形式: {"divisionPricing": [...], "teamOptions": [...], "teamRosters": [{"teamId", "members"}]}
    価格表のリストだけを渡すこともできる。
    """
    if path is None:
        return EventData()

    data = load_json_file(path)
    if isinstance(data, list):
        data = {"divisionPricing": data}
    data = _require_mapping(data, "event")

    rosters = {}
    for roster in _mapping_list(data.get("teamRosters"), "teamRosters"):
        rosters[str(roster["teamId"])] = normalize_roster(
            _mapping_list(roster.get("members"), "teamRosters.members")
        )

    return EventData(
        division_pricing=tuple(
            DivisionPricing.from_dict(item)
            for item in _mapping_list(data.get("divisionPricing"), "divisionPricing")
        ),
        team_options=tuple(
            TeamOption.from_dict(item)
            for item in _mapping_list(data.get("teamOptions"), "teamOptions")
        ),
        team_rosters=rosters,
    )


@dataclass(frozen=True)
class QuoteRequest:
    """見積もり対象のチームと入金"""

    teams: tuple[TeamEntry, ...]
    issued_date: date | None = None
    payments: tuple[Payment, ...] = ()


def load_quote_request(path: str) -> QuoteRequest:
    """見積もり対象ファイルを読み込む

    形式: {"issuedDate": "YYYY-MM-DD", "teams": [...], "payments": [{"amount", "method"}]}
    チームのリストだけを渡すこともできる。
    """
    data = load_json_file(path)
    if isinstance(data, list):
        data = {"teams": data}
    data = _require_mapping(data, "entries")

    issued = data.get("issuedDate")
    payments = tuple(
        Payment(
            amount=float(item.get("amount") or 0),
            method=str(item.get("method") or ""),
            last_four=str(item.get("lastFour") or ""),
        )
        for item in _mapping_list(data.get("payments"), "payments")
    )
    return QuoteRequest(
        teams=tuple(TeamEntry.from_dict(team) for team in _mapping_list(data.get("teams"), "teams")),
        issued_date=parse_reference_date(issued) if issued else None,
        payments=payments,
    )


def load_registration(path: str) -> tuple[str, OriginalRegistration]:
    """元の登録ファイルを読み込む

    Returns:
        (登録ID, OriginalRegistration)
    """
    data = _require_mapping(load_json_file(path), "registration")
    registration_id = str(data.get("registrationId") or Path(path).stem)
    return registration_id, OriginalRegistration.from_dict(data)


def load_session(path: str, engine: RegistrationEditEngine) -> tuple[EditSession, list[str]]:
    """編集セッションファイルを読み込み、記録された操作を順に適用する

    形式: {"addedTeams", "removedTeamIds", "modifiedRosters", "actions": [...]}
    actions の要素:
        {"type": "add", "entry": {...}}
        {"type": "import", "entries": [...]}
        {"type": "remove", "teamId": "..."}
        {"type": "saveRoster", "teamId": "...", "members": [...]}
        {"type": "discard"}

    Returns:
        (EditSession, 各操作のメッセージ)

    Raises:
        ValueError: 操作がオブジェクトでない場合、または未知の操作が含まれる場合
    """
    data = _require_mapping(load_json_file(path), "session")
    session = EditSession.from_stored(StoredRegistrationChanges.from_dict(data))
    messages = []

    for index, action in enumerate(_mapping_list(data.get("actions"), "actions")):
        action_type = action.get("type")
        if action_type == "add":
            entry = _require_mapping(action.get("entry"), f"actions[{index}].entry")
            result = engine.add_team(session, RegistrationEntry.from_dict(entry))
            messages.append(result.message)
        elif action_type == "import":
            entries = [
                RegistrationEntry.from_dict(item)
                for item in _mapping_list(action.get("entries"), f"actions[{index}].entries")
            ]
            result = engine.bulk_import(session, entries)
            messages.append(result.message)
        elif action_type == "remove":
            receipt = engine.remove_team(session, str(action["teamId"]))
            messages.append(receipt.message)
        elif action_type == "saveRoster":
            members = _mapping_list(action.get("members"), f"actions[{index}].members")
            result = engine.save_roster(session, str(action["teamId"]), members)
            messages.append(result.message)
        elif action_type == "discard":
            messages.append(engine.discard(session).message)
        else:
            raise ValueError(f"Unknown session action: {action_type!r}")

    return session, messages
