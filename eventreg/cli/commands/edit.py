"""登録編集コマンド: edit-preview / submit / discard"""

import click

from eventreg.cli.utils.loaders import load_event, load_registration, load_session
from eventreg.cli.utils.table_formatter import format_currency, format_edit_invoice_table
from eventreg.db import get_engine, get_session, init_db
from eventreg.models import EditModeInvoice
from eventreg.repositories.registration_repository import (
    SQLAlchemyRegistrationChangesRepository,
)
from eventreg.services.edit_engine import RegistrationEditEngine


def _build_engine(registration_path: str, event_path: str | None):
    """元の登録とイベントからエンジンを作る"""
    registration_id, original = load_registration(registration_path)
    event = load_event(event_path)
    engine = RegistrationEditEngine(
        original,
        division_pricing=event.division_pricing,
        team_options=event.team_options,
        team_rosters=event.team_rosters,
    )
    return registration_id, engine


def _print_invoice(invoice: EditModeInvoice) -> None:
    click.echo(format_edit_invoice_table(invoice.items))
    click.echo("")
    click.echo(f"  小計: {format_currency(invoice.subtotal)}")
    click.echo(f"  税額: {format_currency(invoice.tax)}")
    click.echo(f"  合計: {format_currency(invoice.total)}")


@click.command("edit-preview")
@click.option("--registration", "registration_path", required=True, type=click.Path(exists=True), help="元の登録JSON")
@click.option("--session", "session_path", required=True, type=click.Path(exists=True), help="編集セッションJSON")
@click.option("--event", "event_path", type=click.Path(exists=True), default=None, help="イベントJSON（価格表・チームカタログ）")
def edit_preview(registration_path: str, session_path: str, event_path: str | None):
    """編集後の請求書と変更履歴を表示する"""
    try:
        registration_id, engine = _build_engine(registration_path, event_path)
        session, messages = load_session(session_path, engine)
    except (ValueError, KeyError) as e:
        click.echo(f"入力ファイルを読み込めません: {e}")
        raise SystemExit(1)

    click.echo(f"登録: {registration_id}（請求書 {engine.original.invoice_number}）")
    for message in messages:
        click.echo(f"  - {message}")
    click.echo("")

    invoice = engine.edit_mode_invoice(session)
    _print_invoice(invoice)
    click.echo("")

    if not invoice.has_changes:
        click.echo("変更はありません")
        return

    click.echo("変更履歴:")
    for change in engine.change_log(session):
        click.echo(f"  [{change.type}] {change.description}")


@click.command()
@click.option("--registration", "registration_path", required=True, type=click.Path(exists=True), help="元の登録JSON")
@click.option("--session", "session_path", required=True, type=click.Path(exists=True), help="編集セッションJSON")
@click.option("--db", required=True, type=click.Path(), help="DBファイルパス")
@click.option("--event", "event_path", type=click.Path(exists=True), default=None, help="イベントJSON（価格表・チームカタログ）")
def submit(registration_path: str, session_path: str, db: str, event_path: str | None):
    """編集内容を送信し、新しい請求書を発行する"""
    try:
        registration_id, engine = _build_engine(registration_path, event_path)
        session, _ = load_session(session_path, engine)
    except (ValueError, KeyError) as e:
        click.echo(f"入力ファイルを読み込めません: {e}")
        raise SystemExit(1)

    db_engine = get_engine(db)
    init_db(db_engine)

    with get_session(db_engine) as db_session:
        repository = SQLAlchemyRegistrationChangesRepository(db_session)
        stored = repository.load(registration_id)
        changes = engine.submit(session, stored)
        saved = repository.save(registration_id, changes)

    click.echo(f"登録を更新しました: {registration_id}")
    click.echo(f"  新しい請求書: {saved.new_invoice.invoice_number}")
    click.echo(f"  合計: {format_currency(saved.new_invoice.total)}")
    if saved.past_invoices:
        click.echo(f"  置き換えた請求書: {len(saved.past_invoices)}件")


@click.command()
@click.option("--registration-id", required=True, type=str, help="登録ID")
@click.option("--db", required=True, type=click.Path(), help="DBファイルパス")
def discard(registration_id: str, db: str):
    """保存済みの変更を破棄し、元の登録に戻す"""
    db_engine = get_engine(db)
    init_db(db_engine)

    with get_session(db_engine) as db_session:
        cleared = SQLAlchemyRegistrationChangesRepository(db_session).clear(registration_id)

    if cleared:
        click.echo(f"変更を破棄しました: {registration_id}")
    else:
        click.echo(f"保存済みの変更はありません: {registration_id}")
