"""history コマンド: 請求書の履歴を表示する"""

import click

from eventreg.cli.utils.table_formatter import format_currency, format_table
from eventreg.db import get_engine, get_session, init_db
from eventreg.repositories.registration_repository import (
    SQLAlchemyRegistrationChangesRepository,
)


@click.command()
@click.option("--registration-id", required=True, type=str, help="登録ID")
@click.option("--db", required=True, type=click.Path(), help="DBファイルパス")
def history(registration_id: str, db: str):
    """元の請求書・過去の請求書・現在の請求書を表示する"""
    db_engine = get_engine(db)
    init_db(db_engine)

    with get_session(db_engine) as db_session:
        stored = SQLAlchemyRegistrationChangesRepository(db_session).load(registration_id)

    if stored is None:
        click.echo(f"保存済みの変更はありません: {registration_id}")
        return

    rows = []
    if stored.original_invoice is not None:
        info = stored.original_invoice
        rows.append((info.invoice_number, info.invoice_date, format_currency(info.total), "元の請求書"))
    for info in stored.past_invoices:
        rows.append((info.invoice_number, info.invoice_date, format_currency(info.total), info.status or "-"))
    if stored.new_invoice is not None:
        info = stored.new_invoice
        rows.append((info.invoice_number, info.invoice_date, format_currency(info.total), "現在"))

    click.echo(f"請求書履歴: {registration_id}")
    click.echo(format_table(("請求書番号", "発行日", "合計", "状態"), rows))
    click.echo("")
    click.echo(f"  追加チーム: {len(stored.added_teams)}件")
    click.echo(f"  削除チーム: {len(stored.removed_team_ids)}件")
    click.echo(f"  ロスター変更: {len(stored.modified_rosters)}件")
