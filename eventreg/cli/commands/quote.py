"""quote コマンド: チーム構成から請求見積もりを計算する"""

import click

from eventreg.cli.utils.loaders import load_event, load_quote_request
from eventreg.cli.utils.date_parser import parse_reference_date
from eventreg.cli.utils.table_formatter import format_currency, format_line_items_table
from eventreg.services.invoice_calculator import (
    compute_invoice_summary,
    compute_line_items,
    group_by_division,
    index_pricing,
)


@click.command()
@click.option("--event", "event_path", required=True, type=click.Path(exists=True), help="イベントJSON（価格表）")
@click.option("--entries", "entries_path", required=True, type=click.Path(exists=True), help="登録チームJSON")
@click.option("--date", "date_str", type=str, default=None, help="発行日（YYYY-MM-DD形式、省略時はファイルの issuedDate か今日）")
@click.option("--gst", type=float, default=None, help="GST税率（例: 0.05）")
@click.option("--qst", type=float, default=None, help="QST税率（例: 0.09975）")
def quote(
    event_path: str,
    entries_path: str,
    date_str: str | None,
    gst: float | None,
    qst: float | None,
):
    """登録チームの請求見積もりを表示する"""
    try:
        event = load_event(event_path)
        request = load_quote_request(entries_path)
        reference_date = parse_reference_date(date_str) if date_str else request.issued_date
    except (ValueError, KeyError) as e:
        click.echo(f"入力ファイルを読み込めません: {e}")
        raise SystemExit(1)

    entries_by_division = group_by_division(request.teams)
    line_items = compute_line_items(
        entries_by_division, index_pricing(event.division_pricing), reference_date
    )
    summary = compute_invoice_summary(
        line_items, gst_rate=gst, qst_rate=qst, payments=request.payments
    )

    issued_label = reference_date.isoformat() if reference_date else "今日"
    click.echo(f"請求見積もり（発行日: {issued_label}）")
    click.echo("")

    if not line_items:
        click.echo("登録チームがありません")
        return

    click.echo(format_line_items_table(line_items))
    click.echo("")
    click.echo(f"  チーム数: {len(request.teams)}")
    click.echo(f"  参加人数: {sum(item.qty for item in line_items)}")
    click.echo(f"  小計:     {format_currency(summary.subtotal)}")
    click.echo(f"  GST:      {format_currency(summary.gst_amount)}")
    click.echo(f"  QST:      {format_currency(summary.qst_amount)}")
    click.echo(f"  合計:     {format_currency(summary.total)}")
    if summary.total_paid:
        click.echo(f"  入金済み: {format_currency(summary.total_paid)}")
        click.echo(f"  残高:     {format_currency(summary.balance_due)}")

    if any(not item.has_pricing and item.qty > 0 for item in line_items):
        click.echo("")
        click.echo("警告: 価格未設定のディビジョンがあります（合計には含まれていません）")
