"""請求明細と合計の計算

ディビジョンごとにチームの参加人数を集計し、解決済みの単価から明細と合計を求める。
中間段階では丸めを行わない（通貨表示の丸めは表示側の責務）。
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime

from eventreg.config.billing import (
    DEFAULT_GST_RATE,
    DEFAULT_QST_RATE,
    FALLBACK_TAX_RATE,
)
from eventreg.models.invoice import InvoiceLineItem, InvoiceSummary, InvoiceTotals, Payment
from eventreg.models.pricing import DivisionPricing
from eventreg.models.team import TeamEntry
from eventreg.services.pricing_resolver import resolve_division_pricing

logger = logging.getLogger(__name__)


def index_pricing(divisions: Iterable[DivisionPricing]) -> dict[str, DivisionPricing]:
    """ディビジョン名 -> 価格表 の辞書を作る（同名は後勝ち）"""
    return {pricing.name: pricing for pricing in divisions}


def group_by_division(teams: Iterable[TeamEntry]) -> dict[str, list[TeamEntry]]:
    """チームをディビジョンごとにまとめる（初出順）"""
    grouped: dict[str, list[TeamEntry]] = {}
    for team in teams:
        grouped.setdefault(team.division, []).append(team)
    return grouped


def compute_line_items(
    entries_by_division: Mapping[str, Sequence[TeamEntry]],
    pricing_by_division: Mapping[str, DivisionPricing],
    reference_date: date | datetime | None = None,
) -> list[InvoiceLineItem]:
    """ディビジョンごとの請求明細を計算する

    価格表がないディビジョンは単価0の明細（has_pricing=False）として出力し、
    合計を計算可能なまま残す。

    Args:
        entries_by_division: ディビジョン名 -> チームのリスト
        pricing_by_division: ディビジョン名 -> 価格表
        reference_date: 請求書の発行日

    Returns:
        入力順の請求明細リスト
    """
    line_items = []
    for division, entries in entries_by_division.items():
        qty = sum(entry.member_count for entry in entries)
        pricing = pricing_by_division.get(division)

        if pricing is None:
            logger.warning(
                "No pricing for division %r (%d participants); billed at 0", division, qty
            )
            line_items.append(
                InvoiceLineItem(category=division, unit=0.0, qty=qty, has_pricing=False)
            )
            continue

        rate = resolve_division_pricing(pricing, reference_date)
        line_items.append(
            InvoiceLineItem(category=division, unit=rate.price, qty=qty, tier=rate.tier)
        )

    return line_items


def compute_totals(line_items: Iterable[InvoiceLineItem], tax_rate: float) -> InvoiceTotals:
    """小計・税額・合計を計算する

    Args:
        line_items: 請求明細
        tax_rate: 税率（0.15 = 15%）

    Returns:
        InvoiceTotals
    """
    subtotal = sum((item.line_total for item in line_items), 0.0)
    total_tax = subtotal * tax_rate
    return InvoiceTotals(subtotal=subtotal, total_tax=total_tax, total=subtotal + total_tax)


def derive_tax_rate(
    subtotal: float, total_tax: float, fallback: float = FALLBACK_TAX_RATE
) -> float:
    """元の請求書の小計と税額から実効税率を導出する

    Args:
        subtotal: 元の小計
        total_tax: 元の税額
        fallback: 小計が0以下の場合の税率

    Returns:
        実効税率
    """
    if subtotal > 0:
        return total_tax / subtotal
    return fallback


def compute_invoice_summary(
    line_items: Sequence[InvoiceLineItem],
    gst_rate: float | None = None,
    qst_rate: float | None = None,
    payments: Iterable[Payment] = (),
) -> InvoiceSummary:
    """GST/QSTの内訳と入金残高を含む請求書サマリーを計算する

    Args:
        line_items: 請求明細
        gst_rate: GST税率（Noneなら既定値）
        qst_rate: QST税率（Noneなら既定値）
        payments: 入金記録

    Returns:
        InvoiceSummary
    """
    gst_rate = DEFAULT_GST_RATE if gst_rate is None else gst_rate
    qst_rate = DEFAULT_QST_RATE if qst_rate is None else qst_rate

    subtotal = sum((item.line_total for item in line_items), 0.0)
    gst_amount = subtotal * gst_rate
    qst_amount = subtotal * qst_rate
    total_tax = gst_amount + qst_amount
    total = subtotal + total_tax
    total_paid = sum((payment.amount for payment in payments), 0.0)

    return InvoiceSummary(
        line_items=tuple(line_items),
        subtotal=subtotal,
        gst_amount=gst_amount,
        qst_amount=qst_amount,
        total_tax=total_tax,
        total=total,
        total_paid=total_paid,
        balance_due=total - total_paid,
    )
