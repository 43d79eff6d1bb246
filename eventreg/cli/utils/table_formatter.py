"""テーブルフォーマッタユーティリティ

請求明細を整形されたテーブル形式で出力するための関数群。
全角文字の表示幅を考慮した動的幅計算に対応。
"""

import unicodedata
from collections.abc import Sequence

from eventreg.constants import TIER_EARLY_BIRD, TIER_REGULAR
from eventreg.models.invoice import EditModeLineItem, InvoiceLineItem


def get_display_width(text: str) -> int:
    """文字列の表示幅を計算（全角文字は2、半角は1）

    Args:
        text: 計算対象の文字列

    Returns:
        int: 表示幅
    """
    width = 0
    for char in text:
        if unicodedata.east_asian_width(char) in ("F", "W", "A"):  # Full, Wide, Ambiguous
            width += 2
        else:
            width += 1
    return width


def pad_to_width(text: str, target_width: int, align_right: bool = False) -> str:
    """文字列を指定の表示幅にパディング

    Args:
        text: パディング対象の文字列
        target_width: 目標の表示幅
        align_right: True なら右揃え、False なら左揃え

    Returns:
        str: パディングされた文字列
    """
    padding_needed = target_width - get_display_width(text)
    if padding_needed <= 0:
        return text
    padding = " " * padding_needed
    if align_right:
        return padding + text
    return text + padding


def format_currency(amount: float) -> str:
    """金額を "$1,234.50" 形式にする（負数は "-$12.00"）"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """動的幅のテーブルを生成する（1列目は左揃え、それ以外は右揃え）

    Args:
        headers: ヘッダ
        rows: フォーマット済みセルの行

    Returns:
        str: テーブル文字列
    """
    col_widths = []
    for col_idx, header in enumerate(headers):
        max_width = get_display_width(header)
        for row in rows:
            max_width = max(max_width, get_display_width(row[col_idx]))
        col_widths.append(max_width)

    def make_border() -> str:
        return "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def make_row(cells: Sequence[str]) -> str:
        parts = []
        for i, cell in enumerate(cells):
            padded = pad_to_width(cell, col_widths[i], align_right=i > 0)
            parts.append(f" {padded} ")
        return "|" + "|".join(parts) + "|"

    lines = [make_border(), make_row(headers), make_border()]
    for row in rows:
        lines.append(make_row(row))
    lines.append(make_border())

    return "\n".join(lines)


_TIER_LABELS = {
    TIER_EARLY_BIRD: "早割",
    TIER_REGULAR: "通常",
}


def format_line_items_table(line_items: Sequence[InvoiceLineItem]) -> str:
    """請求明細テーブルを生成する"""
    headers = ("ディビジョン", "単価", "人数", "金額", "料金区分")
    rows = []
    for item in line_items:
        tier = _TIER_LABELS.get(item.tier, "-") if item.has_pricing else "価格未設定"
        rows.append(
            (
                item.category,
                format_currency(item.unit),
                str(item.qty),
                format_currency(item.line_total),
                tier,
            )
        )
    return format_table(headers, rows)


def _change_label(item: EditModeLineItem) -> str:
    if item.is_new:
        return "追加"
    if item.is_removed:
        return "削除"
    if item.is_modified:
        return f"変更（{item.original_qty} → {item.qty}）"
    return "-"


def format_edit_invoice_table(items: Sequence[EditModeLineItem]) -> str:
    """差分注記付きの請求明細テーブルを生成する

    削除行は合計に含めないため、金額を括弧で囲んで表示する。
    """
    headers = ("ディビジョン", "単価", "人数", "金額", "変更")
    rows = []
    for item in items:
        amount = format_currency(item.line_total)
        if item.is_removed:
            amount = f"({amount})"
        rows.append(
            (
                item.category,
                format_currency(item.unit),
                str(item.qty),
                amount,
                _change_label(item),
            )
        )
    return format_table(headers, rows)
