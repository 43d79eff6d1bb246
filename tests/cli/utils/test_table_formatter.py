"""table_formatter ユーティリティのテスト"""

from eventreg.cli.utils.table_formatter import (
    format_currency,
    format_edit_invoice_table,
    format_line_items_table,
    format_table,
    get_display_width,
    pad_to_width,
)
from eventreg.models.invoice import EditModeLineItem, InvoiceLineItem


class TestGetDisplayWidth:
    """get_display_width のテスト"""

    def test_get_display_width_ascii(self):
        """ASCII文字の幅は全て1"""
        assert get_display_width("hello") == 5
        assert get_display_width("Open") == 4
        assert get_display_width("") == 0

    def test_get_display_width_cjk(self):
        """全角文字の幅は2"""
        assert get_display_width("早割") == 4
        assert get_display_width("ディビジョン") == 12

    def test_get_display_width_mixed(self):
        """混在文字（全角+半角）の幅を正しく計算"""
        assert get_display_width("U12女子") == 7  # 3 + 4


class TestPadToWidth:
    """pad_to_width のテスト"""

    def test_pad_to_width_left(self):
        """左揃え（デフォルト）: テキストの右にスペースを追加"""
        assert pad_to_width("abc", 6) == "abc   "

    def test_pad_to_width_right(self):
        """右揃え: テキストの左にスペースを追加"""
        assert pad_to_width("abc", 6, align_right=True) == "   abc"

    def test_pad_to_width_no_padding_needed(self):
        """テキストが既に目標幅以上の場合パディング不要"""
        assert pad_to_width("hello world", 5) == "hello world"

    def test_pad_to_width_cjk(self):
        """全角文字のパディングも表示幅ベースで正しく動作"""
        assert pad_to_width("早割", 6) == "早割  "


class TestFormatCurrency:
    """format_currency のテスト"""

    def test_thousands_separator(self):
        assert format_currency(1040) == "$1,040.00"

    def test_cents(self):
        assert format_currency(33.75) == "$33.75"

    def test_negative(self):
        assert format_currency(-12) == "-$12.00"


class TestFormatTable:
    """format_table のテスト"""

    def test_table_structure(self):
        """ボーダー、ヘッダ、データ行の構造"""
        result = format_table(("名前", "金額"), [("Open", "$10.00")])
        lines = result.split("\n")

        assert len(lines) == 5
        assert lines[0].startswith("+")
        assert "名前" in lines[1]
        assert lines[3] == "| Open | $10.00 |"

    def test_alignment_uses_display_width(self):
        """全角ヘッダに合わせて列幅が決まり、数値列は右揃えになる"""
        result = format_table(("区分", "数"), [("A", "1")])
        lines = result.split("\n")
        assert lines[3] == "| A    |  1 |"


class TestFormatLineItemsTable:
    """format_line_items_table のテスト"""

    def test_tier_labels(self):
        items = [
            InvoiceLineItem(category="Open", unit=100.0, qty=10, tier="earlyBird"),
            InvoiceLineItem(category="Youth", unit=85.0, qty=3, tier="regular"),
            InvoiceLineItem(category="Masters", unit=0, qty=4, has_pricing=False),
        ]
        result = format_line_items_table(items)

        assert "$1,000.00" in result
        assert "早割" in result
        assert "通常" in result
        assert "価格未設定" in result


class TestFormatEditInvoiceTable:
    """format_edit_invoice_table のテスト"""

    def test_change_labels(self):
        items = [
            EditModeLineItem(category="Open", unit=130.0, qty=10, is_removed=True),
            EditModeLineItem(category="Youth", unit=85.0, qty=12, is_modified=True, original_qty=10),
            EditModeLineItem(category="Open", unit=130.0, qty=8, is_new=True),
        ]
        lines = format_edit_invoice_table(items).split("\n")

        assert "($1,300.00)" in lines[3]
        assert "削除" in lines[3]
        assert "変更（10 → 12）" in lines[4]
        assert "$1,040.00" in lines[5]
        assert "追加" in lines[5]

    def test_unchanged_line(self):
        items = [EditModeLineItem(category="Open", unit=130.0, qty=10)]
        assert format_edit_invoice_table(items).split("\n")[3].endswith("    - |")
