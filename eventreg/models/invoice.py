"""Invoice DTOs.

Line totals are never stored: ``line_total`` is always derived from
``unit * qty``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class InvoiceLineItem:
    """One invoice row (one per division).

    Attributes:
        category: Division name.
        unit: Resolved unit price.
        qty: Participant count.
        has_pricing: False when the division had no pricing and the line
            was degraded to a zero price.
        tier: Price tier the unit came from ("earlyBird" / "regular").
    """

    category: str
    unit: float
    qty: int
    has_pricing: bool = True
    tier: str | None = None

    @property
    def line_total(self) -> float:
        return self.unit * self.qty

    @classmethod
    def from_dict(cls, data: Mapping) -> "InvoiceLineItem":
        """保存済みの明細を復元する（lineTotalは読み捨てて再計算する）"""
        return cls(
            category=str(data.get("category", "")),
            unit=float(data.get("unit") or 0),
            qty=int(data.get("qty") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "unit": self.unit,
            "qty": self.qty,
            "lineTotal": self.line_total,
        }


@dataclass(frozen=True)
class EditModeLineItem(InvoiceLineItem):
    """An invoice row annotated with its edit-mode diff state.

    A row either comes from the original invoice (possibly removed or
    modified) or was introduced in this session (``is_new``). Removed rows
    keep their unit/qty for display but are excluded from totals.
    """

    id: str = ""
    is_new: bool = False
    is_removed: bool = False
    is_modified: bool = False
    original_qty: int | None = None

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update(
            {
                "id": self.id,
                "isNew": self.is_new,
                "isRemoved": self.is_removed,
                "isModified": self.is_modified,
            }
        )
        if self.original_qty is not None:
            result["originalQty"] = self.original_qty
        return result


@dataclass(frozen=True)
class InvoiceTotals:
    """小計・税額・合計"""

    subtotal: float
    total_tax: float
    total: float


@dataclass(frozen=True)
class Payment:
    """支払い記録"""

    amount: float
    method: str = ""
    last_four: str = ""
    paid_on: date | None = None


@dataclass(frozen=True)
class InvoiceSummary:
    """GST/QSTの内訳と入金状況を含む請求書サマリー"""

    line_items: tuple[InvoiceLineItem, ...]
    subtotal: float
    gst_amount: float
    qst_amount: float
    total_tax: float
    total: float
    total_paid: float
    balance_due: float


@dataclass(frozen=True)
class EditModeInvoice:
    """The invoice derived from the current edit session.

    Attributes:
        items: Annotated line items (original lines first, then new teams).
        subtotal: Sum of non-removed line totals.
        tax: subtotal * tax rate derived from the original invoice.
        total: subtotal + tax.
        has_changes: True iff a team was added or removed, or a roster
            change altered a line quantity.
    """

    items: tuple[EditModeLineItem, ...] = field(default_factory=tuple)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    has_changes: bool = False

    @property
    def active_items(self) -> tuple[EditModeLineItem, ...]:
        return tuple(item for item in self.items if not item.is_removed)

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "hasChanges": self.has_changes,
        }
