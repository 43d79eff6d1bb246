"""Services module"""

from eventreg.services.change_log import ChangeLogEntry, MemberChange, build_change_log
from eventreg.services.edit_engine import (
    OperationResult,
    RegistrationEditEngine,
    RemovalReceipt,
    next_invoice_number,
)
from eventreg.services.invoice_calculator import (
    compute_invoice_summary,
    compute_line_items,
    compute_totals,
    derive_tax_rate,
    group_by_division,
    index_pricing,
)
from eventreg.services.pricing_resolver import describe_tier, resolve_division_pricing
from eventreg.services.registration_lock import is_registration_locked

__all__ = [
    "ChangeLogEntry",
    "MemberChange",
    "OperationResult",
    "RegistrationEditEngine",
    "RemovalReceipt",
    "build_change_log",
    "compute_invoice_summary",
    "compute_line_items",
    "compute_totals",
    "derive_tax_rate",
    "describe_tier",
    "group_by_division",
    "index_pricing",
    "is_registration_locked",
    "next_invoice_number",
    "resolve_division_pricing",
]
