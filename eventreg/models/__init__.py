"""データモデルパッケージ"""

from eventreg.models.base import Base
from eventreg.models.invoice import (
    EditModeInvoice,
    EditModeLineItem,
    InvoiceLineItem,
    InvoiceSummary,
    InvoiceTotals,
    Payment,
)
from eventreg.models.pricing import ActiveDivisionRate, DivisionPricing, PricingTier
from eventreg.models.registration_record import RegistrationChangeRecord
from eventreg.models.session import EditSession
from eventreg.models.snapshot import (
    OriginalRegistration,
    StoredInvoiceInfo,
    StoredRegistrationChanges,
)
from eventreg.models.team import (
    RegistrationEntry,
    RosterMember,
    TeamEntry,
    TeamOption,
    normalize_member,
    normalize_role,
    normalize_roster,
)

__all__ = [
    "ActiveDivisionRate",
    "Base",
    "DivisionPricing",
    "EditModeInvoice",
    "EditModeLineItem",
    "EditSession",
    "InvoiceLineItem",
    "InvoiceSummary",
    "InvoiceTotals",
    "OriginalRegistration",
    "Payment",
    "PricingTier",
    "RegistrationChangeRecord",
    "RegistrationEntry",
    "RosterMember",
    "StoredInvoiceInfo",
    "StoredRegistrationChanges",
    "TeamEntry",
    "TeamOption",
    "normalize_member",
    "normalize_role",
    "normalize_roster",
]
