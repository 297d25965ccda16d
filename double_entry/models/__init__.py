"""
Database models package.

All models must be imported here so that every mapped class is
registered on Base.metadata before tables are created.
"""

from double_entry.models.base import Base
from double_entry.models.enums import AccountKind, Side, NORMAL_SIDES
from double_entry.models.entry import (
    Entry,
    EntryType,
    UNASSIGNED_ENTRY_TYPE,
)
from double_entry.models.amount import Amount, DebitAmount, CreditAmount
from double_entry.models.account import (
    Account,
    Asset,
    Liability,
    Equity,
    Revenue,
    Expense,
    ACCOUNT_CLASSES,
)

__all__ = [
    "Base",
    "AccountKind",
    "Side",
    "NORMAL_SIDES",
    "Entry",
    "EntryType",
    "UNASSIGNED_ENTRY_TYPE",
    "Amount",
    "DebitAmount",
    "CreditAmount",
    "Account",
    "Asset",
    "Liability",
    "Equity",
    "Revenue",
    "Expense",
    "ACCOUNT_CLASSES",
]
