"""Business logic services."""

from double_entry.services.account_service import AccountService
from double_entry.services.ledger_service import LedgerService
from double_entry.services.balance_service import BalanceService

__all__ = ["AccountService", "LedgerService", "BalanceService"]
