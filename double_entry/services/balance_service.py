"""
Balance service: balances per account kind and the trial balance.

Account-level balances live on the account models. This service
adds them up across a whole kind and checks the accounting
equation:

    Assets = Liabilities + Equity + Revenue - Expenses

Balances are never stored. They are always derived from the
amounts, which guarantees they are correct as long as the
amounts are.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from double_entry.exceptions import InvariantViolation
from double_entry.models.account import Account, ACCOUNT_CLASSES, signed_balance
from double_entry.models.amount import side_totals
from double_entry.models.enums import AccountKind, Side, NORMAL_SIDES
from double_entry.money import from_cents
from double_entry.schemas.balance import as_balance_filter
from double_entry.services.account_service import AccountService

logger = logging.getLogger(__name__)

KIND_BY_CLASS: dict[type, AccountKind] = {
    cls: kind for kind, cls in ACCOUNT_CLASSES.items()
}


class BalanceService:

    def __init__(self, db: Session):
        self.db = db
        self.account_service = AccountService(db)

    @staticmethod
    def _as_kind(kind) -> AccountKind:
        """Accept an AccountKind or a concrete account class."""
        if isinstance(kind, AccountKind):
            return kind
        if kind in KIND_BY_CLASS:
            return KIND_BY_CLASS[kind]
        raise InvariantViolation(
            f"{getattr(kind, '__name__', kind)!r} is not a concrete "
            f"account kind; use one of "
            f"{', '.join(k.value for k in AccountKind)}"
        )

    def _kind_cents(self, kind: AccountKind, balance_filter=None) -> int:
        """
        Sum of the balances of every account of one kind.

        A contra account's balance is subtracted rather than added,
        so a Drawing account reduces total Equity.
        """
        accounts = {
            account_id: contra
            for account_id, contra in self.db.execute(
                select(Account.id, Account.contra).where(Account.kind == kind)
            ).all()
        }
        if not accounts:
            return 0

        totals = side_totals(
            self.db,
            as_balance_filter(balance_filter),
            account_ids=list(accounts),
        )
        normal_side = NORMAL_SIDES[kind]

        total = 0
        for account_id, contra in accounts.items():
            debit_cents = totals.get((account_id, Side.DEBIT), 0)
            credit_cents = totals.get((account_id, Side.CREDIT), 0)
            side = normal_side.opposite if contra else normal_side
            balance = signed_balance(side, debit_cents, credit_cents)
            total += -balance if contra else balance
        return total

    def kind_balance(self, kind, balance_filter=None) -> Decimal:
        """
        Balance of all accounts of a kind.

        ``kind`` is an AccountKind or one of Asset, Liability,
        Equity, Revenue, Expense. The abstract Account class has no
        kind and is rejected with InvariantViolation.
        """
        return from_cents(self._kind_cents(self._as_kind(kind), balance_filter))

    def balances_by_kind(self, balance_filter=None) -> dict[AccountKind, Decimal]:
        return {
            kind: self.kind_balance(kind, balance_filter)
            for kind in AccountKind
        }

    def trial_balance(self) -> Decimal:
        """
        Assets - (Liabilities + Equity + Revenue - Expenses).

        This should always equal zero, otherwise there is an error
        in the ledger.
        """
        cents = {kind: self._kind_cents(kind) for kind in AccountKind}
        return from_cents(
            cents[AccountKind.ASSET]
            - (
                cents[AccountKind.LIABILITY]
                + cents[AccountKind.EQUITY]
                + cents[AccountKind.REVENUE]
                - cents[AccountKind.EXPENSE]
            )
        )

    def account_balance(
        self, reference: Account | str | int, balance_filter=None
    ) -> Decimal:
        """Balance of one account, looked up by name or number."""
        account = self.account_service.resolve(reference)
        return account.balance(balance_filter)

    def check_integrity(self) -> dict:
        """
        Verify the ledger is balanced.

        Sums every debit and every credit posted and recomputes the
        trial balance. Both differences must be zero.
        """
        totals = side_totals(self.db)
        total_debits = sum(
            cents for (_, side), cents in totals.items() if side is Side.DEBIT
        )
        total_credits = sum(
            cents for (_, side), cents in totals.items() if side is Side.CREDIT
        )
        difference = from_cents(total_debits - total_credits)
        trial_balance = self.trial_balance()
        is_balanced = difference == 0 and trial_balance == 0

        if not is_balanced:
            logger.error(
                "Ledger out of balance: difference=%s trial_balance=%s",
                difference,
                trial_balance,
            )

        return {
            "total_debits": from_cents(total_debits),
            "total_credits": from_cents(total_credits),
            "difference": difference,
            "trial_balance": trial_balance,
            "is_balanced": is_balanced,
        }
