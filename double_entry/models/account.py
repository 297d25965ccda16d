"""
Account model (chart of accounts).

Every account is one of five kinds, each with a normal balance
side:

    KIND        | NORMAL SIDE | DESCRIPTION
    --------------------------------------------------------------
    Asset       | Debit       | Resources owned by the business
    Liability   | Credit      | Debts owed to outsiders
    Equity      | Credit      | Owners' rights to the assets
    Revenue     | Credit      | Increases in owners' equity
    Expense     | Debit       | Assets or services consumed

A contra account has its normal side swapped, e.g. a "Drawing"
account that reduces Equity. Contra only changes how the balance
is signed; postings still land in debit_amounts or credit_amounts
as they were entered.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, object_session

from double_entry.exceptions import InvariantViolation
from double_entry.models.amount import side_totals
from double_entry.models.base import Base
from double_entry.models.enums import AccountKind, Side, NORMAL_SIDES
from double_entry.money import from_cents
from double_entry.schemas.balance import as_balance_filter


def signed_balance(side: Side, debit_cents: int, credit_cents: int) -> int:
    """Balance in cents seen from ``side``."""
    if side is Side.CREDIT:
        return credit_cents - debit_cents
    return debit_cents - credit_cents


class Account(Base):
    """
    A single account in the chart of accounts.

    Account itself is abstract: only the concrete kinds below can
    be stored, and only they know how to compute a balance. Accounts
    are never deleted once amounts reference them.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[AccountKind] = mapped_column(
        SAEnum(AccountKind, name="account_kind_enum"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False
    )
    contra: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # No delete cascade: an account with postings must stay
    debit_amounts: Mapped[list["DebitAmount"]] = relationship(viewonly=True)
    credit_amounts: Mapped[list["CreditAmount"]] = relationship(viewonly=True)

    __mapper_args__ = {
        "polymorphic_on": "kind",
        "polymorphic_abstract": True,
    }

    @property
    def debit_entries(self) -> list["Entry"]:
        """Entries that debit this account, each listed once."""
        return list(dict.fromkeys(a.entry for a in self.debit_amounts))

    @property
    def credit_entries(self) -> list["Entry"]:
        """Entries that credit this account, each listed once."""
        return list(dict.fromkeys(a.entry for a in self.credit_amounts))

    def _side_cents(self, balance_filter=None) -> tuple[int, int]:
        """Return (debit cents, credit cents) posted to this account."""
        db = object_session(self)
        if db is None:
            raise InvariantViolation(
                f"Account {self.name!r} is not attached to a session"
            )
        if self.id is None:
            return 0, 0

        totals = side_totals(
            db, as_balance_filter(balance_filter), account_ids=[self.id]
        )
        return (
            totals.get((self.id, Side.DEBIT), 0),
            totals.get((self.id, Side.CREDIT), 0),
        )

    def debits_balance(self, balance_filter=None) -> Decimal:
        """Sum of the debit postings matching ``balance_filter``."""
        debit_cents, _ = self._side_cents(balance_filter)
        return from_cents(debit_cents)

    def credits_balance(self, balance_filter=None) -> Decimal:
        """Sum of the credit postings matching ``balance_filter``."""
        _, credit_cents = self._side_cents(balance_filter)
        return from_cents(credit_cents)

    def __repr__(self) -> str:
        contra = " contra" if self.contra else ""
        return f"<{type(self).__name__}{contra} {self.number} {self.name}>"


class SidedAccount:
    """Balance behaviour shared by the concrete account kinds."""

    normal_side: ClassVar[Side]

    @property
    def effective_side(self) -> Side:
        if self.contra:
            return self.normal_side.opposite
        return self.normal_side

    def balance(self, balance_filter=None) -> Decimal:
        """
        Balance of the account on its effective side.

        Credit-side accounts: credits - debits.
        Debit-side accounts:  debits - credits.
        """
        debit_cents, credit_cents = self._side_cents(balance_filter)
        return from_cents(
            signed_balance(self.effective_side, debit_cents, credit_cents)
        )


class Asset(SidedAccount, Account):
    normal_side = NORMAL_SIDES[AccountKind.ASSET]
    __mapper_args__ = {"polymorphic_identity": AccountKind.ASSET}


class Liability(SidedAccount, Account):
    normal_side = NORMAL_SIDES[AccountKind.LIABILITY]
    __mapper_args__ = {"polymorphic_identity": AccountKind.LIABILITY}


class Equity(SidedAccount, Account):
    normal_side = NORMAL_SIDES[AccountKind.EQUITY]
    __mapper_args__ = {"polymorphic_identity": AccountKind.EQUITY}


class Revenue(SidedAccount, Account):
    normal_side = NORMAL_SIDES[AccountKind.REVENUE]
    __mapper_args__ = {"polymorphic_identity": AccountKind.REVENUE}


class Expense(SidedAccount, Account):
    normal_side = NORMAL_SIDES[AccountKind.EXPENSE]
    __mapper_args__ = {"polymorphic_identity": AccountKind.EXPENSE}


ACCOUNT_CLASSES: dict[AccountKind, type[Account]] = {
    AccountKind.ASSET: Asset,
    AccountKind.LIABILITY: Liability,
    AccountKind.EQUITY: Equity,
    AccountKind.REVENUE: Revenue,
    AccountKind.EXPENSE: Expense,
}
