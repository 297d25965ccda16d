"""
Amount model: one debit or credit posting.

Each amount belongs to exactly one entry and posts to exactly one
account. Amounts are created only while building an entry and are
never modified afterwards; corrections are new, offsetting entries.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger, String, DateTime, ForeignKey,
    Enum as SAEnum, select, func,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, composite

from double_entry.models.base import Base
from double_entry.models.entry import Entry
from double_entry.models.enums import Side
from double_entry.money import from_cents, to_cents
from double_entry.reference import Reference, make_reference


class Amount(Base):
    """
    A single posting of money to an account.

    Stored in one table; the ``side`` column decides whether a row
    loads as a DebitAmount or a CreditAmount. ``accountee``,
    ``context`` and ``subcontext`` are optional tags used to compute
    sub-ledger balances.
    """

    __tablename__ = "amounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    side: Mapped[Side] = mapped_column(
        SAEnum(Side, name="amount_side_enum"),
        nullable=False,
    )
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    accountee_type: Mapped[str | None] = mapped_column(String(100))
    accountee_id: Mapped[str | None] = mapped_column(String(64))
    context_type: Mapped[str | None] = mapped_column(String(100))
    context_id: Mapped[str | None] = mapped_column(String(64), index=True)
    subcontext_type: Mapped[str | None] = mapped_column(String(100))
    subcontext_id: Mapped[str | None] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    accountee: Mapped[Reference | None] = composite(
        make_reference, accountee_type, accountee_id
    )
    context: Mapped[Reference | None] = composite(
        make_reference, context_type, context_id
    )
    subcontext: Mapped[Reference | None] = composite(
        make_reference, subcontext_type, subcontext_id
    )

    __mapper_args__ = {
        "polymorphic_on": "side",
        "polymorphic_abstract": True,
    }

    @property
    def amount(self) -> Decimal | None:
        if self.amount_cents is None:
            return None
        return from_cents(self.amount_cents)

    @amount.setter
    def amount(self, value) -> None:
        self.amount_cents = None if value is None else to_cents(value)

    def validate(self) -> list[str]:
        """Return every rule this posting breaks; empty means valid."""
        errors = []
        if self.amount_cents is None:
            errors.append("amount must be present")
        elif self.amount_cents <= 0:
            errors.append("amount must be greater than zero")
        if self.account is None and self.account_id is None:
            errors.append("account must be present")
        if self.entry is None and self.entry_id is None:
            errors.append("entry must be present")
        return errors

    # --- Query helpers ---
    # Each returns SQL criteria over the amounts table.

    @classmethod
    def by_context(cls, reference: Reference):
        return Amount.context == reference

    @classmethod
    def by_subcontext(cls, reference: Reference):
        return Amount.subcontext == reference

    @classmethod
    def by_accountee(cls, reference: Reference):
        return Amount.accountee == reference

    @classmethod
    def by_initiator(cls, reference: Reference):
        return Amount.entry_id.in_(
            select(Entry.id).where(Entry.initiator == reference)
        )

    @classmethod
    def by_entry_type(cls, entry_type_id: int):
        return Amount.entry_id.in_(
            select(Entry.id).where(Entry.entry_type_id == entry_type_id)
        )

    @classmethod
    def filter_criteria(cls, balance_filter) -> list:
        """
        Translate a BalanceFilter into SQL criteria.

        Only fully specified dimensions contribute; the filter
        already drops a dimension whose id or type is missing.
        """
        if balance_filter is None:
            return []

        criteria = []
        if balance_filter.context is not None:
            criteria.append(cls.by_context(balance_filter.context))
        if balance_filter.subcontext is not None:
            criteria.append(cls.by_subcontext(balance_filter.subcontext))
        if balance_filter.initiator is not None:
            criteria.append(cls.by_initiator(balance_filter.initiator))
        if balance_filter.accountee is not None:
            criteria.append(cls.by_accountee(balance_filter.accountee))
        if balance_filter.entry_type_id is not None:
            criteria.append(cls.by_entry_type(balance_filter.entry_type_id))
        return criteria

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.amount} account={self.account_id}>"


class DebitAmount(Amount):
    __mapper_args__ = {"polymorphic_identity": Side.DEBIT}

    entry: Mapped["Entry"] = relationship(back_populates="debit_amounts")
    account: Mapped["Account"] = relationship()


class CreditAmount(Amount):
    __mapper_args__ = {"polymorphic_identity": Side.CREDIT}

    entry: Mapped["Entry"] = relationship(back_populates="credit_amounts")
    account: Mapped["Account"] = relationship()


def side_totals(
    db: Session,
    balance_filter=None,
    account_ids=None,
) -> dict[tuple[int, Side], int]:
    """
    Sum posted cents per (account, side).

    ``account_ids`` may be a list of ids or a SELECT of ids; None
    means every account. Accounts with no matching postings are
    simply absent from the result.
    """
    stmt = (
        select(
            Amount.account_id,
            Amount.side,
            func.coalesce(func.sum(Amount.amount_cents), 0),
        )
        .where(*Amount.filter_criteria(balance_filter))
        .group_by(Amount.account_id, Amount.side)
    )
    if account_ids is not None:
        stmt = stmt.where(Amount.account_id.in_(account_ids))

    rows = db.execute(stmt).all()
    return {
        (account_id, Side(side)): int(total)
        for account_id, side, total in rows
    }
