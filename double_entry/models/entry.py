"""
Entry model: a journal entry.

An entry groups the debit and credit amounts of one economic event.
The sum of its debits must equal the sum of its credits. Entries
are immutable: once committed they are never modified or deleted.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship, composite

from double_entry.models.base import Base
from double_entry.reference import Reference, make_reference


class EntryType(Base):
    """Optional classification of an entry (sale, payroll, ...)."""

    __tablename__ = "entry_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )

    def __repr__(self) -> str:
        return f"<EntryType {self.description}>"


@dataclass(frozen=True)
class UnassignedEntryType:
    """Stands in for the entry type of entries that were given none."""
    id: None = None
    description: str = "Unassigned"


UNASSIGNED_ENTRY_TYPE = UnassignedEntryType()


class Entry(Base):
    """
    A balanced set of debit and credit amounts.

    The balance rule lives in validate() so it can be checked, and
    every violation reported, before anything reaches the database.
    """

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    entry_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("entry_types.id"), nullable=True, index=True
    )
    initiator_type: Mapped[str | None] = mapped_column(String(100))
    initiator_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    initiator: Mapped[Reference | None] = composite(
        make_reference, initiator_type, initiator_id
    )

    assigned_entry_type: Mapped[EntryType | None] = relationship()

    # Amounts only exist as part of their entry
    debit_amounts: Mapped[list["DebitAmount"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="DebitAmount.id",
    )
    credit_amounts: Mapped[list["CreditAmount"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="CreditAmount.id",
    )

    @property
    def entry_type(self):
        if self.assigned_entry_type is None:
            return UNASSIGNED_ENTRY_TYPE
        return self.assigned_entry_type

    @property
    def debit_accounts(self) -> list["Account"]:
        return [a.account for a in self.debit_amounts]

    @property
    def credit_accounts(self) -> list["Account"]:
        return [a.account for a in self.credit_amounts]

    @property
    def debits_total_cents(self) -> int:
        return sum(a.amount_cents or 0 for a in self.debit_amounts)

    @property
    def credits_total_cents(self) -> int:
        return sum(a.amount_cents or 0 for a in self.credit_amounts)

    def validate(self) -> list[str]:
        """
        Check the entry and its amounts.

        Every violated rule is reported, not just the first one,
        so the caller can fix them all at once.
        """
        errors = []
        if not (self.description or "").strip():
            errors.append("Entry must have a description")
        if not self.debit_amounts:
            errors.append("Entry must have at least one debit amount")
        if not self.credit_amounts:
            errors.append("Entry must have at least one credit amount")
        if self.credits_total_cents != self.debits_total_cents:
            errors.append("The credit and debit amounts are not equal")

        for label, amounts in (
            ("Debit", self.debit_amounts),
            ("Credit", self.credit_amounts),
        ):
            for position, amount in enumerate(amounts, start=1):
                for message in amount.validate():
                    errors.append(f"{label} {position}: {message}")

        return errors

    def __repr__(self) -> str:
        return f"<Entry {self.id} {self.description!r}>"
