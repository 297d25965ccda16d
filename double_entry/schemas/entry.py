"""
Pydantic schemas for building entries.

These describe an entry as raw data: accounts are named by name or
number, amounts are plain numbers. LedgerService turns an EntrySpec
into Entry, DebitAmount and CreditAmount records.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from double_entry.models.account import Account
from double_entry.models.entry import EntryType
from double_entry.money import to_money
from double_entry.reference import Reference


class AmountSpec(BaseModel):
    """
    One posting inside an EntrySpec.

    The amount is only checked for shape here; a zero or negative
    amount is reported by entry validation together with every
    other problem in the entry.
    """
    account: Account | str | int | None = None
    amount: Decimal | None = None
    accountee: Reference | None = None
    context: Reference | None = None
    subcontext: Reference | None = None

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_money(cls, v):
        if v is None:
            return v
        return to_money(v)

    @field_validator("accountee", "context", "subcontext", mode="before")
    @classmethod
    def reference_from_record(cls, v):
        if v is None or isinstance(v, (Reference, dict)):
            return v
        return Reference.of(v)


class EntrySpec(BaseModel):
    """
    Everything needed to build one entry.

    ``reversed=True`` swaps debits and credits, which is how a
    correcting entry is expressed without restating every posting.
    Each posting keeps its own accountee/context/subcontext tags
    when it changes side.
    """
    description: str | None = None
    entry_type: EntryType | str | None = None
    initiator: Reference | None = None
    debits: list[AmountSpec] = Field(default_factory=list)
    credits: list[AmountSpec] = Field(default_factory=list)
    reversed: bool = False

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("initiator", mode="before")
    @classmethod
    def initiator_from_record(cls, v):
        if v is None or isinstance(v, (Reference, dict)):
            return v
        return Reference.of(v)

    def oriented(self) -> "EntrySpec":
        """Return the spec with debits and credits in posting order."""
        if not self.reversed:
            return self
        return self.model_copy(update={
            "debits": list(self.credits),
            "credits": list(self.debits),
            "reversed": False,
        })
