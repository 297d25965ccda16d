"""
Pydantic schemas for balance queries.

A BalanceFilter narrows a balance down to the postings tagged with
particular external records. Each dimension is an (id, type) pair
and only counts when both halves are given; a lone id or a lone
type is ignored rather than rejected.
"""

from pydantic import BaseModel, model_validator

from double_entry.reference import Reference

DIMENSIONS = ("context", "subcontext", "initiator", "accountee")


class BalanceFilter(BaseModel):
    """Optional sub-ledger dimensions for a balance query."""
    context_id: str | None = None
    context_type: str | None = None
    subcontext_id: str | None = None
    subcontext_type: str | None = None
    initiator_id: str | None = None
    initiator_type: str | None = None
    accountee_id: str | None = None
    accountee_type: str | None = None
    entry_type_id: int | None = None

    model_config = {"frozen": True, "coerce_numbers_to_str": True}

    @model_validator(mode="before")
    @classmethod
    def expand_references(cls, data):
        """
        Accept ``context=<Reference or record>`` as shorthand for the
        ``context_id`` / ``context_type`` pair, for every dimension.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for dimension in DIMENSIONS:
            target = data.pop(dimension, None)
            if target is not None:
                reference = Reference.of(target)
                data[f"{dimension}_id"] = reference.id
                data[f"{dimension}_type"] = reference.type
        entry_type = data.pop("entry_type", None)
        if entry_type is not None:
            data["entry_type_id"] = entry_type.id
        return data

    def _pair(self, dimension: str) -> Reference | None:
        type_ = getattr(self, f"{dimension}_type")
        id_ = getattr(self, f"{dimension}_id")
        if type_ is None or id_ is None:
            return None
        return Reference(type_, id_)

    @property
    def context(self) -> Reference | None:
        return self._pair("context")

    @property
    def subcontext(self) -> Reference | None:
        return self._pair("subcontext")

    @property
    def initiator(self) -> Reference | None:
        return self._pair("initiator")

    @property
    def accountee(self) -> Reference | None:
        return self._pair("accountee")


def as_balance_filter(value) -> BalanceFilter | None:
    """Normalise None, a dict or a BalanceFilter into a BalanceFilter."""
    if value is None or isinstance(value, BalanceFilter):
        return value
    return BalanceFilter.model_validate(value)
