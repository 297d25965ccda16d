"""
References to records outside the ledger.

An entry's initiator and an amount's accountee, context and
subcontext point at whatever the host application wants: a
customer, a job, an invoice line. The ledger stores them as a
(type, id) pair and only ever compares them for equality.
"""

from dataclasses import dataclass

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable


@dataclass(frozen=True)
class Reference:
    type: str
    id: str

    def __post_init__(self):
        # ids are opaque; 7 and "7" name the same record
        if self.id is not None:
            object.__setattr__(self, "id", str(self.id))

    @classmethod
    def of(cls, obj) -> "Reference":
        """
        Build a reference to any object with an ``id``.

        Mapped SQLAlchemy objects are tagged with their base mapped
        class, so a reference to an ``Expense`` account and one to an
        ``Asset`` account share the type ``Account``.
        """
        if isinstance(obj, Reference):
            return obj
        try:
            type_name = inspect(obj).mapper.base_mapper.class_.__name__
        except NoInspectionAvailable:
            type_name = type(obj).__name__
        return cls(type=type_name, id=obj.id)

    def __composite_values__(self):
        return self.type, self.id


def make_reference(type_, id_) -> Reference | None:
    """Composite factory: a missing half means no reference at all."""
    if type_ is None or id_ is None:
        return None
    return Reference(type_, id_)
