"""
Ledger service: the only way entries get into the ledger.

This service enforces the fundamental rules:
1. Every entry has a description, debits and credits
2. Every entry balances (debits = credits)
3. Every amount is positive and posts to a known account
4. Entries are immutable (append-only)

If any check fails, nothing is added to the session. The
caller is responsible for calling db.commit() after a
successful create_entry().
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from double_entry.exceptions import ValidationError, ResolutionError
from double_entry.models.account import Account
from double_entry.models.amount import Amount, DebitAmount, CreditAmount
from double_entry.models.entry import Entry, EntryType
from double_entry.reference import Reference
from double_entry.schemas.entry import EntrySpec, AmountSpec
from double_entry.services.account_service import AccountService

logger = logging.getLogger(__name__)


class LedgerService:
    """
    All entry operations pass through this service.

    The service takes a database session as a constructor
    argument. This means the caller controls the transaction
    boundary: they decide when to commit or rollback.
    """

    def __init__(self, db: Session):
        self.db = db
        self.account_service = AccountService(db)

    # --- Entry types ---

    def create_entry_type(self, description: str) -> EntryType:
        """
        Create an entry classification.

        Raises ValidationError if the description is blank or taken.
        """
        description = (description or "").strip()
        if not description:
            raise ValidationError("Entry type must have a description")
        if self.find_entry_type(description) is not None:
            raise ValidationError(
                f"Entry type '{description}' already exists"
            )

        entry_type = EntryType(description=description)
        self.db.add(entry_type)
        self.db.flush()
        return entry_type

    def find_entry_type(self, description: str) -> EntryType | None:
        return self.db.execute(
            select(EntryType).where(EntryType.description == description)
        ).scalar_one_or_none()

    def _resolve_entry_type(self, entry_type) -> EntryType | None:
        if entry_type is None or isinstance(entry_type, EntryType):
            return entry_type
        found = self.find_entry_type(entry_type)
        if found is None:
            raise ValidationError(f"Entry type '{entry_type}' not found")
        return found

    # --- Building and posting ---

    def build_entry(self, spec: EntrySpec) -> Entry:
        """
        Turn an EntrySpec into an unsaved Entry with its amounts.

        Account names and numbers are resolved here; every one that
        does not match an account is reported in one
        ResolutionError. Nothing is added to the session, so the
        result can be inspected or validated freely.
        """
        spec = spec.oriented()

        references = [
            s.account for s in spec.debits + spec.credits
            if s.account is not None
        ]
        accounts = self.account_service.resolve_many(references)

        entry = Entry(
            description=spec.description,
            assigned_entry_type=self._resolve_entry_type(spec.entry_type),
            initiator=spec.initiator,
        )
        entry.debit_amounts = [
            self._build_amount(DebitAmount, s, accounts) for s in spec.debits
        ]
        entry.credit_amounts = [
            self._build_amount(CreditAmount, s, accounts) for s in spec.credits
        ]
        return entry

    def _build_amount(
        self, amount_class: type[Amount], spec: AmountSpec, accounts: dict
    ) -> Amount:
        account = None
        if spec.account is not None:
            account = accounts[AccountService.reference_key(spec.account)]
        return amount_class(
            account=account,
            amount=spec.amount,
            accountee=spec.accountee,
            context=spec.context,
            subcontext=spec.subcontext,
        )

    def create_entry(self, spec: EntrySpec) -> Entry:
        """
        Build, validate and post an entry.

        This is the most critical method in the library. Every
        violated rule is collected into one ValidationError,
        raised before anything touches the session. On success the
        entry and all of its amounts are flushed together; if the
        flush fails the session rolls back, so no partial entry is
        ever left behind.
        """
        entry = self.build_entry(spec)

        errors = entry.validate()
        if errors:
            logger.warning(
                "Rejected entry %r: %s", entry.description, "; ".join(errors)
            )
            raise ValidationError(errors)

        self.db.add(entry)
        try:
            self.db.flush()
        except SQLAlchemyError:
            logger.exception("Failed to post entry %r", entry.description)
            raise

        logger.info(
            "Posted entry %s %r (%d debits, %d credits)",
            entry.id,
            entry.description,
            len(entry.debit_amounts),
            len(entry.credit_amounts),
        )
        return entry

    def reverse_entry(self, entry_id: int, description: str | None = None) -> Entry:
        """
        Post the offsetting entry for a committed one.

        The original is not touched. Every debit becomes a credit of
        the same amount to the same account, with the same tags, and
        vice versa.
        """
        original = self.get_entry(entry_id)

        def as_spec(amount: Amount) -> AmountSpec:
            return AmountSpec(
                account=amount.account,
                amount=amount.amount,
                accountee=amount.accountee,
                context=amount.context,
                subcontext=amount.subcontext,
            )

        return self.create_entry(EntrySpec(
            description=description or f"Reversal: {original.description}",
            entry_type=original.assigned_entry_type,
            initiator=original.initiator,
            debits=[as_spec(a) for a in original.debit_amounts],
            credits=[as_spec(a) for a in original.credit_amounts],
            reversed=True,
        ))

    # --- Queries ---

    def get_entry(self, entry_id: int) -> Entry:
        """Get an entry by ID."""
        entry = self.db.get(Entry, entry_id)
        if not entry:
            raise ResolutionError([entry_id])
        return entry

    def entries_by_type(self, entry_type: EntryType | str) -> list[Entry]:
        """All entries of one classification, oldest first."""
        entry_type = self._resolve_entry_type(entry_type)
        entries = self.db.execute(
            select(Entry)
            .where(Entry.entry_type_id == entry_type.id)
            .order_by(Entry.id)
        ).scalars().all()
        return list(entries)

    def entries_by_initiator(self, initiator) -> list[Entry]:
        """All entries started by one external record, oldest first."""
        entries = self.db.execute(
            select(Entry)
            .where(Entry.initiator == Reference.of(initiator))
            .order_by(Entry.id)
        ).scalars().all()
        return list(entries)

    def entries_for_account(self, account: Account | str | int) -> list[Entry]:
        """All entries that post to an account on either side, newest first."""
        account = self.account_service.resolve(account)
        entries = self.db.execute(
            select(Entry)
            .where(Entry.id.in_(
                select(Amount.entry_id).where(Amount.account_id == account.id)
            ))
            .order_by(Entry.id.desc())
        ).scalars().all()
        return list(entries)
