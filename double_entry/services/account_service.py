"""
Account service: the chart of accounts.

Creates accounts of a concrete kind, keeps names and numbers
unique, and resolves the "name or number" references used when
building entries. Accounts are never deleted.
"""

import logging

from sqlalchemy import select, exists, or_
from sqlalchemy.orm import Session

from double_entry.exceptions import ValidationError, ResolutionError
from double_entry.models.account import Account, ACCOUNT_CLASSES
from double_entry.models.amount import Amount
from double_entry.models.enums import AccountKind
from double_entry.schemas.account import AccountCreate, AccountUpdate

logger = logging.getLogger(__name__)


class AccountService:
    """
    All chart-of-accounts operations pass through this service.

    The service takes a database session as a constructor
    argument. The caller controls the transaction boundary.
    """

    def __init__(self, db: Session):
        self.db = db

    def _uniqueness_errors(
        self, name: str | None, number: str | None, exclude_id: int | None = None
    ) -> list[str]:
        clauses = []
        if name is not None:
            clauses.append(Account.name == name)
        if number is not None:
            clauses.append(Account.number == number)
        if not clauses:
            return []

        stmt = select(Account).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        clashes = self.db.execute(stmt).scalars().all()

        errors = []
        if name is not None and any(a.name == name for a in clashes):
            errors.append(f"Account with name '{name}' already exists")
        if number is not None and any(a.number == number for a in clashes):
            errors.append(f"Account with number '{number}' already exists")
        return errors

    def create_account(self, request: AccountCreate) -> Account:
        """
        Create a new account of the requested kind.

        Raises ValidationError if the name or number is taken by
        an account of any kind.
        """
        errors = self._uniqueness_errors(request.name, request.number)
        if errors:
            raise ValidationError(errors)

        account_class = ACCOUNT_CLASSES[request.kind]
        account = account_class(
            name=request.name,
            number=request.number,
            contra=request.contra,
        )
        self.db.add(account)
        self.db.flush()
        logger.info("Created account %r", account)
        return account

    def update_account(self, account_id: int, request: AccountUpdate) -> Account:
        """
        Rename, renumber or toggle contra on an existing account.

        Postings keep pointing at the same account row, so history
        follows the account through a rename. The contra flag is
        frozen once any amount posts to the account.
        """
        account = self.get_account(account_id)

        errors = self._uniqueness_errors(
            request.name, request.number, exclude_id=account.id
        )
        if (
            request.contra is not None
            and request.contra != account.contra
            and self.has_postings(account)
        ):
            errors.append(
                f"Account '{account.name}' has postings; contra cannot change"
            )
        if errors:
            raise ValidationError(errors)

        if request.name is not None:
            account.name = request.name
        if request.number is not None:
            account.number = request.number
        if request.contra is not None:
            account.contra = request.contra

        self.db.flush()
        return account

    def has_postings(self, account: Account) -> bool:
        return self.db.execute(
            select(exists().where(Amount.account_id == account.id))
        ).scalar()

    def get_account(self, account_id: int) -> Account:
        """Get an account by ID."""
        account = self.db.get(Account, account_id)
        if not account:
            raise ResolutionError([account_id])
        return account

    def list_accounts(self, kind: AccountKind | None = None) -> list[Account]:
        """All accounts ordered by number, optionally of one kind."""
        stmt = select(Account).order_by(Account.number)
        if kind is not None:
            stmt = stmt.where(Account.kind == kind)
        return list(self.db.execute(stmt).scalars().all())

    @staticmethod
    def reference_key(reference):
        """Key under which resolve_many() files a reference."""
        if isinstance(reference, Account):
            return reference
        return str(reference)

    def find(self, reference: Account | str | int) -> Account | None:
        """
        Look an account up by name, then by number.

        An exact name match always wins, so an account named "12"
        is found before the account numbered 12.
        """
        if isinstance(reference, Account):
            return reference

        key = str(reference)
        account = self.db.execute(
            select(Account).where(Account.name == key)
        ).scalar_one_or_none()
        if account is None:
            account = self.db.execute(
                select(Account).where(Account.number == key)
            ).scalar_one_or_none()
        return account

    def resolve(self, reference: Account | str | int) -> Account:
        """Like find(), but raises ResolutionError when nothing matches."""
        account = self.find(reference)
        if account is None:
            logger.warning("Unresolved account reference %r", reference)
            raise ResolutionError([reference])
        return account

    def resolve_many(self, references) -> dict:
        """
        Resolve a batch of references.

        Returns a mapping of reference_key(reference) to account.
        Every reference that fails is named in a single
        ResolutionError.
        """
        resolved = {}
        missing = []
        for reference in references:
            key = self.reference_key(reference)
            if key in resolved or reference in missing:
                continue
            account = self.find(reference)
            if account is None:
                missing.append(reference)
            else:
                resolved[key] = account

        if missing:
            logger.warning("Unresolved account references %r", missing)
            raise ResolutionError(missing)
        return resolved
