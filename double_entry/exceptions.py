"""
Ledger errors.

Validation and resolution problems are recoverable: they are raised
before anything is written. InvariantViolation marks a programming
mistake. Database errors are not wrapped; they come straight from
SQLAlchemy.
"""


class LedgerError(Exception):
    """Base exception for all ledger failures."""


class ValidationError(LedgerError, ValueError):
    """Raised when an entry, amount or account breaks a ledger rule."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ResolutionError(LedgerError, LookupError):
    """Raised when an account name or number matches no account."""

    def __init__(self, references: list):
        self.references = list(references)
        names = ", ".join(repr(r) for r in self.references)
        super().__init__(f"Accounts not found: {names}")


class InvariantViolation(LedgerError, TypeError):
    """Raised when the API is used in a way that can never be valid."""
