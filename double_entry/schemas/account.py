"""
Pydantic schemas for account operations.
"""

from pydantic import BaseModel, Field

from double_entry.models.enums import AccountKind


class AccountCreate(BaseModel):
    """Request to create a new account."""
    name: str = Field(min_length=1, max_length=100)
    number: str = Field(min_length=1, max_length=20)
    kind: AccountKind
    contra: bool = False

    model_config = {"coerce_numbers_to_str": True}


class AccountUpdate(BaseModel):
    """
    Rename, renumber or re-flag an account.

    Fields left as None are unchanged. Uniqueness of name and
    number is still enforced, and contra can only change while
    the account has no postings.
    """
    name: str | None = Field(default=None, min_length=1, max_length=100)
    number: str | None = Field(default=None, min_length=1, max_length=20)
    contra: bool | None = None

    model_config = {"coerce_numbers_to_str": True}
