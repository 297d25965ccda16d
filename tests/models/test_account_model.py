"""
Tests for account balances computed on the model.

Covers normal sides, contra inversion and balance filters on
every dimension.
"""

from decimal import Decimal

import pytest

from double_entry.exceptions import InvariantViolation
from double_entry.models import (
    Account,
    AccountKind,
    Asset,
    Liability,
    Equity,
    Revenue,
    Expense,
    Side,
)
from double_entry.reference import Reference
from double_entry.schemas.account import AccountCreate
from double_entry.schemas.balance import BalanceFilter
from double_entry.schemas.entry import EntrySpec
from double_entry.services.account_service import AccountService
from double_entry.services.ledger_service import LedgerService


def make_account(db, name, number, kind, contra=False):
    return AccountService(db).create_account(AccountCreate(
        name=name, number=number, kind=kind, contra=contra,
    ))


def post(db, debit, credit, amount, debit_tags=None, credit_tags=None, **kwargs):
    """Post a two-line entry moving ``amount`` from credit to debit."""
    return LedgerService(db).create_entry(EntrySpec(
        description=kwargs.pop("description", "Test entry"),
        debits=[{"account": debit, "amount": amount, **(debit_tags or {})}],
        credits=[{"account": credit, "amount": amount, **(credit_tags or {})}],
        **kwargs,
    ))


class TestSides:

    @pytest.mark.parametrize("account_class, side", [
        (Asset, Side.DEBIT),
        (Expense, Side.DEBIT),
        (Liability, Side.CREDIT),
        (Equity, Side.CREDIT),
        (Revenue, Side.CREDIT),
    ])
    def test_normal_side(self, account_class, side):
        assert account_class.normal_side is side
        assert account_class(name="x", number="1").effective_side is side

    def test_contra_inverts_effective_side(self):
        drawing = Equity(name="Drawing", number="32", contra=True)
        assert drawing.effective_side is Side.DEBIT

    def test_abstract_account_has_no_balance(self):
        assert not hasattr(Account, "balance")
        assert not hasattr(Account, "normal_side")


class TestBalance:

    @pytest.fixture
    def accounts(self, db_session):
        result = {
            "cash": make_account(db_session, "Cash", "11", AccountKind.ASSET),
            "loan": make_account(db_session, "Loan", "12", AccountKind.LIABILITY),
            "contra_loan": make_account(
                db_session, "Loan Discount", "13", AccountKind.LIABILITY, contra=True
            ),
            "contra_cash": make_account(
                db_session, "Allowance", "14", AccountKind.ASSET, contra=True
            ),
        }
        db_session.commit()
        return result

    def test_new_account_has_zero_balance(self, accounts):
        assert accounts["cash"].balance() == Decimal("0.00")
        assert accounts["cash"].debits_balance() == Decimal("0.00")

    def test_debit_side_account(self, db_session, accounts):
        post(db_session, "Cash", "Loan", 100)
        post(db_session, "Loan", "Cash", 30)
        db_session.commit()

        cash = accounts["cash"]
        assert cash.debits_balance() == Decimal("100.00")
        assert cash.credits_balance() == Decimal("30.00")
        assert cash.balance() == Decimal("70.00")

    def test_credit_side_account(self, db_session, accounts):
        post(db_session, "Cash", "Loan", 100)
        post(db_session, "Loan", "Cash", 30)
        db_session.commit()

        loan = accounts["loan"]
        assert loan.balance() == loan.credits_balance() - loan.debits_balance()
        assert loan.balance() == Decimal("70.00")

    def test_contra_credit_kind_is_debits_minus_credits(self, db_session, accounts):
        post(db_session, "Loan Discount", "Cash", 40)
        post(db_session, "Cash", "Loan Discount", 15)
        db_session.commit()

        discount = accounts["contra_loan"]
        assert discount.balance() == Decimal("25.00")
        assert discount.balance() == (
            discount.debits_balance() - discount.credits_balance()
        )

    def test_contra_debit_kind_is_credits_minus_debits(self, db_session, accounts):
        post(db_session, "Cash", "Allowance", 40)
        db_session.commit()

        assert accounts["contra_cash"].balance() == Decimal("40.00")

    def test_detached_account_cannot_compute(self):
        with pytest.raises(InvariantViolation, match="not attached"):
            Asset(name="Floating", number="0").balance()

    def test_debit_and_credit_entries(self, db_session, accounts):
        first = post(db_session, "Cash", "Loan", 10)
        second = post(db_session, "Loan", "Cash", 5)
        db_session.commit()

        assert accounts["cash"].debit_entries == [first]
        assert accounts["cash"].credit_entries == [second]


class TestBalanceFilters:
    """Scenario D and friends: sub-ledger balances."""

    @pytest.fixture
    def loan(self, db_session):
        make_account(db_session, "Cash", "11", AccountKind.ASSET)
        loan = make_account(db_session, "Loan", "12", AccountKind.LIABILITY)
        db_session.commit()
        return loan

    def test_context(self, db_session, loan):
        job = Reference("Job", 999)
        po = Reference("PurchaseOrder", 333)
        post(db_session, "Cash", "Loan", 123, credit_tags={"context": job})
        post(db_session, "Cash", "Loan", 321, credit_tags={"context": job})
        post(db_session, "Cash", "Loan", 275, credit_tags={"context": po})
        post(db_session, "Cash", "Loan", 999)
        db_session.commit()

        assert loan.credits_balance(BalanceFilter(context=job)) == 123 + 321
        assert loan.credits_balance({"context": po}) == 275
        assert loan.credits_balance() == 123 + 321 + 275 + 999

    def test_context_and_subcontext(self, db_session, loan):
        job = Reference("Job", 999)
        po = Reference("PurchaseOrder", 333)
        foo = Reference("Item", 1000)
        bar = Reference("Item", 1001)
        post(db_session, "Cash", "Loan", 9999,
             credit_tags={"context": job, "subcontext": foo})
        post(db_session, "Cash", "Loan", 123,
             credit_tags={"context": po, "subcontext": foo})
        post(db_session, "Cash", "Loan", 222,
             credit_tags={"context": po, "subcontext": foo})
        post(db_session, "Cash", "Loan", 1,
             credit_tags={"context": po, "subcontext": bar})
        db_session.commit()

        assert loan.credits_balance(
            BalanceFilter(context=po, subcontext=foo)
        ) == 123 + 222
        assert loan.credits_balance(
            BalanceFilter(context=po, subcontext=bar)
        ) == 1
        assert loan.credits_balance(BalanceFilter(subcontext=foo)) == (
            9999 + 123 + 222
        )

    def test_half_specified_dimension_is_ignored(self, db_session, loan):
        job = Reference("Job", 1)
        post(db_session, "Cash", "Loan", 10, credit_tags={"context": job})
        post(db_session, "Cash", "Loan", 5)
        db_session.commit()

        only_id = BalanceFilter(context_id="1")
        only_type = {"context_type": "Job"}

        assert loan.credits_balance(only_id) == Decimal("15.00")
        assert loan.credits_balance(only_type) == Decimal("15.00")
        assert loan.credits_balance(
            {"context_id": 1, "context_type": "Job"}
        ) == Decimal("10.00")

    def test_accountee(self, db_session, loan):
        bank = Reference("Lender", "first-national")
        post(db_session, "Cash", "Loan", 80, credit_tags={"accountee": bank})
        post(db_session, "Cash", "Loan", 20)
        db_session.commit()

        assert loan.balance(BalanceFilter(accountee=bank)) == Decimal("80.00")

    def test_initiator(self, db_session, loan):
        clerk = Reference("User", 5)
        post(db_session, "Cash", "Loan", 60, initiator=clerk)
        post(db_session, "Cash", "Loan", 40, initiator=Reference("User", 6))
        db_session.commit()

        assert loan.credits_balance(BalanceFilter(initiator=clerk)) == 60

    def test_entry_type(self, db_session, loan):
        bridge = LedgerService(db_session).create_entry_type("Bridge loan")
        post(db_session, "Cash", "Loan", 60, entry_type=bridge)
        post(db_session, "Cash", "Loan", 40)
        db_session.commit()

        assert loan.balance(BalanceFilter(entry_type=bridge)) == 60

    def test_record_as_context(self, db_session, loan):
        # Any record with an id can tag a posting, accounts included
        job = make_account(db_session, "stand-in job", "999", AccountKind.EXPENSE)
        post(db_session, "Cash", "Loan", 12, credit_tags={"context": job})
        db_session.commit()

        assert loan.credits_balance(BalanceFilter(context=job)) == 12
        assert loan.credits_balance(
            BalanceFilter(context_type="Account", context_id=job.id)
        ) == 12
