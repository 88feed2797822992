"""
Tests for the finance demo: transaction validation, withdrawal policies per
account kind, payment channels and FinanceApp bookkeeping.
"""

import datetime
import pytest
from decimal import Decimal

from tally.finance import (
    Account,
    AccountKind,
    FinanceApp,
    InsufficientFundsError,
    PaymentChannel,
    Transaction,
    seed_transactions,
)
from tally.registry import DuplicateKeyError, InvalidValueError

TODAY = datetime.date(2024, 1, 15)


def test_transaction_amount_is_decimal():
    t = Transaction(1, TODAY, 12.5, "Food")
    assert t.amount == Decimal("12.5")


@pytest.mark.parametrize(
    "amount, category",
    [(-1, "Food"), (10, ""), (10, "   "), ("abc", "Food"), ("NaN", "Food"), (Decimal("NaN"), "Food")],
)
def test_invalid_transaction_raises(amount, category):
    with pytest.raises(InvalidValueError):
        Transaction(1, TODAY, amount, category)


@pytest.mark.parametrize("number, balance", [("", 10), ("SA-1", -5), ("SA-1", "abc"), ("SA-1", "NaN")])
def test_invalid_account_raises(number, balance):
    with pytest.raises(InvalidValueError):
        Account(number, balance)


def test_standard_account_may_overdraw():
    account = Account("AC-1", Decimal("100"), AccountKind.STANDARD)
    account.apply_transaction(Transaction(1, TODAY, Decimal("150"), "Rent"))
    assert account.balance == Decimal("-50")


def test_savings_account_refuses_overdraw_and_keeps_balance():
    account = Account("SA-1", Decimal("100"), AccountKind.SAVINGS)
    with pytest.raises(InsufficientFundsError):
        account.apply_transaction(Transaction(1, TODAY, Decimal("150"), "Rent"))
    assert account.balance == Decimal("100")


def test_custom_policy_overrides_kind():
    def flat_fee(balance, amount):
        return balance - amount - Decimal("1")

    account = Account("AC-2", Decimal("10"), policy=flat_fee)
    assert account.apply_transaction(Transaction(1, TODAY, Decimal("4"), "Fees")) == Decimal("5")


def test_account_kind_from_label():
    assert AccountKind.from_label(" Savings ") is AccountKind.SAVINGS
    with pytest.raises(InvalidValueError):
        AccountKind.from_label("checking")


def test_channel_process_line():
    line = PaymentChannel.MOBILE_MONEY.process(Transaction(9, TODAY, Decimal("1500"), "Travel"))
    assert line == "[MobileMoney] Processing transaction #9: Amount = $1,500.00, Category = Travel"


def test_finance_app_runs_seeded_transactions():
    app = FinanceApp(Account("SA-12345", Decimal("1000"), AccountKind.SAVINGS))
    output = []
    for transaction, channel in seed_transactions(TODAY):
        output.extend(app.process(transaction, channel))

    assert "Insufficient funds" in output
    assert app.account.balance == Decimal("550")
    assert [t.id for t in app.transactions.list()] == [1, 2, 3]


def test_finance_app_rejects_reused_transaction_id():
    app = FinanceApp(Account("AC-1", Decimal("1000")))
    t = Transaction(1, TODAY, Decimal("1"), "Snacks")
    app.process(t, PaymentChannel.BANK_TRANSFER)
    with pytest.raises(DuplicateKeyError):
        app.process(t, PaymentChannel.BANK_TRANSFER)
    assert app.account.balance == Decimal("999")
    assert len(app.transactions) == 1
