"""
Finance domain model.

Transactions are routed through a payment channel and applied to an account.
Account behaviour is data: an AccountKind plus the withdrawal policy that
kind maps to.
"""

import datetime
import logging
import typing

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .registry import DuplicateKeyError, InvalidValueError, TypedRegistry


class InsufficientFundsError(InvalidValueError):
    """A withdrawal was refused because the balance does not cover it."""


def _to_decimal(value: typing.Any, label: str) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except ArithmeticError:
            raise InvalidValueError(f"{label} is not a number: {value!r}") from None
    if amount.is_nan():
        raise InvalidValueError(f"{label} is not a number: {value!r}")
    return amount


@dataclass(frozen=True)
class Transaction:
    """
    A single outgoing transaction.

    Attributes:
        id: Caller-assigned unique identifier.
        date: Day the transaction happened.
        amount: Non-negative amount withdrawn from the account.
        category: Free-text spending category (e.g. "Groceries").
    """

    id: int
    date: datetime.date
    amount: Decimal
    category: str

    def __post_init__(self):
        object.__setattr__(self, "amount", _to_decimal(self.amount, "Transaction amount"))
        if self.amount < 0:
            raise InvalidValueError("Transaction amount cannot be negative.")
        if not self.category or not self.category.strip():
            raise InvalidValueError("Transaction category cannot be empty.")


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


class PaymentChannel(Enum):
    BANK_TRANSFER = "BankTransfer"
    MOBILE_MONEY = "MobileMoney"
    CRYPTO_WALLET = "CryptoWallet"

    def process(self, transaction: Transaction) -> str:
        """Return the processing line for `transaction` on this channel."""
        message = (
            f"[{self.value}] Processing transaction #{transaction.id}: "
            f"Amount = {format_money(transaction.amount)}, Category = {transaction.category}"
        )
        logging.info(message)
        return message


WithdrawalPolicy = typing.Callable[[Decimal, Decimal], Decimal]


def unrestricted_withdrawal(balance: Decimal, amount: Decimal) -> Decimal:
    # the balance may go negative
    return balance - amount


def covered_withdrawal(balance: Decimal, amount: Decimal) -> Decimal:
    if amount > balance:
        raise InsufficientFundsError("Insufficient funds")
    return balance - amount


class AccountKind(Enum):
    STANDARD = "standard"
    SAVINGS = "savings"

    @property
    def policy(self) -> WithdrawalPolicy:
        return _POLICIES[self]

    @classmethod
    def from_label(cls, label: str) -> "AccountKind":
        try:
            return cls(label.strip().lower())
        except ValueError:
            raise InvalidValueError(f"Unknown account kind: {label!r}")


_POLICIES: typing.Dict[AccountKind, WithdrawalPolicy] = {
    AccountKind.STANDARD: unrestricted_withdrawal,
    AccountKind.SAVINGS: covered_withdrawal,
}


@dataclass
class Account:
    """
    A balance holder that transactions are applied to.

    `policy` defaults to the withdrawal policy of `kind` but can be swapped
    for any function mapping (balance, amount) to the new balance.
    """

    account_number: str
    balance: Decimal
    kind: AccountKind = AccountKind.STANDARD
    policy: typing.Optional[WithdrawalPolicy] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.account_number or not self.account_number.strip():
            raise InvalidValueError("AccountNumber cannot be null or empty.")
        self.balance = _to_decimal(self.balance, "Initial balance")
        if self.balance < 0:
            raise InvalidValueError("Initial balance cannot be negative.")
        if self.policy is None:
            self.policy = self.kind.policy

    def apply_transaction(self, transaction: Transaction) -> Decimal:
        """
        Withdraw the transaction amount. Raises InsufficientFundsError when the
        policy refuses it; the balance is unchanged in that case.
        """
        if transaction is None:
            raise InvalidValueError("Transaction cannot be None.")
        self.balance = self.policy(self.balance, transaction.amount)
        logging.info(
            f"Account {self.account_number}: applied #{transaction.id}, balance {self.balance}"
        )
        return self.balance


class FinanceApp:
    """Processes transactions against one account and keeps a record of them."""

    def __init__(self, account: Account):
        self.account = account
        self.transactions: TypedRegistry[int, Transaction] = TypedRegistry(name="transactions")

    def process(self, transaction: Transaction, channel: PaymentChannel) -> typing.List[str]:
        """
        Route `transaction` through `channel`, apply it and record it.
        Returns the channel line and the account line, in that order. A reused
        transaction id is refused before anything is applied.
        """
        if transaction.id in self.transactions:
            raise DuplicateKeyError(transaction.id)
        lines = [channel.process(transaction)]
        try:
            balance = self.account.apply_transaction(transaction)
        except InsufficientFundsError as e:
            lines.append(str(e))
        else:
            lines.append(
                f"Account {self.account.account_number}: Transaction applied. "
                f"New balance: {format_money(balance)}"
            )
        self.transactions.add(transaction)
        return lines


def seed_transactions(today: typing.Optional[datetime.date] = None) -> typing.List[typing.Tuple[Transaction, PaymentChannel]]:
    today = today or datetime.date.today()
    return [
        (Transaction(1, today, Decimal("150"), "Groceries"), PaymentChannel.MOBILE_MONEY),
        (Transaction(2, today, Decimal("300"), "Utilities"), PaymentChannel.BANK_TRANSFER),
        (Transaction(3, today, Decimal("700"), "Entertainment"), PaymentChannel.CRYPTO_WALLET),
    ]
