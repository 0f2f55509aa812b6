"""
Per-wallet income, expense and net balance over a transaction snapshot.

Attribution for a wallet ``w``:

* Income/Expense count when ``w`` is in ``affected_wallet_ids`` or, for
  legacy records with no affected ids, when ``w`` is the ``wallet_id``.
  Every co-affected wallet receives the full amount: the physical and the
  logical wallet are two independent views of the same event, not a split.
* Transfers count as expense for the source and income for the destination.

The caller supplies transactions already scoped to one user.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from enum import Enum

from profiteer.domain.errors import CorruptTransaction, InvalidTransaction
from profiteer.models import (
    ZERO,
    DailySummary,
    PeriodSummary,
    Transaction,
    TransactionType,
    WalletBalance,
)


class TransferDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


def validate_transaction(transaction: Transaction) -> list[str]:
    """Return every attribution rule ``transaction`` breaks."""
    problems: list[str] = []
    if not isinstance(transaction.type, TransactionType):
        problems.append(f"unknown transaction type {transaction.type!r}")
        return problems
    if transaction.amount < 0:
        problems.append(f"negative amount {transaction.amount}")

    if transaction.type is TransactionType.TRANSFER:
        if not transaction.source_wallet_id or not transaction.destination_wallet_id:
            problems.append("transfer requires both a source and a destination wallet")
        elif transaction.source_wallet_id == transaction.destination_wallet_id:
            problems.append("transfer source and destination are the same wallet")
    elif not transaction.affected_wallet_ids and not transaction.wallet_id:
        problems.append(f"{transaction.type.value.lower()} does not reference any wallet")
    return problems


def find_invalid_transactions(transactions: Iterable[Transaction]) -> dict[str, list[str]]:
    invalid: dict[str, list[str]] = {}
    for transaction in transactions:
        problems = validate_transaction(transaction)
        if problems:
            invalid[transaction.id] = problems
    return invalid


def _check_structure(transaction: Transaction) -> None:
    if not isinstance(transaction.type, TransactionType):
        raise CorruptTransaction(
            f"unknown transaction type {transaction.type!r}", transaction.id
        )
    if transaction.amount < 0:
        raise CorruptTransaction(f"negative amount {transaction.amount}", transaction.id)


def _check_transfer(transaction: Transaction) -> None:
    source = transaction.source_wallet_id
    destination = transaction.destination_wallet_id
    if not source or not destination:
        raise InvalidTransaction(
            "transfer requires both a source and a destination wallet", transaction.id
        )
    if source == destination:
        raise InvalidTransaction(
            "transfer source and destination are the same wallet", transaction.id
        )


def affects_wallet(transaction: Transaction, wallet_id: str) -> bool:
    """Whether an income or expense is attributed to ``wallet_id``."""
    if transaction.affected_wallet_ids:
        return wallet_id in transaction.affected_wallet_ids
    return transaction.wallet_id == wallet_id


def references_wallet(transaction: Transaction, wallet_id: str) -> bool:
    if transaction.type is TransactionType.TRANSFER:
        return wallet_id in (transaction.source_wallet_id, transaction.destination_wallet_id)
    return affects_wallet(transaction, wallet_id)


def transfer_direction(transaction: Transaction, wallet_id: str) -> TransferDirection | None:
    if transaction.type is not TransactionType.TRANSFER:
        return None
    if transaction.source_wallet_id == wallet_id:
        return TransferDirection.OUTGOING
    if transaction.destination_wallet_id == wallet_id:
        return TransferDirection.INCOMING
    return None


def _contribution(transaction: Transaction, wallet_id: str) -> tuple[Decimal, Decimal]:
    """(income, expense) that ``transaction`` adds to ``wallet_id``."""
    _check_structure(transaction)
    amount = transaction.amount

    if transaction.type is TransactionType.TRANSFER:
        direction = transfer_direction(transaction, wallet_id)
        if direction is None:
            return ZERO, ZERO
        _check_transfer(transaction)
        if direction is TransferDirection.OUTGOING:
            return ZERO, amount
        return amount, ZERO

    if not affects_wallet(transaction, wallet_id):
        return ZERO, ZERO
    if transaction.type is TransactionType.INCOME:
        return amount, ZERO
    return ZERO, amount


def calculate_wallet_balance(wallet_id: str, transactions: Iterable[Transaction]) -> WalletBalance:
    income = ZERO
    expense = ZERO
    for transaction in transactions:
        tx_income, tx_expense = _contribution(transaction, wallet_id)
        income += tx_income
        expense += tx_expense
    return WalletBalance(wallet_id=wallet_id, income=income, expense=expense)


def income_of(transactions: Iterable[Transaction], wallet_id: str) -> Decimal:
    return calculate_wallet_balance(wallet_id, transactions).income


def expense_of(transactions: Iterable[Transaction], wallet_id: str) -> Decimal:
    return calculate_wallet_balance(wallet_id, transactions).expense


def net_balance_of(transactions: Iterable[Transaction], wallet_id: str) -> Decimal:
    return calculate_wallet_balance(wallet_id, transactions).net


def calculate_total_balance(
    transactions: Iterable[Transaction],
    wallet_id: str,
    initial_balance: Decimal,
) -> Decimal:
    return initial_balance + net_balance_of(transactions, wallet_id)


def effective_amount(transaction: Transaction, wallet_id: str) -> Decimal:
    """Signed change ``transaction`` makes to ``wallet_id``."""
    income, expense = _contribution(transaction, wallet_id)
    return income - expense


def calculate_period_summary(
    transactions: Iterable[Transaction],
    wallet_id: str,
) -> PeriodSummary:
    income = ZERO
    expenses = ZERO
    transfers_in = ZERO
    transfers_out = ZERO
    counts = {
        "total": 0,
        "income": 0,
        "expense": 0,
        "incoming": 0,
        "outgoing": 0,
    }

    for transaction in transactions:
        counts["total"] += 1
        tx_income, tx_expense = _contribution(transaction, wallet_id)
        income += tx_income
        expenses += tx_expense

        direction = transfer_direction(transaction, wallet_id)
        if direction is TransferDirection.INCOMING:
            transfers_in += transaction.amount
            counts["incoming"] += 1
        elif direction is TransferDirection.OUTGOING:
            transfers_out += transaction.amount
            counts["outgoing"] += 1
        elif transaction.type is TransactionType.INCOME and tx_income:
            counts["income"] += 1
        elif transaction.type is TransactionType.EXPENSE and tx_expense:
            counts["expense"] += 1

    return PeriodSummary(
        income=income,
        expenses=expenses,
        net_change=income - expenses,
        transaction_count=counts["total"],
        transfers_in=transfers_in,
        transfers_out=transfers_out,
        income_count=counts["income"],
        expense_count=counts["expense"],
        incoming_transfer_count=counts["incoming"],
        outgoing_transfer_count=counts["outgoing"],
    )


def calculate_daily_summary(
    transactions: Iterable[Transaction],
    wallet_id: str,
) -> DailySummary:
    count = 0
    net = ZERO
    for transaction in transactions:
        count += 1
        net += effective_amount(transaction, wallet_id)
    return DailySummary(transaction_count=count, net_amount=net)
