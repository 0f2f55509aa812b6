"""
Historical balance replay and physical/logical discrepancy detection.

Physical wallets hold the money, logical wallets earmark it. Every income or
expense is recorded against one of each, so their totals should match; a
gap larger than the tolerance points at the transaction that broke the
pairing.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal

from profiteer.domain.balances import effective_amount
from profiteer.domain.currencies import PhysicalForm
from profiteer.domain.filters import ALL_WALLETS, WalletFilter, filter_wallets
from profiteer.models import ZERO, RunningBalance, Transaction, TransactionType, Wallet

DEFAULT_TOLERANCE = Decimal("0.01")

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _touched_wallet_ids(transaction: Transaction) -> tuple[str, ...]:
    if transaction.type is TransactionType.TRANSFER:
        return tuple(
            wallet_id
            for wallet_id in (transaction.source_wallet_id, transaction.destination_wallet_id)
            if wallet_id
        )
    if transaction.affected_wallet_ids:
        return transaction.affected_wallet_ids
    return (transaction.wallet_id,) if transaction.wallet_id else ()


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _chronological_key(transaction: Transaction) -> datetime:
    moment = transaction.transaction_date or transaction.created_at
    return as_utc(moment) if moment is not None else _EARLIEST


def _apply(transaction: Transaction, balances: dict[str, Decimal]) -> None:
    for wallet_id in _touched_wallet_ids(transaction):
        if wallet_id in balances:
            balances[wallet_id] += effective_amount(transaction, wallet_id)


def reconstruct_wallet_balances(
    wallets: Iterable[Wallet],
    transactions: Iterable[Transaction],
    end_date: datetime | None = None,
    wallet_filter: WalletFilter = ALL_WALLETS,
) -> dict[str, Decimal]:
    """
    Balance of each wallet as of ``end_date``.

    Without an end date the stored balances are returned. Otherwise dated
    transactions up to and including ``end_date`` are replayed on top of
    initial balances. Wallets created after ``end_date`` are left out, as
    are wallets whose balance is not positive.
    """
    selected = filter_wallets(wallets, wallet_filter)
    if end_date is None:
        return {wallet.id: wallet.balance for wallet in selected}
    end_date = as_utc(end_date)

    balances = {
        wallet.id: wallet.initial_balance
        for wallet in selected
        if wallet.created_at is None or as_utc(wallet.created_at) <= end_date
    }
    relevant = sorted(
        (
            tx
            for tx in transactions
            if tx.transaction_date is not None and as_utc(tx.transaction_date) <= end_date
        ),
        key=_chronological_key,
    )
    for transaction in relevant:
        _apply(transaction, balances)

    return {wallet_id: balance for wallet_id, balance in balances.items() if balance > 0}


def reconstruct_portfolio_composition(
    wallets: Iterable[Wallet],
    transactions: Iterable[Transaction],
    end_date: datetime | None = None,
    wallet_filter: WalletFilter = ALL_WALLETS,
) -> dict[PhysicalForm, Decimal]:
    """Reconstructed physical balances grouped by physical form."""
    wallets = list(wallets)
    by_id = {wallet.id: wallet for wallet in wallets}
    composition: dict[PhysicalForm, Decimal] = {}
    for wallet_id, balance in reconstruct_wallet_balances(
        wallets, transactions, end_date, wallet_filter
    ).items():
        wallet = by_id[wallet_id]
        if wallet.is_physical:
            composition[wallet.physical_form] = composition.get(wallet.physical_form, ZERO) + balance
    return composition


def physical_total(wallets: Iterable[Wallet]) -> Decimal:
    return sum((wallet.balance for wallet in wallets if wallet.is_physical), ZERO)


def logical_total(wallets: Iterable[Wallet]) -> Decimal:
    return sum((wallet.balance for wallet in wallets if wallet.is_logical), ZERO)


def has_discrepancy(
    physical: Decimal,
    logical: Decimal,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> bool:
    return abs(physical - logical) > tolerance


def _split_totals(balances: dict[str, Decimal], wallets: dict[str, Wallet]) -> tuple[Decimal, Decimal]:
    physical = ZERO
    logical = ZERO
    for wallet_id, balance in balances.items():
        if wallets[wallet_id].is_physical:
            physical += balance
        else:
            logical += balance
    return physical, logical


def running_balances(
    wallets: Iterable[Wallet],
    transactions: Iterable[Transaction],
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> list[RunningBalance]:
    """
    Physical and logical totals after each transaction, newest first.

    Transactions are replayed oldest first from initial balances, ordered by
    transaction date with the creation time as fallback. Only the first
    transaction that opens a gap is flagged.
    """
    by_id = {wallet.id: wallet for wallet in wallets}
    balances = {wallet_id: wallet.initial_balance for wallet_id, wallet in by_id.items()}

    results: list[RunningBalance] = []
    flagged = False
    for transaction in sorted(transactions, key=_chronological_key):
        _apply(transaction, balances)
        physical, logical = _split_totals(balances, by_id)
        first = not flagged and has_discrepancy(physical, logical, tolerance)
        flagged = flagged or first
        results.append(
            RunningBalance(
                transaction=transaction,
                physical_balance_after=physical,
                logical_balance_after=logical,
                is_first_discrepancy=first,
            )
        )

    results.reverse()
    return results


def find_first_discrepancy(
    wallets: Iterable[Wallet],
    transactions: Iterable[Transaction],
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> str | None:
    for entry in running_balances(wallets, transactions, tolerance):
        if entry.is_first_discrepancy:
            return entry.transaction.id
    return None
