from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Union

from profiteer.models import Transaction, Wallet


class AllTime(Enum):
    ALL_TIME = "all_time"

    def date_range(self) -> tuple[date | None, date | None]:
        return None, None

    def display_text(self) -> str:
        return "All Time"


ALL_TIME = AllTime.ALL_TIME


@dataclass(frozen=True)
class MonthFilter:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}.")

    def date_range(self) -> tuple[date, date]:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, 1), date(self.year, self.month, last_day)

    def display_text(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"


@dataclass(frozen=True)
class YearFilter:
    year: int

    def date_range(self) -> tuple[date, date]:
        return date(self.year, 1, 1), date(self.year, 12, 31)

    def display_text(self) -> str:
        return str(self.year)


DateFilter = Union[AllTime, MonthFilter, YearFilter]


def is_in_range(transaction: Transaction, start: date | None, end: date | None) -> bool:
    """Inclusive on both ends; undated transactions never match."""
    if transaction.transaction_date is None:
        return False
    day = transaction.transaction_date.date()
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def filter_by_date(transactions: Iterable[Transaction], date_filter: DateFilter) -> list[Transaction]:
    start, end = date_filter.date_range()
    return [tx for tx in transactions if is_in_range(tx, start, end)]


class AllWallets(Enum):
    ALL_WALLETS = "all_wallets"

    def display_text(self) -> str:
        return "All Wallets"


ALL_WALLETS = AllWallets.ALL_WALLETS


@dataclass(frozen=True)
class SpecificWallet:
    wallet_id: str
    wallet_name: str

    def __post_init__(self) -> None:
        if not self.wallet_id.strip():
            raise ValueError("wallet_id must not be blank")
        if not self.wallet_name.strip():
            raise ValueError("wallet_name must not be blank")

    def display_text(self) -> str:
        return self.wallet_name


WalletFilter = Union[AllWallets, SpecificWallet]


def filter_transactions_by_wallet(
    transactions: Iterable[Transaction],
    wallet_filter: WalletFilter,
) -> list[Transaction]:
    if isinstance(wallet_filter, AllWallets):
        return list(transactions)
    return [tx for tx in transactions if wallet_filter.wallet_id in tx.affected_wallet_ids]


def filter_wallets(wallets: Iterable[Wallet], wallet_filter: WalletFilter) -> list[Wallet]:
    if isinstance(wallet_filter, AllWallets):
        return list(wallets)
    return [wallet for wallet in wallets if wallet.id == wallet_filter.wallet_id]
