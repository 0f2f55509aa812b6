from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from profiteer.domain import balances, rates, reconstruction
from profiteer.domain.currencies import currency_info
from profiteer.domain.filters import ALL_WALLETS, WalletFilter
from profiteer.domain.periods import DEFAULT, Period
from profiteer.logger import get_logger
from profiteer.models import (
    ConversionFactor,
    CurrencyRate,
    PeriodSummary,
    PortfolioSummary,
    RateUnavailable,
    RunningBalance,
    Transaction,
    Wallet,
    WalletBalance,
)
from profiteer.services.portfolio import PortfolioAggregator

logger = get_logger(__name__)


class LedgerEngine:
    """
    Entry point for balance, conversion and portfolio calculations.

    Holds the user-level defaults (target currency, discrepancy tolerance)
    so callers only pass the snapshot they want evaluated.
    """

    def __init__(
        self,
        default_currency: str = "USD",
        tolerance: Decimal = reconstruction.DEFAULT_TOLERANCE,
        include_initial_balance: bool = False,
    ) -> None:
        self.default_currency = currency_info(default_currency).code
        self.tolerance = tolerance
        self.aggregator = PortfolioAggregator(include_initial_balance=include_initial_balance)
        logger.info(
            "Ledger engine ready: default_currency=%s, tolerance=%s, include_initial_balance=%s",
            self.default_currency,
            self.tolerance,
            include_initial_balance,
        )

    def calculate_wallet_balance(
        self, wallet_id: str, transactions: Iterable[Transaction]
    ) -> WalletBalance:
        return balances.calculate_wallet_balance(wallet_id, transactions)

    def period_summary(self, wallet_id: str, transactions: Iterable[Transaction]) -> PeriodSummary:
        return balances.calculate_period_summary(transactions, wallet_id)

    def resolve_conversion_factor(
        self,
        rate_table: Iterable[CurrencyRate],
        from_currency: str,
        to_currency: str | None = None,
        period: Period | str | None = DEFAULT,
    ) -> ConversionFactor | RateUnavailable:
        return rates.resolve_conversion_factor(
            rate_table, from_currency, to_currency or self.default_currency, period
        )

    def aggregate_portfolio(
        self,
        wallets: Iterable[Wallet],
        transactions: Iterable[Transaction],
        rate_table: Iterable[CurrencyRate],
        default_currency: str | None = None,
        period: Period | str | None = DEFAULT,
    ) -> PortfolioSummary:
        return self.aggregator.aggregate(
            default_currency or self.default_currency,
            wallets,
            transactions,
            rate_table,
            period,
        )

    def running_balances(
        self, wallets: Iterable[Wallet], transactions: Iterable[Transaction]
    ) -> list[RunningBalance]:
        return reconstruction.running_balances(wallets, transactions, self.tolerance)

    def has_discrepancy(self, wallets: Iterable[Wallet]) -> bool:
        wallets = list(wallets)
        return reconstruction.has_discrepancy(
            reconstruction.physical_total(wallets),
            reconstruction.logical_total(wallets),
            self.tolerance,
        )

    def reconstruct_balances(
        self,
        wallets: Iterable[Wallet],
        transactions: Iterable[Transaction],
        end_date: datetime | None = None,
        wallet_filter: WalletFilter = ALL_WALLETS,
    ) -> dict[str, Decimal]:
        return reconstruction.reconstruct_wallet_balances(
            wallets, transactions, end_date, wallet_filter
        )
