from collections.abc import Iterable
from decimal import Decimal

from profiteer.domain.balances import calculate_wallet_balance
from profiteer.domain.currencies import currency_info
from profiteer.domain.errors import CorruptTransaction, InvalidTransaction, UnknownCurrency
from profiteer.domain.periods import DEFAULT, Period, parse_period
from profiteer.domain.rates import resolve_conversion_factor, usable_rates
from profiteer.logger import get_logger
from profiteer.models import (
    ZERO,
    CurrencyRate,
    PortfolioSummary,
    RateUnavailable,
    Transaction,
    Wallet,
    WalletPosition,
)

logger = get_logger(__name__)


class PortfolioAggregator:
    """
    Sums native wallet balances into one total in the user's default currency.

    A wallet that cannot be converted is reported, never counted as zero.
    Attribution or currency problems are confined to the wallet they occur in;
    corrupt transactions abort the whole aggregation.
    """

    def __init__(self, include_initial_balance: bool = False) -> None:
        self.include_initial_balance = include_initial_balance

    def _native_position(self, wallet: Wallet, transactions: list[Transaction]) -> WalletPosition:
        currency_info(wallet.currency)
        balance = calculate_wallet_balance(wallet.id, transactions)
        net = balance.net
        if self.include_initial_balance:
            net += wallet.initial_balance
        return WalletPosition(
            wallet_id=wallet.id,
            currency=wallet.currency,
            income=balance.income,
            expense=balance.expense,
            net=net,
        )

    def aggregate(
        self,
        default_currency: str,
        wallets: Iterable[Wallet],
        transactions: Iterable[Transaction],
        rates: Iterable[CurrencyRate],
        period: Period | str | None = DEFAULT,
    ) -> PortfolioSummary:
        target = currency_info(default_currency).code
        resolved_period = parse_period(period)
        transactions = list(transactions)
        rates = usable_rates(rates)

        total = ZERO
        total_income = ZERO
        total_expense = ZERO
        native: dict[str, WalletPosition] = {}
        converted: dict[str, WalletPosition] = {}
        unresolved: set[str] = set()
        invalid: set[str] = set()
        errors: dict[str, str] = {}

        for wallet in wallets:
            try:
                position = self._native_position(wallet, transactions)
            except CorruptTransaction:
                raise
            except (InvalidTransaction, UnknownCurrency) as exc:
                logger.warning("[PORTFOLIO] Wallet %s excluded: %s", wallet.id, exc)
                invalid.add(wallet.id)
                errors[wallet.id] = str(exc)
                continue
            native[wallet.id] = position

            resolved = resolve_conversion_factor(rates, wallet.currency, target, resolved_period)
            if isinstance(resolved, RateUnavailable):
                logger.debug(
                    "[PORTFOLIO] No rate %s->%s for %s, wallet %s left out of total.",
                    wallet.currency,
                    target,
                    resolved_period,
                    wallet.id,
                )
                unresolved.add(wallet.id)
                continue

            factor: Decimal = resolved.factor
            converted_position = WalletPosition(
                wallet_id=wallet.id,
                currency=target,
                income=position.income * factor,
                expense=position.expense * factor,
                net=position.net * factor,
            )
            converted[wallet.id] = converted_position
            total += converted_position.net
            total_income += converted_position.income
            total_expense += converted_position.expense

        logger.debug(
            "[PORTFOLIO] Aggregated %s wallets into %s (%s unresolved, %s invalid).",
            len(native) + len(invalid),
            target,
            len(unresolved),
            len(invalid),
        )
        return PortfolioSummary(
            currency=target,
            total=total,
            total_income=total_income,
            total_expense=total_expense,
            per_wallet_native=native,
            per_wallet_converted=converted,
            unresolved_wallet_ids=frozenset(unresolved),
            invalid_wallet_ids=frozenset(invalid),
            errors=errors,
        )


def aggregate_portfolio(
    default_currency: str,
    wallets: Iterable[Wallet],
    transactions: Iterable[Transaction],
    rates: Iterable[CurrencyRate],
    period: Period | str | None = DEFAULT,
    *,
    include_initial_balance: bool = False,
) -> PortfolioSummary:
    aggregator = PortfolioAggregator(include_initial_balance=include_initial_balance)
    return aggregator.aggregate(default_currency, wallets, transactions, rates, period)
