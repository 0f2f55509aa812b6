"""
Conversion-factor resolution over a user's stored rate table.

Lookup order, first match wins:

1. identical currencies resolve to ``1``;
2. the rate stored for the requested month;
3. the default (month-less) rate;
4. the same two lookups for the reversed pair, inverted;
5. otherwise ``RateUnavailable``.

Rates are never chained through a third currency, even when both legs
exist. Rows with a non-positive rate are ignored.
"""

from collections.abc import Iterable
from decimal import Decimal

from profiteer.domain.currencies import normalize_currency
from profiteer.domain.errors import RateUnavailableError
from profiteer.domain.periods import DEFAULT, Period, SpecificPeriod, parse_period, serialize_period
from profiteer.models import ConversionFactor, CurrencyRate, RateSource, RateUnavailable

ONE = Decimal("1")


def _find_rate(
    rates: list[CurrencyRate],
    from_currency: str,
    to_currency: str,
    month: Period,
) -> CurrencyRate | None:
    for rate in rates:
        if (
            rate.from_currency == from_currency
            and rate.to_currency == to_currency
            and rate.month == month
        ):
            return rate
    return None


def _lookup_direct(
    rates: list[CurrencyRate],
    from_currency: str,
    to_currency: str,
    period: Period,
) -> tuple[CurrencyRate, bool] | None:
    """Return the matching row and whether it is the month-specific one."""
    if isinstance(period, SpecificPeriod):
        monthly = _find_rate(rates, from_currency, to_currency, period)
        if monthly is not None:
            return monthly, True
    default = _find_rate(rates, from_currency, to_currency, DEFAULT)
    if default is not None:
        return default, False
    return None


def usable_rates(rates: Iterable[CurrencyRate]) -> list[CurrencyRate]:
    return [rate for rate in rates if rate.rate > 0]


def resolve_conversion_factor(
    rates: Iterable[CurrencyRate],
    from_currency: str,
    to_currency: str,
    period: Period | str | None = DEFAULT,
) -> ConversionFactor | RateUnavailable:
    source = normalize_currency(from_currency)
    target = normalize_currency(to_currency)
    resolved_period = parse_period(period)

    if source == target:
        return ConversionFactor(factor=ONE, source=RateSource.IDENTITY)

    candidates = usable_rates(rates)

    direct = _lookup_direct(candidates, source, target, resolved_period)
    if direct is not None:
        row, monthly = direct
        return ConversionFactor(
            factor=row.rate,
            source=RateSource.MONTHLY if monthly else RateSource.DEFAULT,
            rate=row,
        )

    inverse = _lookup_direct(candidates, target, source, resolved_period)
    if inverse is not None:
        row, monthly = inverse
        return ConversionFactor(
            factor=ONE / row.rate,
            source=RateSource.INVERSE_MONTHLY if monthly else RateSource.INVERSE_DEFAULT,
            rate=row,
        )

    return RateUnavailable(from_currency=source, to_currency=target, period=resolved_period)


def convert_amount(
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    rates: Iterable[CurrencyRate],
    period: Period | str | None = DEFAULT,
) -> Decimal:
    """Convert ``amount`` or raise ``RateUnavailableError`` when no rate resolves."""
    resolved = resolve_conversion_factor(rates, from_currency, to_currency, period)
    if isinstance(resolved, RateUnavailable):
        raise RateUnavailableError(
            resolved.from_currency,
            resolved.to_currency,
            serialize_period(resolved.period),
        )
    return amount * resolved.factor
