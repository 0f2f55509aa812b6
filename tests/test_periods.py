from datetime import date

import pytest

from profiteer.domain.periods import DEFAULT, SpecificPeriod, is_default, parse_period, serialize_period
from profiteer.models import CurrencyRate


def test_parse_period() -> None:
    assert parse_period(None) is DEFAULT
    assert parse_period("") is DEFAULT
    assert parse_period("default") is DEFAULT
    assert parse_period("2024-02") == SpecificPeriod("2024-02")


@pytest.mark.parametrize("value", ["2024-13", "2024-1", "24-01", "January"])
def test_invalid_period(value: str) -> None:
    with pytest.raises(ValueError):
        parse_period(value)


def test_specific_period_parts() -> None:
    period = SpecificPeriod.of(date(2025, 10, 3))
    assert str(period) == "2025-10"
    assert period.year == 2025
    assert period.month_number == 10
    assert not is_default(period)


def test_rate_month_round_trips_through_json() -> None:
    monthly = CurrencyRate(from_currency="EUR", to_currency="USD", rate="1.1", month="2024-03")
    default = CurrencyRate(from_currency="EUR", to_currency="USD", rate="1.1")
    assert monthly.month == SpecificPeriod("2024-03")
    assert default.month is DEFAULT
    assert monthly.model_dump(mode="json")["month"] == "2024-03"
    assert default.model_dump(mode="json")["month"] is None
    assert serialize_period(DEFAULT) is None


def test_trailing_newline_is_not_a_month() -> None:
    with pytest.raises(ValueError):
        SpecificPeriod("2024-01\n")
    assert parse_period(" 2024-01\n") == SpecificPeriod("2024-01")
