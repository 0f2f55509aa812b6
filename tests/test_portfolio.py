from decimal import Decimal

import pytest

from profiteer.domain.errors import CorruptTransaction, UnknownCurrency
from profiteer.models import CurrencyRate, Transaction, TransactionType, Wallet
from profiteer.services.portfolio import PortfolioAggregator, aggregate_portfolio


@pytest.fixture
def wallets() -> list[Wallet]:
    return [
        Wallet(id="usd", name="Checking", currency="USD", initial_balance=Decimal("10")),
        Wallet(id="eur", name="Savings", currency="EUR"),
        Wallet(id="gbp", name="Travel", currency="GBP"),
    ]


@pytest.fixture
def transactions() -> list[Transaction]:
    return [
        Transaction(id="t1", type=TransactionType.INCOME, amount=Decimal("100"), affected_wallet_ids=["usd"]),
        Transaction(id="t2", type=TransactionType.EXPENSE, amount=Decimal("40"), affected_wallet_ids=["usd"]),
        Transaction(id="t3", type=TransactionType.INCOME, amount=Decimal("200"), affected_wallet_ids=["eur"]),
        Transaction(id="t4", type=TransactionType.EXPENSE, amount=Decimal("50"), affected_wallet_ids=["eur"]),
        Transaction(id="t5", type=TransactionType.INCOME, amount=Decimal("30"), affected_wallet_ids=["gbp"]),
    ]


@pytest.fixture
def rates() -> list[CurrencyRate]:
    return [
        CurrencyRate(from_currency="EUR", to_currency="USD", rate=Decimal("1.10")),
        CurrencyRate(from_currency="EUR", to_currency="USD", rate=Decimal("1.20"), month="2024-05"),
    ]


def test_one_unresolved_wallet_is_excluded() -> None:
    wallets = [Wallet(id="a", currency="USD"), Wallet(id="b", currency="JPY")]
    transactions = [
        Transaction(id="t1", type=TransactionType.INCOME, amount=Decimal("500"), affected_wallet_ids=["a"]),
        Transaction(id="t2", type=TransactionType.INCOME, amount=Decimal("9000"), affected_wallet_ids=["b"]),
    ]
    summary = aggregate_portfolio("USD", wallets, transactions, [])
    assert summary.total == Decimal("500")
    assert summary.unresolved_wallet_ids == frozenset({"b"})
    assert summary.per_wallet_native["b"].net == Decimal("9000")
    assert "b" not in summary.per_wallet_converted
    assert summary.excluded_wallet_count == 1


def test_income_and_expense_converted_independently(
    wallets: list[Wallet], transactions: list[Transaction], rates: list[CurrencyRate]
) -> None:
    summary = aggregate_portfolio("USD", wallets, transactions, rates)
    assert summary.currency == "USD"
    assert summary.per_wallet_converted["eur"].income == Decimal("220.00")
    assert summary.per_wallet_converted["eur"].expense == Decimal("55.00")
    assert summary.total_income == Decimal("320.00")
    assert summary.total_expense == Decimal("95.00")
    assert summary.total == Decimal("225.00")
    assert summary.unresolved_wallet_ids == frozenset({"gbp"})


def test_period_selects_monthly_rate(
    wallets: list[Wallet], transactions: list[Transaction], rates: list[CurrencyRate]
) -> None:
    summary = aggregate_portfolio("USD", wallets, transactions, rates, period="2024-05")
    assert summary.per_wallet_converted["eur"].net == Decimal("180.00")


def test_inverse_rate_to_other_default_currency(
    wallets: list[Wallet], transactions: list[Transaction], rates: list[CurrencyRate]
) -> None:
    summary = aggregate_portfolio("eur", wallets[:2], transactions, rates)
    assert summary.currency == "EUR"
    assert summary.per_wallet_converted["eur"].net == Decimal("150")
    assert summary.per_wallet_converted["usd"].net == Decimal("60") * (Decimal("1") / Decimal("1.10"))


def test_include_initial_balance(wallets: list[Wallet], transactions: list[Transaction]) -> None:
    aggregator = PortfolioAggregator(include_initial_balance=True)
    summary = aggregator.aggregate("USD", wallets[:1], transactions, [])
    assert summary.per_wallet_native["usd"].net == Decimal("70")
    assert summary.total == Decimal("70")


def test_invalid_wallet_does_not_abort(wallets: list[Wallet], transactions: list[Transaction]) -> None:
    loop = Transaction(
        id="loop",
        type=TransactionType.TRANSFER,
        amount=Decimal("5"),
        source_wallet_id="gbp",
        destination_wallet_id="gbp",
    )
    bogus = Wallet.model_construct(id="bogus", currency="XYZ", initial_balance=Decimal("0"))
    summary = aggregate_portfolio(
        "GBP", wallets[2:] + [wallets[0], bogus], transactions + [loop], []
    )
    assert summary.invalid_wallet_ids == frozenset({"gbp", "bogus"})
    assert "loop" in summary.errors["gbp"]
    assert summary.unresolved_wallet_ids == frozenset({"usd"})
    assert summary.total == Decimal("0")


def test_corrupt_transaction_aborts(wallets: list[Wallet]) -> None:
    corrupt = Transaction.model_construct(
        id="neg", type=TransactionType.INCOME, amount=Decimal("-1"), affected_wallet_ids=("usd",)
    )
    with pytest.raises(CorruptTransaction):
        aggregate_portfolio("USD", wallets, [corrupt], [])


def test_unknown_default_currency(wallets: list[Wallet]) -> None:
    with pytest.raises(UnknownCurrency):
        aggregate_portfolio("ZZZ", wallets, [], [])


def test_empty_portfolio() -> None:
    summary = aggregate_portfolio("USD", [], [], [])
    assert summary.total == Decimal("0")
    assert summary.per_wallet_native == {}
