from decimal import Decimal

from pydantic import BaseModel, Field

from profiteer.domain.currencies import CurrencyCategory, CurrencyInfo
from profiteer.domain.periods import DEFAULT
from profiteer.models import CurrencyRate, PeriodField, RunningBalance, Transaction, Wallet


class TransactionSnapshot(BaseModel):
    transactions: list[Transaction] = Field(default_factory=list)


class RateResolveRequest(BaseModel):
    from_currency: str
    to_currency: str
    period: PeriodField = DEFAULT
    rates: list[CurrencyRate] = Field(default_factory=list)


class PortfolioRequest(BaseModel):
    default_currency: str | None = None
    period: PeriodField = DEFAULT
    wallets: list[Wallet] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    rates: list[CurrencyRate] = Field(default_factory=list)


class DiscrepancyRequest(BaseModel):
    wallets: list[Wallet] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)


class DiscrepancyReport(BaseModel):
    physical_total: Decimal
    logical_total: Decimal
    has_discrepancy: bool
    first_discrepancy_id: str | None = None
    running_balances: list[RunningBalance] = Field(default_factory=list)


class CurrencyResponse(BaseModel):
    code: str
    decimal_places: int
    symbol: str
    category: CurrencyCategory

    @classmethod
    def from_info(cls, info: CurrencyInfo) -> "CurrencyResponse":
        return cls(
            code=info.code,
            decimal_places=info.decimal_places,
            symbol=info.symbol,
            category=info.category,
        )
