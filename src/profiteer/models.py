from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    StrictStr,
    WithJsonSchema,
    computed_field,
    field_validator,
)

from profiteer.domain.currencies import PhysicalForm, normalize_currency
from profiteer.domain.periods import DEFAULT, Period, parse_period, serialize_period
from profiteer.domain.tags import normalize_tags

ZERO = Decimal("0")

PeriodField = Annotated[
    Period,
    PlainValidator(parse_period),
    PlainSerializer(serialize_period, return_type=str | None),
    WithJsonSchema({"type": ["string", "null"], "pattern": r"^\d{4}-(0[1-9]|1[0-2])$"}),
]


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class WalletType(str, Enum):
    PHYSICAL = "Physical"
    LOGICAL = "Logical"


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: TransactionType
    amount: Decimal
    title: str = ""
    wallet_id: str | None = None  # legacy single-wallet reference
    affected_wallet_ids: tuple[StrictStr, ...] = ()
    source_wallet_id: str | None = None
    destination_wallet_id: str | None = None
    tags: tuple[str, ...] = ()
    transaction_date: datetime | None = None
    created_at: datetime | None = None
    user_id: str = ""

    @field_validator("wallet_id", "source_wallet_id", "destination_wallet_id", mode="before")
    @classmethod
    def _empty_reference(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("affected_wallet_ids", mode="before")
    @classmethod
    def _drop_blank_ids(cls, value: object) -> object:
        # Ordered set: blank strings and repeats go, anything else is left to StrictStr.
        if not isinstance(value, (list, tuple)):
            return value
        ids: list[object] = []
        for item in value:
            if isinstance(item, str) and not item.strip():
                continue
            if item not in ids:
                ids.append(item)
        return tuple(ids)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> tuple[str, ...]:
        return tuple(normalize_tags(value))


class Wallet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    currency: str
    wallet_type: WalletType = WalletType.PHYSICAL
    physical_form: PhysicalForm = PhysicalForm.FIAT_CURRENCY
    balance: Decimal = ZERO
    initial_balance: Decimal = ZERO
    user_id: str = ""
    created_at: datetime | None = None

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return normalize_currency(value)

    @property
    def transaction_balance(self) -> Decimal:
        """Portion of the stored balance that came from transactions."""
        return self.balance - self.initial_balance

    @property
    def is_physical(self) -> bool:
        return self.wallet_type is WalletType.PHYSICAL

    @property
    def is_logical(self) -> bool:
        return self.wallet_type is WalletType.LOGICAL


class CurrencyRate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    from_currency: str
    to_currency: str
    rate: Decimal
    month: PeriodField = DEFAULT
    user_id: str = ""

    @field_validator("from_currency", "to_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return normalize_currency(value)


class RateSource(str, Enum):
    IDENTITY = "identity"
    MONTHLY = "monthly"
    DEFAULT = "default"
    INVERSE_MONTHLY = "inverse_monthly"
    INVERSE_DEFAULT = "inverse_default"


class ConversionFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    available: Literal[True] = True
    factor: Decimal
    source: RateSource
    rate: CurrencyRate | None = None  # row the factor came from, None for identity


class RateUnavailable(BaseModel):
    model_config = ConfigDict(frozen=True)

    available: Literal[False] = False
    from_currency: str
    to_currency: str
    period: PeriodField = DEFAULT


class WalletBalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    wallet_id: str
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @computed_field
    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class PeriodSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    income: Decimal
    expenses: Decimal
    net_change: Decimal
    transaction_count: int
    transfers_in: Decimal
    transfers_out: Decimal
    income_count: int
    expense_count: int
    incoming_transfer_count: int
    outgoing_transfer_count: int


class DailySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_count: int
    net_amount: Decimal


class WalletPosition(BaseModel):
    """One wallet's figures inside a portfolio, in a single currency."""

    model_config = ConfigDict(frozen=True)

    wallet_id: str
    currency: str
    income: Decimal
    expense: Decimal
    net: Decimal


class PortfolioSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: str
    total: Decimal = ZERO
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    per_wallet_native: dict[str, WalletPosition] = Field(default_factory=dict)
    per_wallet_converted: dict[str, WalletPosition] = Field(default_factory=dict)
    unresolved_wallet_ids: frozenset[str] = frozenset()
    invalid_wallet_ids: frozenset[str] = frozenset()
    errors: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def excluded_wallet_count(self) -> int:
        return len(self.unresolved_wallet_ids) + len(self.invalid_wallet_ids)


class RunningBalance(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    physical_balance_after: Decimal
    logical_balance_after: Decimal
    is_first_discrepancy: bool = False
