"""Currency metadata: display precision, symbol and category per code."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from profiteer.domain.errors import UnknownCurrency

STANDARD_DECIMAL_PLACES = 2
PRECIOUS_METAL_DECIMAL_PLACES = 3  # grams
CRYPTOCURRENCY_DECIMAL_PLACES = 8  # satoshi


class CurrencyCategory(str, Enum):
    STANDARD = "standard"
    PRECIOUS_METAL = "precious_metal"
    CRYPTOCURRENCY = "cryptocurrency"


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    symbol: str
    category: CurrencyCategory

    @property
    def quantum(self) -> Decimal:
        """Smallest displayable unit, usable with ``Decimal.quantize``."""
        return Decimal(1).scaleb(-self.decimal_places)


_STANDARD_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "NZD": "NZ$",
    "CHF": "CHF",
    "CNY": "CN¥",
    "HKD": "HK$",
    "SGD": "S$",
    "MYR": "RM",
    "THB": "฿",
    "PHP": "₱",
    "INR": "₹",
    "IDR": "Rp",
    "KRW": "₩",
    "VND": "₫",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "CLP": "CLP$",
    "ISK": "kr",
    "PYG": "₲",
    "UGX": "USh",
}

# Standard currencies that have no minor unit in everyday use.
_ZERO_DECIMAL_CODES = frozenset({"JPY", "IDR", "KRW", "VND", "CLP", "ISK", "PYG", "UGX"})

_PRECIOUS_METAL_SYMBOLS: dict[str, str] = {
    "GOLD": "Au",
    "SILVER": "Ag",
    "PLATINUM": "Pt",
    "PALLADIUM": "Pd",
}

_CRYPTOCURRENCY_SYMBOLS: dict[str, str] = {
    "BTC": "₿",
    "ETH": "Ξ",
    "ADA": "₳",
    "DOT": "DOT",
    "SOL": "◎",
    "MATIC": "MATIC",
}


def _build_registry() -> dict[str, CurrencyInfo]:
    registry: dict[str, CurrencyInfo] = {}
    for code, symbol in _STANDARD_SYMBOLS.items():
        places = 0 if code in _ZERO_DECIMAL_CODES else STANDARD_DECIMAL_PLACES
        registry[code] = CurrencyInfo(code, places, symbol, CurrencyCategory.STANDARD)
    for code, symbol in _PRECIOUS_METAL_SYMBOLS.items():
        registry[code] = CurrencyInfo(
            code, PRECIOUS_METAL_DECIMAL_PLACES, symbol, CurrencyCategory.PRECIOUS_METAL
        )
    for code, symbol in _CRYPTOCURRENCY_SYMBOLS.items():
        registry[code] = CurrencyInfo(
            code, CRYPTOCURRENCY_DECIMAL_PLACES, symbol, CurrencyCategory.CRYPTOCURRENCY
        )
    return registry


CURRENCIES: dict[str, CurrencyInfo] = _build_registry()


def normalize_currency(code: str) -> str:
    return code.strip().upper()


def is_known_currency(code: str) -> bool:
    return normalize_currency(code) in CURRENCIES


def currency_info(code: str) -> CurrencyInfo:
    normalized = normalize_currency(code)
    try:
        return CURRENCIES[normalized]
    except KeyError as exc:
        raise UnknownCurrency(code) from exc


def list_currencies(category: CurrencyCategory | None = None) -> list[CurrencyInfo]:
    infos = sorted(CURRENCIES.values(), key=lambda info: info.code)
    if category is None:
        return infos
    return [info for info in infos if info.category is category]


def quantize(amount: Decimal, code: str) -> Decimal:
    info = currency_info(code)
    return amount.quantize(info.quantum, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, code: str, show_symbol: bool = False) -> str:
    """
    Render ``amount`` with thousands separators at the precision of ``code``.

    ``format_amount(Decimal("1234.5"), "USD")`` gives ``"1,234.50"``; with
    ``show_symbol=True`` it gives ``"$ 1,234.50"``. Negative amounts keep the
    sign in front of the symbol.
    """
    info = currency_info(code)
    rounded = quantize(amount, code)
    body = f"{abs(rounded):,.{info.decimal_places}f}"
    sign = "-" if rounded < 0 else ""
    if show_symbol:
        return f"{sign}{info.symbol} {body}"
    return f"{sign}{body}"


def parse_amount(text: str) -> Decimal | None:
    cleaned = text.strip().replace(",", "")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


class PhysicalForm(str, Enum):
    """Asset class backing a physical wallet."""

    FIAT_CURRENCY = "FIAT_CURRENCY"
    CRYPTOCURRENCY = "CRYPTOCURRENCY"
    PRECIOUS_METALS = "PRECIOUS_METALS"
    STOCKS = "STOCKS"
    ETFS = "ETFS"
    BONDS = "BONDS"
    MUTUAL_FUNDS = "MUTUAL_FUNDS"
    REAL_ESTATE = "REAL_ESTATE"
    COMMODITIES = "COMMODITIES"
    CASH_EQUIVALENT = "CASH_EQUIVALENT"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return _FORM_DISPLAY_NAMES[self]

    @property
    def allowed_currencies(self) -> frozenset[str] | None:
        """``None`` means every currency is allowed."""
        return _FORM_CURRENCIES[self]

    def is_currency_allowed(self, code: str) -> bool:
        allowed = self.allowed_currencies
        return allowed is None or normalize_currency(code) in allowed


_MARKET_CURRENCIES = frozenset({"USD", "EUR", "GBP", "JPY", "CAD", "AUD"})
_CASH_CURRENCIES = _MARKET_CURRENCIES | {"IDR"}

_FORM_CURRENCIES: dict[PhysicalForm, frozenset[str] | None] = {
    PhysicalForm.FIAT_CURRENCY: _CASH_CURRENCIES,
    PhysicalForm.CRYPTOCURRENCY: frozenset(_CRYPTOCURRENCY_SYMBOLS),
    PhysicalForm.PRECIOUS_METALS: frozenset(_PRECIOUS_METAL_SYMBOLS),
    PhysicalForm.STOCKS: _MARKET_CURRENCIES,
    PhysicalForm.ETFS: _MARKET_CURRENCIES,
    PhysicalForm.BONDS: _MARKET_CURRENCIES,
    PhysicalForm.MUTUAL_FUNDS: _MARKET_CURRENCIES,
    PhysicalForm.REAL_ESTATE: _CASH_CURRENCIES,
    PhysicalForm.COMMODITIES: _MARKET_CURRENCIES,
    PhysicalForm.CASH_EQUIVALENT: _CASH_CURRENCIES,
    PhysicalForm.OTHER: None,
}

_FORM_DISPLAY_NAMES: dict[PhysicalForm, str] = {
    PhysicalForm.FIAT_CURRENCY: "Fiat Currency",
    PhysicalForm.CRYPTOCURRENCY: "Cryptocurrency",
    PhysicalForm.PRECIOUS_METALS: "Precious Metals",
    PhysicalForm.STOCKS: "Stocks",
    PhysicalForm.ETFS: "ETFs",
    PhysicalForm.BONDS: "Bonds",
    PhysicalForm.MUTUAL_FUNDS: "Mutual Funds",
    PhysicalForm.REAL_ESTATE: "Real Estate",
    PhysicalForm.COMMODITIES: "Commodities",
    PhysicalForm.CASH_EQUIVALENT: "Cash Equivalent",
    PhysicalForm.OTHER: "Other",
}


def default_physical_form(code: str) -> PhysicalForm:
    normalized = normalize_currency(code)
    if normalized in _CRYPTOCURRENCY_SYMBOLS:
        return PhysicalForm.CRYPTOCURRENCY
    if normalized in _PRECIOUS_METAL_SYMBOLS:
        return PhysicalForm.PRECIOUS_METALS
    return PhysicalForm.FIAT_CURRENCY


def compatible_physical_forms(code: str) -> list[PhysicalForm]:
    return [form for form in PhysicalForm if form.is_currency_allowed(code)]
