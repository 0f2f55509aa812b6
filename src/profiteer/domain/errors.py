"""Exceptions raised by the balance and conversion core.

    LedgerError
    +-- UnknownCurrency
    +-- InvalidTransaction
    |   +-- CorruptTransaction
    +-- RateUnavailableError

``RateUnavailable`` itself is a returned value (see ``profiteer.models``);
``RateUnavailableError`` is only raised by callers that need a hard failure.
"""


class LedgerError(Exception):
    """Base class for every error the core raises."""

    code: str = "LEDGER_ERROR"


class UnknownCurrency(LedgerError):
    code: str = "UNKNOWN_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Unknown currency code: '{currency}'")


class InvalidTransaction(LedgerError):
    """A transaction breaks the wallet attribution rules."""

    code: str = "INVALID_TRANSACTION"

    def __init__(self, reason: str, transaction_id: str | None = None):
        self.reason = reason
        self.transaction_id = transaction_id
        prefix = f"Transaction {transaction_id}: " if transaction_id else ""
        super().__init__(f"{prefix}{reason}")


class CorruptTransaction(InvalidTransaction):
    """
    A transaction that could never have passed the write path
    (negative amount, unknown type). Always fatal for the calculation.
    """

    code: str = "CORRUPT_TRANSACTION"


class RateUnavailableError(LedgerError):
    code: str = "RATE_UNAVAILABLE"

    def __init__(self, from_currency: str, to_currency: str, period: str | None = None):
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.period = period
        scope = f" for {period}" if period else ""
        super().__init__(f"No conversion rate from {from_currency} to {to_currency}{scope}")
