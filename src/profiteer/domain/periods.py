from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Union

_MONTH_PATTERN = re.compile(r"(\d{4})-(0[1-9]|1[0-2])")


class DefaultPeriod(Enum):
    """The permanent slot a rate falls back to when no month matches."""

    DEFAULT = "default"

    def __str__(self) -> str:
        return "default"


DEFAULT = DefaultPeriod.DEFAULT


@dataclass(frozen=True)
class SpecificPeriod:
    """A single calendar month in ``YYYY-MM`` form."""

    month: str

    def __post_init__(self) -> None:
        if not _MONTH_PATTERN.fullmatch(self.month):
            raise ValueError(f"Period must be in YYYY-MM format, got '{self.month}'.")

    @classmethod
    def of(cls, value: date) -> SpecificPeriod:
        return cls(f"{value.year:04d}-{value.month:02d}")

    @property
    def year(self) -> int:
        return int(self.month[:4])

    @property
    def month_number(self) -> int:
        return int(self.month[5:])

    def __str__(self) -> str:
        return self.month


Period = Union[SpecificPeriod, DefaultPeriod]


def parse_period(value: Period | str | None) -> Period:
    if value is None or isinstance(value, (SpecificPeriod, DefaultPeriod)):
        return DEFAULT if value is None else value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported period value: {value!r}")
    cleaned = value.strip()
    if not cleaned or cleaned.lower() == "default":
        return DEFAULT
    return SpecificPeriod(cleaned)


def serialize_period(value: Period) -> str | None:
    if isinstance(value, SpecificPeriod):
        return value.month
    return None


def is_default(value: Period) -> bool:
    return value is DEFAULT
