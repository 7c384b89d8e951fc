"""Dataclasses describing normalized FX provider payloads."""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

RATE_SCALE = Decimal("0.000001")


def _normalize_code(code: str) -> str:
    if code is None or not str(code).strip():
        raise ValueError("Currency code cannot be null or empty")
    normalized = str(code).strip().upper()
    if not normalized.isascii() or not normalized.isalpha():
        raise ValueError(f"Currency code must be ASCII letters: {code!r}")
    if len(normalized) != 3:
        raise ValueError(f"Currency code must be exactly 3 characters, got: {code!r}")
    return normalized


def _normalize_rate(value: Decimal | float | int | str) -> Decimal:
    if value is None:
        raise ValueError("Exchange rate cannot be null")
    try:
        rate = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Exchange rate is not numeric: {value!r}") from exc
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got: {value}")
    return rate.quantize(RATE_SCALE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Currency:
    """ISO 4217 currency identified by its three-letter code."""

    code: str
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", _normalize_code(self.code))
        name = (self.name or "").strip() or self.code
        object.__setattr__(self, "name", name)

    @classmethod
    def of(cls, value: Currency | str) -> Currency:
        """Coerce a code string into a Currency; pass Currency instances through."""

        if isinstance(value, Currency):
            return value
        return cls(code=value)

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"


@dataclass(frozen=True)
class ExchangeRate:
    """Rate converting one unit of `from_currency` into `to_currency` as of `date`."""

    date: date
    from_currency: Currency
    to_currency: Currency
    rate: Decimal
    today: InitVar[date | None] = None

    def __post_init__(self, today: date | None) -> None:
        if self.date is None:
            raise ValueError("Date cannot be null")
        if self.from_currency is None or self.to_currency is None:
            raise ValueError("Both currencies of an exchange rate are required")
        object.__setattr__(self, "from_currency", Currency.of(self.from_currency))
        object.__setattr__(self, "to_currency", Currency.of(self.to_currency))
        if self.from_currency == self.to_currency:
            raise ValueError(
                f"From and to currencies must be different, got: {self.from_currency.code}"
            )
        if today is not None and self.date > today:
            raise ValueError(f"Date cannot be in the future: {self.date}")
        object.__setattr__(self, "rate", _normalize_rate(self.rate))

    @property
    def pair(self) -> str:
        return f"{self.from_currency.code}->{self.to_currency.code}"

    def inverse(self) -> ExchangeRate:
        """Return the reciprocal rate for the opposite direction."""

        inverted = (Decimal("1") / self.rate).quantize(RATE_SCALE, rounding=ROUND_HALF_UP)
        return ExchangeRate(
            date=self.date,
            from_currency=self.to_currency,
            to_currency=self.from_currency,
            rate=inverted,
        )

    def __str__(self) -> str:
        return (
            f"1 {self.from_currency.code} = {self.rate} {self.to_currency.code} "
            f"(as of {self.date.isoformat()})"
        )
