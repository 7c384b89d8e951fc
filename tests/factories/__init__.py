"""Stub providers, clocks and builders shared by the test suite."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

from money_calculator.providers import BaseRateProvider, Currency, ExchangeRate, ProviderError

RateQueueItem = Decimal | str | float | Exception


@dataclass(slots=True)
class ProviderCall:
    """Record of a provider interaction captured for assertions."""

    from_code: str
    to_code: str


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 10, 16, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


class ScriptedRateProvider(BaseRateProvider):
    """Provider answering from per-pair scripts, falling back to a fixed table.

    Each call for a scripted pair pops the next item; exceptions in the script
    are raised instead of returned.
    """

    def __init__(
        self,
        name: str = "scripted",
        *,
        rates: Mapping[tuple[str, str], RateQueueItem] | None = None,
        scripts: Mapping[tuple[str, str], Iterable[RateQueueItem]] | None = None,
        as_of: date = date(2025, 10, 16),
    ) -> None:
        self.name = name
        self._rates = dict(rates or {})
        self._scripts = {pair: deque(items) for pair, items in (scripts or {}).items()}
        self._as_of = as_of
        self._lock = threading.Lock()
        self.calls: list[ProviderCall] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def calls_for(self, from_code: str, to_code: str) -> int:
        return sum(1 for call in self.calls if (call.from_code, call.to_code) == (from_code, to_code))

    def push(self, from_code: str, to_code: str, *items: RateQueueItem) -> None:
        with self._lock:
            self._scripts.setdefault((from_code, to_code), deque()).extend(items)

    def get_rate(self, from_currency, to_currency) -> ExchangeRate:
        source = Currency.of(from_currency)
        target = Currency.of(to_currency)
        pair = (source.code, target.code)
        with self._lock:
            self.calls.append(ProviderCall(from_code=source.code, to_code=target.code))
            script = self._scripts.get(pair)
            if script:
                item = script.popleft()
            elif pair in self._rates:
                item = self._rates[pair]
            else:
                raise ProviderError(f"{self.name} has no rate for {source.code}->{target.code}")
        if isinstance(item, Exception):
            raise item
        return make_rate(source.code, target.code, item, as_of=self._as_of)


def make_rate(
    from_code: str = "USD",
    to_code: str = "EUR",
    rate: RateQueueItem = "0.90",
    *,
    as_of: date = date(2025, 10, 16),
) -> ExchangeRate:
    return ExchangeRate(
        date=as_of,
        from_currency=Currency(from_code),
        to_currency=Currency(to_code),
        rate=Decimal(str(rate)),
    )
