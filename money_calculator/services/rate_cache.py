"""Time-based caching decorator for exchange-rate lookups.

`CachedRateProvider` wraps any `BaseRateProvider` and memoizes the rates it
returns, keyed by the directional currency pair (``"USD->EUR"``). An entry is
served until it expires, which happens when either

* the configured validity duration has elapsed since it was stored, or
* the calendar date of the cache clock has moved past the date it was stored.

Expired entries are never served. A lookup that finds one fetches a fresh
rate; if that fetch fails the error reaches the caller untouched and the old
entry stays where it is until a later fetch succeeds, a sweep removes it, or
the cache is invalidated.

The cache spawns no threads. Periodic sweeping is the owner's job (see
`money_calculator.services.scheduler`).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from time import perf_counter
from typing import Any

from money_calculator.logging import cache_log_extra
from money_calculator.providers.base import BaseRateProvider
from money_calculator.providers.schemas import Currency, ExchangeRate
from money_calculator.utils.datetime import Clock, utc_now

logger = logging.getLogger(__name__)

_silent_logger = logging.getLogger(f"{__name__}.silent")
_silent_logger.addHandler(logging.NullHandler())
_silent_logger.propagate = False

DEFAULT_VALIDITY_MINUTES = 30

CACHE_EXT_KEY = "rate_cache"


class CacheConfigurationError(ValueError):
    """Raised when a rate cache is constructed with invalid arguments."""


def pair_key(from_currency: Currency | str, to_currency: Currency | str) -> str:
    """Render the directional cache key for a currency pair."""

    return f"{_code(from_currency)}->{_code(to_currency)}"


def _code(value: Currency | str) -> str:
    code = getattr(value, "code", value)
    return str(code).strip().upper()


@dataclass(frozen=True)
class CacheEntry:
    """A fetched rate together with the moment it was stored and when it expires."""

    rate: ExchangeRate
    stored_at: datetime
    expires_at: datetime
    stored_on: date

    @classmethod
    def create(cls, rate: ExchangeRate, stored_at: datetime, validity: timedelta) -> CacheEntry:
        if rate is None:
            raise ValueError("Cannot cache an absent rate")
        if validity < timedelta(0):
            raise ValueError("Cache validity must be non-negative")
        return cls(
            rate=rate,
            stored_at=stored_at,
            expires_at=stored_at + validity,
            stored_on=stored_at.date(),
        )

    @property
    def stored_at_millis(self) -> int:
        return int(self.stored_at.timestamp() * 1000)

    @property
    def expiration_millis(self) -> int:
        return int(self.expires_at.timestamp() * 1000)

    def is_duration_expired(self, now: datetime) -> bool:
        """True once `now` reaches the expiration instant."""

        return now >= self.expires_at

    def is_date_rolled_over(self, now: datetime) -> bool:
        """True once the calendar date of `now` is after the storage date."""

        if now.tzinfo is not None and self.stored_at.tzinfo is not None:
            now = now.astimezone(self.stored_at.tzinfo)
        return now.date() > self.stored_on

    def is_expired(self, now: datetime) -> bool:
        return self.is_duration_expired(now) or self.is_date_rolled_over(now)


@dataclass(frozen=True)
class CacheStats:
    """Read-only snapshot of the cache's state."""

    size: int
    validity_minutes: int

    def describe(self) -> str:
        return f"Cache size: {self.size} entries, Validity: {self.validity_minutes} minutes"


class CachedRateProvider(BaseRateProvider):
    """Rate provider decorator that memoizes rates per currency pair."""

    def __init__(
        self,
        provider: BaseRateProvider,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        *,
        clock: Clock = utc_now,
        logger: logging.Logger | None = None,
    ) -> None:
        if provider is None:
            raise CacheConfigurationError("Delegate provider cannot be null")
        if not callable(getattr(provider, "get_rate", None)):
            raise CacheConfigurationError("Delegate provider must implement get_rate")
        if isinstance(validity_minutes, bool) or not isinstance(validity_minutes, int):
            raise CacheConfigurationError(
                f"Cache validity must be a whole number of minutes, got: {validity_minutes!r}"
            )
        if validity_minutes < 0:
            raise CacheConfigurationError("Cache validity must be non-negative")
        if clock is None or not callable(clock):
            raise CacheConfigurationError("Cache clock must be callable")

        self._provider = provider
        self._validity_minutes = validity_minutes
        self._validity = timedelta(minutes=validity_minutes)
        self._clock = clock
        self._logger = logger if logger is not None else _silent_logger
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"cached:{getattr(self._provider, 'name', self._provider.__class__.__name__)}"

    @property
    def provider(self) -> BaseRateProvider:
        return self._provider

    @property
    def validity_minutes(self) -> int:
        return self._validity_minutes

    def get_rate(self, from_currency: Currency | str, to_currency: Currency | str) -> ExchangeRate:
        """Return the cached rate for the pair, fetching a fresh one on a miss."""

        if from_currency is None or to_currency is None:
            raise ValueError("Both currencies are required for a rate lookup")

        key = pair_key(from_currency, to_currency)
        with self._lock:
            entry = self._entries.get(key)

        if entry is not None and not entry.is_expired(self._clock()):
            self._logger.debug(
                "Cache HIT for %s",
                key,
                extra=cache_log_extra(event="cache.hit", pair=key, status="hit"),
            )
            return entry.rate

        reason = "absent" if entry is None else "expired"
        self._logger.info(
            "Cache MISS for %s (%s) - fetching from provider",
            key,
            reason,
            extra=cache_log_extra(event="cache.miss", pair=key, status=reason),
        )

        start = perf_counter()
        try:
            rate = self._provider.get_rate(from_currency, to_currency)
        except Exception as exc:
            self._logger.warning(
                "Rate fetch for %s failed: %s",
                key,
                exc,
                extra=cache_log_extra(
                    event="cache.fetch_failed",
                    pair=key,
                    status="error",
                    duration_ms=(perf_counter() - start) * 1000,
                    provider=self._provider_name(),
                    error=str(exc),
                ),
            )
            raise

        fresh = CacheEntry.create(rate, self._clock(), self._validity)
        with self._lock:
            self._entries[key] = fresh

        self._logger.debug(
            "Cached rate for %s until %s",
            key,
            fresh.expires_at.isoformat(),
            extra=cache_log_extra(
                event="cache.store",
                pair=key,
                status="stored",
                duration_ms=(perf_counter() - start) * 1000,
                provider=self._provider_name(),
            ),
        )
        return rate

    def invalidate_all(self) -> None:
        """Drop every cached entry."""

        with self._lock:
            cleared = len(self._entries)
            self._entries.clear()
        self._logger.info("Cache cleared (%s entries)", cleared, extra={"event": "cache.clear"})

    def sweep_expired(self) -> int:
        """Remove expired entries and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            self._logger.info(
                "Cleaned %s expired cache entries",
                len(expired),
                extra={"event": "cache.sweep", "removed": len(expired)},
            )
        return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            size = len(self._entries)
        return CacheStats(size=size, validity_minutes=self._validity_minutes)

    def peek(self, from_currency: Currency | str, to_currency: Currency | str) -> CacheEntry | None:
        """Return the stored entry for the pair, expired or not, without fetching."""

        with self._lock:
            return self._entries.get(pair_key(from_currency, to_currency))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, pair: Any) -> bool:
        try:
            from_currency, to_currency = pair
        except (TypeError, ValueError):
            return False
        with self._lock:
            return pair_key(from_currency, to_currency) in self._entries

    def _provider_name(self) -> str:
        return getattr(self._provider, "name", self._provider.__class__.__name__)


def init_rate_cache(app) -> CachedRateProvider:
    """Wrap the app's configured rate provider in a `CachedRateProvider`."""

    from money_calculator.providers.registry import get_provider
    from money_calculator.utils.datetime import zone_clock

    provider = app.extensions.get("rate_provider")
    if provider is None:
        with app.app_context():
            provider = get_provider(app.config.get("FX_RATE_PROVIDER"))
        app.extensions["rate_provider"] = provider

    validity = int(app.config.get("RATE_CACHE_VALIDITY_MINUTES", DEFAULT_VALIDITY_MINUTES))
    clock = zone_clock(app.config.get("RATE_CACHE_TIMEZONE", "UTC"))

    cache = CachedRateProvider(provider, validity, clock=clock, logger=logger)
    app.extensions[CACHE_EXT_KEY] = cache
    logger.info("Rate cache initialised as %s (%s minutes validity)", cache.name, validity)
    return cache
