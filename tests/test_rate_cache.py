from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from money_calculator.providers import Currency, ProviderError
from money_calculator.services.rate_cache import (
    DEFAULT_VALIDITY_MINUTES,
    CacheConfigurationError,
    CachedRateProvider,
    CacheStats,
    pair_key,
)
from tests.factories import FakeClock, ScriptedRateProvider


@pytest.fixture()
def provider() -> ScriptedRateProvider:
    return ScriptedRateProvider(
        rates={
            ("USD", "EUR"): "0.90",
            ("EUR", "USD"): "1.11",
            ("USD", "GBP"): "0.78",
            ("GBP", "JPY"): "190.5",
        }
    )


@pytest.fixture()
def cache(provider, clock) -> CachedRateProvider:
    return CachedRateProvider(provider, 30, clock=clock)


def test_default_validity_is_thirty_minutes(provider):
    cache = CachedRateProvider(provider)
    assert cache.validity_minutes == DEFAULT_VALIDITY_MINUTES == 30


def test_rejects_missing_provider():
    with pytest.raises(CacheConfigurationError):
        CachedRateProvider(None)  # type: ignore[arg-type]


def test_rejects_negative_validity(provider):
    with pytest.raises(CacheConfigurationError):
        CachedRateProvider(provider, -1)


def test_rejects_non_integer_validity(provider):
    with pytest.raises(CacheConfigurationError):
        CachedRateProvider(provider, 1.5)  # type: ignore[arg-type]


def test_configuration_error_is_a_value_error(provider):
    with pytest.raises(ValueError):
        CachedRateProvider(provider, -5)


def test_lookup_requires_both_currencies(cache, provider):
    with pytest.raises(ValueError):
        cache.get_rate(None, "EUR")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        cache.get_rate("USD", None)  # type: ignore[arg-type]
    assert provider.call_count == 0


def test_hit_avoids_refetch(cache, provider):
    first = cache.get_rate("USD", "EUR")
    second = cache.get_rate("USD", "EUR")

    assert first is second
    assert provider.call_count == 1


def test_accepts_currency_objects_and_codes_interchangeably(cache, provider):
    cache.get_rate(Currency("USD", "US Dollar"), Currency("EUR"))
    cache.get_rate("usd", " eur ")

    assert provider.call_count == 1


def test_expiry_triggers_refetch(cache, provider, clock):
    cache.get_rate("USD", "EUR")
    clock.advance(minutes=30)
    cache.get_rate("USD", "EUR")

    assert provider.call_count == 2


def test_entry_is_fresh_until_the_expiration_instant(cache, provider, clock):
    cache.get_rate("USD", "EUR")
    clock.advance(minutes=29, seconds=59)
    cache.get_rate("USD", "EUR")

    assert provider.call_count == 1


def test_date_rollover_triggers_refetch(provider):
    clock = FakeClock(datetime(2025, 10, 16, 23, 55, tzinfo=UTC))
    cache = CachedRateProvider(provider, 60, clock=clock)

    cache.get_rate("USD", "EUR")
    clock.advance(minutes=10)
    cache.get_rate("USD", "EUR")

    assert provider.call_count == 2


def test_date_rollover_follows_clock_timezone(provider):
    madrid = ZoneInfo("Europe/Madrid")
    clock = FakeClock(datetime(2025, 10, 16, 23, 50, tzinfo=madrid))
    cache = CachedRateProvider(provider, 120, clock=clock)

    cache.get_rate("USD", "EUR")
    # 22:05 UTC is still the 16th in UTC but already the 17th in Madrid.
    clock.set(datetime(2025, 10, 16, 22, 5, tzinfo=UTC))
    cache.get_rate("USD", "EUR")

    assert provider.call_count == 2


def test_directionality(cache, provider):
    usd_eur = cache.get_rate("USD", "EUR")
    eur_usd = cache.get_rate("EUR", "USD")

    assert usd_eur.rate == Decimal("0.900000")
    assert eur_usd.rate == Decimal("1.110000")
    assert provider.calls_for("USD", "EUR") == 1
    assert provider.calls_for("EUR", "USD") == 1
    assert ("USD", "EUR") in cache
    assert ("EUR", "USD") in cache


def test_failure_is_not_cached_and_propagates_unchanged(cache, provider):
    error = ProviderError("upstream down")
    provider.push("USD", "EUR", error)

    with pytest.raises(ProviderError) as exc_info:
        cache.get_rate("USD", "EUR")

    assert exc_info.value is error
    assert ("USD", "EUR") not in cache
    assert cache.stats().size == 0


def test_non_provider_errors_also_pass_through(cache, provider):
    error = TimeoutError("read timed out")
    provider.push("USD", "EUR", error)

    with pytest.raises(TimeoutError) as exc_info:
        cache.get_rate("USD", "EUR")

    assert exc_info.value is error


def test_failed_refresh_keeps_expired_entry_and_retries(cache, provider, clock):
    provider.push("USD", "EUR", "0.90", ProviderError("down"), "0.92")
    cache.get_rate("USD", "EUR")
    stale = cache.peek("USD", "EUR")
    clock.advance(minutes=31)

    with pytest.raises(ProviderError):
        cache.get_rate("USD", "EUR")

    assert cache.peek("USD", "EUR") is stale

    refreshed = cache.get_rate("USD", "EUR")
    assert refreshed.rate == Decimal("0.920000")
    assert provider.call_count == 3
    assert cache.peek("USD", "EUR") is not stale


def test_zero_validity_disables_caching(provider, clock):
    cache = CachedRateProvider(provider, 0, clock=clock)

    cache.get_rate("USD", "EUR")
    cache.get_rate("USD", "EUR")

    assert provider.call_count == 2
    assert cache.sweep_expired() == 1


def test_invalidate_all_forces_full_refetch(cache, provider):
    for pair in [("USD", "EUR"), ("EUR", "USD"), ("USD", "GBP")]:
        cache.get_rate(*pair)
    assert provider.call_count == 3

    cache.invalidate_all()
    assert cache.stats().size == 0

    for pair in [("USD", "EUR"), ("EUR", "USD"), ("USD", "GBP")]:
        cache.get_rate(*pair)
    assert provider.call_count == 6


def test_sweep_removes_exactly_the_expired_entries(cache, provider, clock):
    cache.get_rate("USD", "EUR")
    cache.get_rate("EUR", "USD")
    clock.advance(minutes=20)
    cache.get_rate("USD", "GBP")
    cache.get_rate("GBP", "JPY")
    clock.advance(minutes=15)

    removed = cache.sweep_expired()

    assert removed == 2
    assert cache.stats().size == 2
    assert ("USD", "EUR") not in cache
    assert ("EUR", "USD") not in cache

    cache.get_rate("USD", "GBP")
    cache.get_rate("GBP", "JPY")
    assert provider.call_count == 4


def test_sweep_with_nothing_expired_returns_zero(cache):
    cache.get_rate("USD", "EUR")
    assert cache.sweep_expired() == 0
    assert len(cache) == 1


def test_sweep_removes_entries_left_over_from_yesterday(provider):
    clock = FakeClock(datetime(2025, 10, 16, 23, 59, tzinfo=UTC))
    cache = CachedRateProvider(provider, 120, clock=clock)
    cache.get_rate("USD", "EUR")

    clock.advance(minutes=2)

    assert cache.sweep_expired() == 1


def test_stats_reports_size_and_validity(cache):
    assert cache.stats() == CacheStats(size=0, validity_minutes=30)

    cache.get_rate("USD", "EUR")
    cache.get_rate("EUR", "USD")

    stats = cache.stats()
    assert stats == CacheStats(size=2, validity_minutes=30)
    assert stats.describe() == "Cache size: 2 entries, Validity: 30 minutes"


def test_stats_has_no_side_effects(cache, provider, clock):
    cache.get_rate("USD", "EUR")
    clock.advance(hours=2)

    assert cache.stats().size == 1
    assert cache.stats().size == 1
    assert provider.call_count == 1


def test_concrete_one_minute_scenario(provider, clock):
    provider.push("USD", "EUR", "0.90", "0.91")
    cache = CachedRateProvider(provider, 1, clock=clock)

    assert cache.get_rate("USD", "EUR").rate == Decimal("0.900000")
    assert provider.call_count == 1

    clock.advance(seconds=30)
    assert cache.get_rate("USD", "EUR").rate == Decimal("0.900000")
    assert provider.call_count == 1

    clock.advance(seconds=31)
    assert cache.get_rate("USD", "EUR").rate == Decimal("0.910000")
    assert provider.call_count == 2

    assert cache.get_rate("USD", "EUR").rate == Decimal("0.910000")
    assert provider.call_count == 2


def test_entry_records_storage_time_from_clock(cache, clock):
    cache.get_rate("USD", "EUR")
    entry = cache.peek("USD", "EUR")

    assert entry is not None
    assert entry.stored_at == clock.now
    assert entry.expires_at == clock.now + timedelta(minutes=30)
    assert entry.stored_on == clock.now.date()


def test_same_currency_is_delegated_to_provider(cache, provider):
    with pytest.raises(ProviderError):
        cache.get_rate("USD", "USD")
    assert provider.calls_for("USD", "USD") == 1


def test_pair_key_is_directional():
    assert pair_key("usd", "eur") == "USD->EUR"
    assert pair_key(Currency("EUR"), Currency("USD")) == "EUR->USD"
    assert pair_key("USD", "EUR") != pair_key("EUR", "USD")


def test_injected_logger_receives_hit_and_miss_events(provider, clock):
    mock_logger = MagicMock(spec=logging.Logger)
    cache = CachedRateProvider(provider, 30, clock=clock, logger=mock_logger)

    cache.get_rate("USD", "EUR")
    cache.get_rate("USD", "EUR")

    miss_extra = mock_logger.info.call_args_list[0].kwargs["extra"]
    assert miss_extra["event"] == "cache.miss"
    assert miss_extra["pair"] == "USD->EUR"
    assert miss_extra["status"] == "absent"

    debug_events = [call.kwargs["extra"]["event"] for call in mock_logger.debug.call_args_list]
    assert debug_events == ["cache.store", "cache.hit"]


def test_injected_logger_records_fetch_failures(provider, clock):
    mock_logger = MagicMock(spec=logging.Logger)
    cache = CachedRateProvider(provider, 30, clock=clock, logger=mock_logger)
    provider.push("USD", "EUR", ProviderError("down"))

    with pytest.raises(ProviderError):
        cache.get_rate("USD", "EUR")

    extra = mock_logger.warning.call_args.kwargs["extra"]
    assert extra["event"] == "cache.fetch_failed"
    assert extra["error"] == "down"
    assert extra["provider"] == "scripted"
    assert extra["duration_ms"] >= 0


def test_default_logger_is_silent(provider, clock, caplog):
    cache = CachedRateProvider(provider, 30, clock=clock)

    with caplog.at_level(logging.DEBUG):
        cache.get_rate("USD", "EUR")
        cache.get_rate("USD", "EUR")

    assert not [record for record in caplog.records if record.name.startswith("money_calculator")]


def test_provider_returning_nothing_is_rejected(clock):
    class NullProvider(ScriptedRateProvider):
        def get_rate(self, from_currency, to_currency):
            return None

    cache = CachedRateProvider(NullProvider(), 30, clock=clock)

    with pytest.raises(ValueError, match="absent rate"):
        cache.get_rate("USD", "EUR")
    assert len(cache) == 0


def test_concurrent_lookups_for_same_key_are_safe(provider, clock):
    cache = CachedRateProvider(provider, 30, clock=clock)
    barrier = threading.Barrier(8)
    results = []
    errors = []

    def worker():
        barrier.wait()
        try:
            results.append(cache.get_rate("USD", "EUR"))
        except Exception as exc:  # pragma: no cover - surfaced by assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(results) == 8
    assert {result.rate for result in results} == {Decimal("0.900000")}
    assert 1 <= provider.call_count <= 8
    assert cache.stats().size == 1
