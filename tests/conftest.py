"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from money_calculator import create_app  # noqa: E402
from money_calculator.providers.registry import reset_registry  # noqa: E402
from money_calculator.services.currency_registry import registry  # noqa: E402
from money_calculator.services.rate_cache import CACHE_EXT_KEY, CachedRateProvider  # noqa: E402
from tests.factories import FakeClock, ScriptedRateProvider  # noqa: E402


@pytest.fixture(scope="session")
def app() -> Iterator:
    """Session-wide Flask application backed by the mock provider."""

    flask_app = create_app(
        "development",
        TESTING=True,
        FX_RATE_PROVIDER="mock",
        CACHE_SWEEP_ENABLED=False,
        LOG_LEVEL="WARNING",
    )

    yield flask_app

    registry.clear()
    reset_registry()


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def scripted_provider() -> ScriptedRateProvider:
    return ScriptedRateProvider(
        rates={
            ("USD", "EUR"): "0.90",
            ("EUR", "USD"): "1.11",
            ("USD", "GBP"): "0.78",
            ("USD", "JPY"): "150.12",
        }
    )


@pytest.fixture()
def app_rate_cache(app, scripted_provider, clock) -> Iterator[CachedRateProvider]:
    """Swap the app's rate cache for one over a scripted provider and fake clock."""

    previous = app.extensions.get(CACHE_EXT_KEY)
    cache = CachedRateProvider(scripted_provider, 30, clock=clock)
    app.extensions[CACHE_EXT_KEY] = cache
    try:
        yield cache
    finally:
        app.extensions[CACHE_EXT_KEY] = previous
