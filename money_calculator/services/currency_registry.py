"""Currency registry that caches the supported ISO codes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from money_calculator.providers.base import BaseCurrencySource
from money_calculator.providers.schemas import Currency

logger = logging.getLogger(__name__)

REGISTRY_EXT_KEY = "currency_registry"


class CurrencyNotFoundError(LookupError):
    """Raised when a currency code is not in the registry."""


@dataclass
class CurrencyRegistry:
    """Provides fast lookup for supported currencies.

    The list is fetched from the currency source once per `load` call and kept
    for the life of the process; currencies change far less often than rates.
    """

    currencies: dict[str, Currency] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def codes(self) -> set[str]:
        return set(self.currencies)

    def load(self, source: BaseCurrencySource) -> None:
        """Replace the registry contents with the source's currency list."""

        loaded = {currency.code: currency for currency in source.list_currencies()}
        with self._lock:
            self.currencies = loaded
        logger.info("Loaded %s currencies", len(loaded))

    def ensure_loaded(self, source: BaseCurrencySource | None) -> None:
        """Load from `source` if nothing has been loaded yet."""

        if self.currencies or source is None:
            return
        self.load(source)

    def update(self, items: Iterable[Currency | str]) -> None:
        """Merge additional currencies into the registry."""

        with self._lock:
            for item in items:
                currency = Currency.of(item)
                self.currencies[currency.code] = currency

    def clear(self) -> None:
        with self._lock:
            self.currencies = {}

    def all(self) -> list[Currency]:
        return [self.currencies[code] for code in sorted(self.currencies)]

    def is_allowed(self, code: str) -> bool:
        """Check if the given code is registered."""

        return str(code).strip().upper() in self.currencies

    def find_by_code(self, code: str) -> Currency:
        if code is None or not str(code).strip():
            raise ValueError("Currency code cannot be null or empty")
        normalized = str(code).strip().upper()
        try:
            return self.currencies[normalized]
        except KeyError as exc:
            raise CurrencyNotFoundError(f"Currency not found: {code}") from exc


registry = CurrencyRegistry()


def init_registry(app) -> CurrencyRegistry:
    """Attach the registry to the Flask app and populate it from the rate provider."""

    from money_calculator.providers.base import ProviderError

    source = app.extensions.get("rate_provider")
    if isinstance(source, BaseCurrencySource):
        try:
            registry.load(source)
        except ProviderError as exc:
            logger.warning("Currency list unavailable at startup: %s", exc)
    else:
        logger.warning("Configured provider cannot list currencies; registry left empty.")
    app.extensions[REGISTRY_EXT_KEY] = registry
    return registry
