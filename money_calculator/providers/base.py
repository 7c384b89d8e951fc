"""Abstract interfaces for FX rate and currency sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .schemas import Currency, ExchangeRate


class ProviderError(Exception):
    """Raised when an upstream provider cannot fulfill a request."""


class BaseRateProvider(ABC):
    """Defines the interface all FX rate providers must implement."""

    name: str

    @abstractmethod
    def get_rate(self, from_currency: Currency | str, to_currency: Currency | str) -> ExchangeRate:
        """Retrieve the rate converting `from_currency` into `to_currency`.

        Raises:
            ProviderError: If the rate cannot be obtained.
        """


class BaseCurrencySource(ABC):
    """Source of the currencies a provider is able to quote."""

    @abstractmethod
    def list_currencies(self) -> list[Currency]:
        """Return every supported currency."""
