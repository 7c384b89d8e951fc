"""Provider interfaces and data structures for FX rate sources."""

from .base import BaseCurrencySource, BaseRateProvider, ProviderError
from .exchangerate_api_client import (
    ExchangeRateApiClient,
    ExchangeRateApiClientConfig,
    ExchangeRateApiError,
)
from .exchangerate_api_provider import ExchangeRateApiProvider
from .schemas import Currency, ExchangeRate

__all__ = [
    "BaseCurrencySource",
    "BaseRateProvider",
    "ProviderError",
    "Currency",
    "ExchangeRate",
    "ExchangeRateApiClient",
    "ExchangeRateApiClientConfig",
    "ExchangeRateApiError",
    "ExchangeRateApiProvider",
]
