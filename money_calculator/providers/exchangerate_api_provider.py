"""ExchangeRate-API provider implementation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from money_calculator.providers.base import BaseCurrencySource, BaseRateProvider, ProviderError
from money_calculator.providers.schemas import Currency, ExchangeRate

from .exchangerate_api_client import (
    ExchangeRateApiClient,
    ExchangeRateApiClientConfig,
    ExchangeRateApiError,
)

DEFAULT_BASE_URL = "https://v6.exchangerate-api.com"


class ExchangeRateApiProvider(BaseRateProvider, BaseCurrencySource):
    """Provider that fetches pair rates and supported codes from ExchangeRate-API."""

    name = "exchangerate_api"

    def __init__(self, client: ExchangeRateApiClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ExchangeRateApiProvider:
        client_config = cls._build_client_config(config)
        return cls(ExchangeRateApiClient(client_config))

    def get_rate(self, from_currency: Currency | str, to_currency: Currency | str) -> ExchangeRate:
        source = self._to_currency(from_currency)
        target = self._to_currency(to_currency)
        try:
            payload = self._client.get(f"/pair/{source.code}/{target.code}")
        except ExchangeRateApiError as exc:
            raise ProviderError(f"Failed to fetch exchange rate: {exc}") from exc

        raw_rate = payload.get("conversion_rate")
        if raw_rate is None:
            raise ProviderError("API response missing conversion_rate field")
        try:
            rate_value = Decimal(str(raw_rate))
        except InvalidOperation as exc:
            raise ProviderError(f"API returned a non-numeric conversion_rate: {raw_rate!r}") from exc

        try:
            return ExchangeRate(
                date=self._observed_date(payload),
                from_currency=source,
                to_currency=target,
                rate=rate_value,
            )
        except ValueError as exc:
            raise ProviderError(f"API returned an invalid exchange rate: {exc}") from exc

    def list_currencies(self) -> list[Currency]:
        try:
            payload = self._client.get("/codes")
        except ExchangeRateApiError as exc:
            raise ProviderError(f"Failed to fetch currencies: {exc}") from exc

        supported = payload.get("supported_codes")
        if supported is None:
            raise ProviderError("API response missing supported_codes field")

        currencies: dict[str, Currency] = {}
        for entry in supported:
            if not isinstance(entry, list | tuple) or len(entry) < 2:
                continue
            try:
                currency = Currency(code=entry[0], name=entry[1])
            except ValueError:
                continue
            currencies[currency.code] = currency
        return [currencies[code] for code in sorted(currencies)]

    @staticmethod
    def _to_currency(value: Currency | str) -> Currency:
        try:
            return Currency.of(value)
        except ValueError as exc:
            raise ProviderError(str(exc)) from exc

    @classmethod
    def _observed_date(cls, payload: Mapping[str, Any]) -> date:
        stamp = payload.get("time_last_update_unix")
        if isinstance(stamp, int | float):
            return datetime.fromtimestamp(stamp, tz=UTC).date()
        return cls._current_date()

    @classmethod
    def _build_client_config(cls, config: Mapping[str, Any]) -> ExchangeRateApiClientConfig:
        base_url_value = config.get("EXCHANGE_RATE_API_BASE_URL")
        if not isinstance(base_url_value, str) or not base_url_value.strip():
            base_url = DEFAULT_BASE_URL
        else:
            base_url = base_url_value
        api_key = config.get("EXCHANGE_RATE_API_KEY")
        if not isinstance(api_key, str) or not api_key.strip():
            raise ProviderError(
                "API key not configured. Set EXCHANGE_RATE_API_KEY to use the "
                f"'{cls.name}' provider."
            )
        timeout = float(config.get("REQUEST_TIMEOUT_SECONDS", 10))
        max_retries = int(config.get("EXCHANGE_RATE_API_MAX_RETRIES", 3))
        backoff = float(config.get("EXCHANGE_RATE_API_BACKOFF_SECONDS", 0.5))
        return ExchangeRateApiClientConfig(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff,
        )

    @staticmethod
    def _current_date() -> date:
        return datetime.now(UTC).date()
