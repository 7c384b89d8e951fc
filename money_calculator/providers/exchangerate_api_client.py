from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from money_calculator.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

logger = logging.getLogger(__name__)

ERROR_MESSAGES: dict[str, str] = {
    "unsupported-code": "Currency code is not supported by ExchangeRate-API",
    "malformed-request": "Malformed request sent to ExchangeRate-API",
    "invalid-key": "ExchangeRate-API rejected the configured API key",
    "inactive-account": "ExchangeRate-API account is inactive",
    "quota-reached": "ExchangeRate-API request quota reached",
}


class ExchangeRateApiError(RuntimeError):
    """Raised when ExchangeRate-API returns an error response."""

    def __init__(self, message: str, *, error_type: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type


@dataclass(frozen=True)
class ExchangeRateApiClientConfig:
    """Configuration parameters for the API client."""

    base_url: str
    api_key: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff_seconds: float = 0.5

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise ValueError("Base URL cannot be null or empty")
        if not self.api_key or not self.api_key.strip():
            raise ValueError("API key cannot be null or empty")
        object.__setattr__(self, "base_url", self.base_url.strip())
        object.__setattr__(self, "api_key", self.api_key.strip())


class ExchangeRateApiClient:
    """HTTP client for ExchangeRate-API v6 built on the shared HTTP wrapper."""

    def __init__(self, config: ExchangeRateApiClientConfig, client: Optional[HTTPClient] = None) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
            )
        )

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Fetch `/v6/<key>/<path>` and return the payload of a successful result."""

        full_path = f"/v6/{self._config.api_key}/{path.lstrip('/')}"
        try:
            payload = self._client.get(full_path, params=params)
        except HTTPClientError as exc:
            if exc.payload:
                raise self._error_from_payload(exc.payload) from exc
            raise ExchangeRateApiError(f"ExchangeRate-API request failed: {exc}") from exc

        if payload.get("result") != "success":
            raise self._error_from_payload(payload)

        return payload

    @staticmethod
    def _error_from_payload(payload: Mapping[str, Any]) -> ExchangeRateApiError:
        error_type = payload.get("error-type")
        if not error_type:
            return ExchangeRateApiError(
                f"ExchangeRate-API returned unsuccessful result: {payload.get('result')}"
            )
        description = ERROR_MESSAGES.get(str(error_type), "ExchangeRate-API error")
        return ExchangeRateApiError(f"{description} ({error_type})", error_type=str(error_type))
