"""Shared HTTP client wrapper with retries, backoff, and jitter."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import Response, Session
from requests.exceptions import JSONDecodeError, RequestException

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_FLOOR = 500


class HTTPClientError(RuntimeError):
    """Raised when the HTTP client cannot satisfy a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class HTTPClientConfig:
    """Configuration for the shared HTTP client."""

    base_url: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff_seconds: float = 0.5
    backoff_jitter: float = 0.2


class HTTPClient:
    """Small JSON-over-HTTP client that retries transient failures.

    Connection errors and 5xx responses are retried with exponential backoff.
    4xx responses are returned to the caller as errors straight away, carrying
    the decoded JSON body when the upstream sent one.
    """

    def __init__(
        self,
        config: HTTPClientConfig,
        session: Optional[Session] = None,
    ) -> None:
        if config.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._config = config
        self._session = session or requests.Session()

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        url = self._build_url(path)
        attempt = 0
        last_error: Optional[Exception] = None

        while attempt < self._config.max_retries:
            attempt += 1
            try:
                response = self._session.get(url, params=params, timeout=self._config.timeout)
                return self._handle_response(response)
            except HTTPClientError as exc:
                if exc.status_code is not None and exc.status_code < RETRYABLE_STATUS_FLOOR:
                    raise
                last_error = exc
            except RequestException as exc:
                last_error = exc

            if attempt >= self._config.max_retries:
                break
            sleep_for = self._compute_backoff(attempt)
            logger.warning(
                "HTTP request to %s failed (attempt %s/%s): %s. Retrying in %.2fs.",
                self._redact(url),
                attempt,
                self._config.max_retries,
                last_error,
                sleep_for,
            )
            time.sleep(sleep_for)

        raise HTTPClientError(
            f"Failed to fetch {self._redact(url)}: {last_error}"
        ) from last_error

    def _compute_backoff(self, attempt: int) -> float:
        base = self._config.backoff_seconds * (2 ** (attempt - 1))
        jitter = random.uniform(-self._config.backoff_jitter, self._config.backoff_jitter)
        delay = max(base + jitter, 0.0)
        return delay

    def _build_url(self, path: str) -> str:
        base = self._config.base_url.rstrip("/")
        suffix = path.lstrip("/")
        return f"{base}/{suffix}"

    @staticmethod
    def _redact(url: str) -> str:
        # ExchangeRate-API embeds the key as the segment after /v6/.
        marker = "/v6/"
        head, sep, tail = url.partition(marker)
        if not sep:
            return url
        _, slash, rest = tail.partition("/")
        return f"{head}{marker}***{slash}{rest}"

    @staticmethod
    def _handle_response(response: Response) -> Dict[str, Any]:
        status = response.status_code
        if status >= RETRYABLE_STATUS_FLOOR:
            raise HTTPClientError(f"Server error {status}", status_code=status)
        if status >= 400:
            try:
                body = response.json()
            except (JSONDecodeError, ValueError):
                body = None
            error_body = body if isinstance(body, dict) else None
            raise HTTPClientError(
                f"Client error {status}: {response.text}", status_code=status, payload=error_body
            )

        try:
            payload: Dict[str, Any] = response.json()
        except (JSONDecodeError, ValueError) as exc:
            raise HTTPClientError("Invalid JSON response", status_code=status) from exc

        if not isinstance(payload, dict):
            raise HTTPClientError("Expected a JSON object response", status_code=status)
        return payload
