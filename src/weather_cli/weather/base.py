"""Provider-agnostic weather interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, date, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from ..dates import today_utc
from ..exceptions import (
    AuthError,
    NormalizationError,
    NotFoundError,
    TransportError,
    UnsupportedDateError,
    WeatherProviderError,
)
from ..redaction import sanitize_for_logging, sanitize_text
from .models import WeatherQuery, WeatherReport


class WeatherProvider(ABC):
    """Base contract for weather providers.

    ``fetch`` is the public entry point. It validates the query, performs the
    remote call(s) in ``fetch_raw`` and maps the payload in ``normalize``.
    The two halves are public so callers can observe each stage.
    """

    provider_id: str = ""
    display_name: str = ""
    requires_key: bool = True

    def __init__(self, logger: logging.Logger, api_key: str | None = None) -> None:
        self.logger = logger
        self.api_key = api_key

    def __enter__(self) -> WeatherProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release provider resources."""

    def fetch(self, location: str, date: date | None = None) -> WeatherReport:
        """Fetch and normalize a report for ``location`` (current when ``date`` is None)."""
        query = WeatherQuery(location=location, date=date)
        raw = self.fetch_raw(query)
        return self.normalize(query, raw)

    def fetch_raw(self, query: WeatherQuery) -> dict[str, Any]:
        """Validate the query and return the raw provider payload."""
        self.validate_query(query)
        raw = self._fetch_raw(query)
        self.logger.debug(
            "%s raw payload: %s", self.provider_id, sanitize_for_logging(raw)
        )
        return raw

    @abstractmethod
    def _fetch_raw(self, query: WeatherQuery) -> dict[str, Any]:
        """Perform the remote request(s) for a validated query."""

    @abstractmethod
    def normalize(self, query: WeatherQuery, raw: dict[str, Any]) -> WeatherReport:
        """Map a raw provider payload into a WeatherReport."""

    def supported_dates(self, today: date) -> tuple[date, date] | None:
        """Inclusive window of dates the provider accepts; None means unlimited."""
        return None

    def validate_query(self, query: WeatherQuery) -> None:
        if not query.location:
            raise NotFoundError(
                "Location must not be empty.", provider=self.provider_id
            )
        if self.requires_key and not self.api_key:
            raise AuthError(
                f"'{self.display_name}' API key not set. Set it using: "
                f"'weather provider {self.provider_id} --key <API_KEY>'",
                provider=self.provider_id,
            )
        if query.date is not None:
            window = self.supported_dates(today_utc())
            if window is not None:
                earliest, latest = window
                if not (earliest <= query.date <= latest):
                    raise UnsupportedDateError(
                        f"'{self.display_name}' supports dates from {earliest.isoformat()} "
                        f"to {latest.isoformat()}; got {query.date.isoformat()}.",
                        provider=self.provider_id,
                    )

    def _build_report(self, **fields: Any) -> WeatherReport:
        try:
            return WeatherReport(provider=self.provider_id, **fields)
        except ValidationError as exc:
            raise NormalizationError(
                f"{self.display_name} response produced an invalid report: {exc}",
                provider=self.provider_id,
            ) from exc

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_float(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        return None

    @staticmethod
    def _parse_epoch(value: Any) -> datetime | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(int(value), tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None


class HTTPWeatherProvider(WeatherProvider):
    """Weather provider backed by a single JSON HTTP API."""

    def __init__(
        self,
        settings: Any,
        logger: logging.Logger,
        api_key: str | None = None,
    ) -> None:
        super().__init__(logger=logger, api_key=api_key)
        self.settings = settings
        self._client = httpx.Client(
            timeout=settings.http_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.user_agent,
            },
        )

    def close(self) -> None:
        self._client.close()

    def _request_json(self, url: str, params: dict[str, Any], context: str) -> Any:
        """Perform one GET and decode its JSON body. No retries."""
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._map_status_error(exc.response, context) from exc
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"{self.display_name} {context} timed out: {sanitize_text(str(exc))}",
                provider=self.provider_id,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"{self.display_name} {context} request failed: {sanitize_text(str(exc))}",
                provider=self.provider_id,
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise NormalizationError(
                f"{self.display_name} {context} returned non-JSON response.",
                provider=self.provider_id,
            ) from exc

    def _map_status_error(
        self, response: httpx.Response, context: str
    ) -> WeatherProviderError:
        status = response.status_code
        detail = sanitize_text(response.text[:300])
        refined = self._map_error_body(response, context)
        if refined is not None:
            return refined
        message = f"{self.display_name} {context} failed with status {status}: {detail}"
        if status in (401, 403):
            return AuthError(message, provider=self.provider_id, status_code=status)
        if status == 404:
            return NotFoundError(message, provider=self.provider_id, status_code=status)
        return TransportError(message, provider=self.provider_id, status_code=status)

    def _map_error_body(
        self, response: httpx.Response, context: str
    ) -> WeatherProviderError | None:
        """Provider-specific error-body mapping; None falls back to the status code."""
        return None

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _require_dict(self, value: Any, what: str) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise NormalizationError(
                f"{self.display_name} payload missing '{what}' object.",
                provider=self.provider_id,
            )
        return value
