"""WeatherAPI (api.weatherapi.com) weather provider implementation."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

import httpx

from ..dates import report_kind, start_of_day_utc
from ..exceptions import AuthError, NormalizationError, NotFoundError, WeatherProviderError
from ..redaction import sanitize_text
from .base import HTTPWeatherProvider
from .models import WeatherQuery, WeatherReport

EARLIEST_HISTORY = date(2010, 1, 1)
FORECAST_HORIZON_DAYS = 14
KPH_PER_MPS = 3.6

# Error codes documented at https://www.weatherapi.com/docs/#intro-error-codes
_AUTH_ERROR_CODES = frozenset({1002, 2006, 2007, 2008, 2009})
_NOT_FOUND_ERROR_CODES = frozenset({1003, 1006})


class WeatherAPIProvider(HTTPWeatherProvider):
    """Current conditions, history and short forecasts from WeatherAPI."""

    provider_id = "wa"
    display_name = "WeatherApi"

    def supported_dates(self, today: date) -> tuple[date, date]:
        return EARLIEST_HISTORY, today + timedelta(days=FORECAST_HORIZON_DAYS)

    def _fetch_raw(self, query: WeatherQuery) -> dict[str, Any]:
        base_url = f"{self.settings.weatherapi_base_url}/v1"
        params: dict[str, Any] = {"key": self.api_key, "q": query.location}
        kind = report_kind(query.date)

        if query.date is None:
            params["aqi"] = "no"
            payload = self._request_json(
                f"{base_url}/current.json", params=params, context="current weather"
            )
        elif kind == "historical":
            params["dt"] = query.date.isoformat()
            payload = self._request_json(
                f"{base_url}/history.json", params=params, context="history"
            )
        else:
            params.update(
                {"dt": query.date.isoformat(), "days": 1, "aqi": "no", "alerts": "no"}
            )
            payload = self._request_json(
                f"{base_url}/forecast.json", params=params, context="forecast"
            )
        return {"kind": kind, "payload": payload}

    def normalize(self, query: WeatherQuery, raw: dict[str, Any]) -> WeatherReport:
        kind = raw.get("kind", report_kind(query.date))
        payload = self._require_dict(raw.get("payload"), "payload")
        location = payload.get("location")
        resolved_name = None
        if isinstance(location, dict):
            parts = [
                part
                for part in (
                    self._as_str(location.get("name")),
                    self._as_str(location.get("country")),
                )
                if part
            ]
            resolved_name = ", ".join(parts) if parts else None

        if query.date is None:
            return self._normalize_current(query, payload, resolved_name)
        return self._normalize_day(query, query.date, kind, payload, resolved_name)

    def _normalize_current(
        self,
        query: WeatherQuery,
        payload: dict[str, Any],
        resolved_name: str | None,
    ) -> WeatherReport:
        current = self._require_dict(payload.get("current"), "current")
        temperature = self._as_float(current.get("temp_c"))
        if temperature is None:
            raise NormalizationError(
                "WeatherApi current payload missing 'current.temp_c'.",
                provider=self.provider_id,
            )
        observed_at = self._parse_epoch(current.get("last_updated_epoch"))
        if observed_at is None:
            raise NormalizationError(
                "WeatherApi current payload missing 'current.last_updated_epoch'.",
                provider=self.provider_id,
            )
        return self._build_report(
            location=query.location,
            resolved_name=resolved_name,
            kind="current",
            date=observed_at.date(),
            observed_at=observed_at,
            temperature=temperature,
            conditions=self._condition_text(current),
            humidity=self._as_float(current.get("humidity")),
            wind_speed=self._kph_to_mps(self._as_float(current.get("wind_kph"))),
        )

    def _normalize_day(
        self,
        query: WeatherQuery,
        day: date,
        kind: str,
        payload: dict[str, Any],
        resolved_name: str | None,
    ) -> WeatherReport:
        forecast = self._require_dict(payload.get("forecast"), "forecast")
        forecast_days = forecast.get("forecastday")
        if not isinstance(forecast_days, list) or not forecast_days:
            raise NormalizationError(
                "WeatherApi payload missing 'forecast.forecastday' entries.",
                provider=self.provider_id,
            )
        first = self._require_dict(forecast_days[0], "forecastday[0]")
        day_block = self._require_dict(first.get("day"), "forecastday[0].day")

        temperature = self._as_float(day_block.get("avgtemp_c"))
        if temperature is None:
            raise NormalizationError(
                "WeatherApi payload missing 'day.avgtemp_c'.",
                provider=self.provider_id,
            )
        return self._build_report(
            location=query.location,
            resolved_name=resolved_name,
            kind=kind,
            date=day,
            observed_at=start_of_day_utc(day),
            temperature=temperature,
            conditions=self._condition_text(day_block),
            humidity=self._as_float(day_block.get("avghumidity")),
            wind_speed=self._kph_to_mps(self._as_float(day_block.get("maxwind_kph"))),
        )

    def _condition_text(self, block: dict[str, Any]) -> str | None:
        condition = block.get("condition")
        if isinstance(condition, dict):
            return self._as_str(condition.get("text"))
        return None

    @staticmethod
    def _kph_to_mps(value: float | None) -> float | None:
        if value is None:
            return None
        return round(value / KPH_PER_MPS, 2)

    def _map_error_body(
        self, response: httpx.Response, context: str
    ) -> WeatherProviderError | None:
        error = self._error_body(response).get("error")
        if not isinstance(error, dict):
            return None
        code = error.get("code")
        message = sanitize_text(str(error.get("message") or response.reason_phrase))
        text = f"WeatherApi {context} failed ({code}): {message}"
        status = response.status_code
        if code in _AUTH_ERROR_CODES:
            return AuthError(text, provider=self.provider_id, status_code=status)
        if code in _NOT_FOUND_ERROR_CODES:
            return NotFoundError(text, provider=self.provider_id, status_code=status)
        return None
