"""OpenWeather (api.openweathermap.org) weather provider implementation."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

import httpx

from ..dates import report_kind, start_of_day_utc
from ..exceptions import (
    AuthError,
    NormalizationError,
    NotFoundError,
    UnsupportedDateError,
    WeatherProviderError,
)
from ..redaction import sanitize_text
from .base import HTTPWeatherProvider
from .models import WeatherQuery, WeatherReport

# Day summaries are available from 1979-01-02 up to 1.5 years ahead.
EARLIEST_DAY_SUMMARY = date(1979, 1, 2)
DAY_SUMMARY_HORIZON_DAYS = 548


class OpenWeatherProvider(HTTPWeatherProvider):
    """Current conditions and daily summaries from OpenWeather."""

    provider_id = "ow"
    display_name = "OpenWeather"

    def supported_dates(self, today: date) -> tuple[date, date]:
        return EARLIEST_DAY_SUMMARY, today + timedelta(days=DAY_SUMMARY_HORIZON_DAYS)

    def _fetch_raw(self, query: WeatherQuery) -> dict[str, Any]:
        base_url = self.settings.openweather_base_url
        if query.date is None:
            current = self._request_json(
                f"{base_url}/data/2.5/weather",
                params={"q": query.location, "appid": self.api_key, "units": "metric"},
                context="current weather",
            )
            return {"current": current}

        # The day summary endpoint only takes coordinates.
        geo = self._request_json(
            f"{base_url}/geo/1.0/direct",
            params={"q": query.location, "limit": 1, "appid": self.api_key},
            context="geocoding",
        )
        place = self._first_place(geo, query.location)
        summary = self._request_json(
            f"{base_url}/data/3.0/onecall/day_summary",
            params={
                "lat": place["lat"],
                "lon": place["lon"],
                "date": query.date.isoformat(),
                "units": "metric",
                "appid": self.api_key,
            },
            context="day summary",
        )
        return {"geo": place, "day_summary": summary}

    def normalize(self, query: WeatherQuery, raw: dict[str, Any]) -> WeatherReport:
        if query.date is None:
            current = self._require_dict(raw.get("current"), "current")
            return self._normalize_current(query, current)
        return self._normalize_day_summary(
            query,
            day=query.date,
            place=self._require_dict(raw.get("geo"), "geo"),
            summary=self._require_dict(raw.get("day_summary"), "day_summary"),
        )

    def _first_place(self, geo: Any, location: str) -> dict[str, Any]:
        if not isinstance(geo, list):
            raise NormalizationError(
                "OpenWeather geocoding returned unexpected payload type "
                f"{type(geo).__name__}.",
                provider=self.provider_id,
            )
        if not geo:
            raise NotFoundError(f"Location not found: '{location}'", provider=self.provider_id)
        place = geo[0]
        if (
            not isinstance(place, dict)
            or self._as_float(place.get("lat")) is None
            or self._as_float(place.get("lon")) is None
        ):
            raise NormalizationError(
                "OpenWeather geocoding result missing coordinates.",
                provider=self.provider_id,
            )
        return place

    def _normalize_current(self, query: WeatherQuery, payload: dict[str, Any]) -> WeatherReport:
        main = self._require_dict(payload.get("main"), "main")
        temperature = self._as_float(main.get("temp"))
        if temperature is None:
            raise NormalizationError(
                "OpenWeather current payload missing 'main.temp'.",
                provider=self.provider_id,
            )
        observed_at = self._parse_epoch(payload.get("dt"))
        if observed_at is None:
            raise NormalizationError(
                "OpenWeather current payload missing or invalid 'dt'.",
                provider=self.provider_id,
            )

        wind = payload.get("wind")
        wind_speed = self._as_float(wind.get("speed")) if isinstance(wind, dict) else None

        conditions: str | None = None
        weather = payload.get("weather")
        if isinstance(weather, list) and weather and isinstance(weather[0], dict):
            conditions = self._as_str(weather[0].get("description"))

        country = None
        sys_block = payload.get("sys")
        if isinstance(sys_block, dict):
            country = self._as_str(sys_block.get("country"))

        return self._build_report(
            location=query.location,
            resolved_name=self._join_name(self._as_str(payload.get("name")), country),
            kind="current",
            date=observed_at.date(),
            observed_at=observed_at,
            temperature=temperature,
            conditions=conditions,
            humidity=self._as_float(main.get("humidity")),
            wind_speed=wind_speed,
        )

    def _normalize_day_summary(
        self,
        query: WeatherQuery,
        *,
        day: date,
        place: dict[str, Any],
        summary: dict[str, Any],
    ) -> WeatherReport:
        temperature_block = self._require_dict(summary.get("temperature"), "temperature")
        temperature = self._as_float(temperature_block.get("afternoon"))
        if temperature is None:
            raise NormalizationError(
                "OpenWeather day summary missing 'temperature.afternoon'.",
                provider=self.provider_id,
            )

        humidity: float | None = None
        humidity_block = summary.get("humidity")
        if isinstance(humidity_block, dict):
            humidity = self._as_float(humidity_block.get("afternoon"))

        wind_speed: float | None = None
        wind = summary.get("wind")
        if isinstance(wind, dict) and isinstance(wind.get("max"), dict):
            wind_speed = self._as_float(wind["max"].get("speed"))

        return self._build_report(
            location=query.location,
            resolved_name=self._join_name(
                self._as_str(place.get("name")), self._as_str(place.get("country"))
            ),
            kind=report_kind(day),
            date=day,
            observed_at=start_of_day_utc(day),
            temperature=temperature,
            conditions=None,
            humidity=humidity,
            wind_speed=wind_speed,
        )

    def _map_error_body(
        self, response: httpx.Response, context: str
    ) -> WeatherProviderError | None:
        body = self._error_body(response)
        code = str(body.get("cod", "")).strip()
        message = sanitize_text(str(body.get("message") or response.reason_phrase))
        text = f"OpenWeather {context} failed: {message}"
        status = response.status_code
        if code == "401":
            return AuthError(text, provider=self.provider_id, status_code=status)
        if code == "404":
            return NotFoundError(text, provider=self.provider_id, status_code=status)
        if code == "400" and "date" in message.lower():
            return UnsupportedDateError(text, provider=self.provider_id, status_code=status)
        return None

    @staticmethod
    def _join_name(name: str | None, country: str | None) -> str | None:
        parts = [part for part in (name, country) if part]
        return ", ".join(parts) if parts else None
