"""Offline provider returning canned reports."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ..dates import report_kind, start_of_day_utc
from .base import WeatherProvider
from .models import WeatherQuery, WeatherReport

MOCK_PLACE = "Mock City, Mock Country"

# Canned values per report kind so callers can tell which path ran.
CANNED_READINGS: dict[str, dict[str, Any]] = {
    "current": {
        "temperature": 20.0,
        "humidity": 50.0,
        "wind_speed": 3.5,
        "conditions": "Sunny (Mock)",
    },
    "historical": {
        "temperature": 12.5,
        "humidity": 65.0,
        "wind_speed": 5.0,
        "conditions": "Cloudy (Mock)",
    },
    "forecast": {
        "temperature": 17.0,
        "humidity": 55.0,
        "wind_speed": 4.0,
        "conditions": "Partly cloudy (Mock)",
    },
}


class MockWeatherProvider(WeatherProvider):
    """Deterministic provider for offline use and tests. Needs no API key."""

    provider_id = "mock"
    display_name = "MockWeather"
    requires_key = False

    def __init__(
        self,
        logger: logging.Logger,
        api_key: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(logger=logger, api_key=api_key)
        self._clock = clock or (lambda: datetime.now(UTC))

    def _fetch_raw(self, query: WeatherQuery) -> dict[str, Any]:
        kind = report_kind(query.date)
        observed_at = self._clock() if query.date is None else start_of_day_utc(query.date)
        return {
            "kind": kind,
            "place": MOCK_PLACE,
            "observed_at": observed_at.isoformat(),
            **CANNED_READINGS[kind],
        }

    def normalize(self, query: WeatherQuery, raw: dict[str, Any]) -> WeatherReport:
        observed_at = datetime.fromisoformat(raw["observed_at"])
        return self._build_report(
            location=query.location,
            resolved_name=raw["place"],
            kind=raw["kind"],
            date=query.date or observed_at.date(),
            observed_at=observed_at,
            temperature=raw["temperature"],
            conditions=raw["conditions"],
            humidity=raw["humidity"],
            wind_speed=raw["wind_speed"],
        )
