"""Mock provider: offline, deterministic, and date-aware."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta

from weather_cli.dates import today_utc
from weather_cli.weather.mock import MockWeatherProvider

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def _make_provider() -> MockWeatherProvider:
    return MockWeatherProvider(logger=logging.getLogger("test_mock"), clock=lambda: FIXED_NOW)


def test_current_and_historical_reports_are_distinguishable() -> None:
    provider = _make_provider()

    current = provider.fetch("London, UK", None)
    historical = provider.fetch("London, UK", date(2023, 12, 25))

    assert current.location == historical.location == "London, UK"
    assert current.kind == "current"
    assert historical.kind == "historical"
    assert current.temperature != historical.temperature
    assert current.conditions == "Sunny (Mock)"
    assert historical.conditions == "Cloudy (Mock)"


def test_current_report_uses_clock() -> None:
    report = _make_provider().fetch("Anywhere")

    assert report.observed_at == FIXED_NOW
    assert report.date == FIXED_NOW.date()
    assert report.provider == "mock"


def test_historical_report_covers_requested_day() -> None:
    report = _make_provider().fetch("Anywhere", date(2023, 12, 25))

    assert report.date == date(2023, 12, 25)
    assert report.observed_at == datetime(2023, 12, 25, tzinfo=UTC)
    assert report.humidity == 65


def test_future_date_gives_forecast_report() -> None:
    target = today_utc() + timedelta(days=2)
    report = _make_provider().fetch("Anywhere", target)

    assert report.kind == "forecast"
    assert report.date == target


def test_needs_no_api_key() -> None:
    provider = MockWeatherProvider(logger=logging.getLogger("test_mock"))
    assert provider.requires_key is False
    assert provider.fetch("Anywhere").temperature == 20.0


def test_results_are_deterministic() -> None:
    provider = _make_provider()
    assert provider.fetch("Oslo", date(2020, 5, 1)) == provider.fetch("Oslo", date(2020, 5, 1))
