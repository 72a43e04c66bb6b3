"""WeatherAPI provider normalization and error mapping."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
from conftest import FakeHTTP, make_settings

from weather_cli.dates import today_utc
from weather_cli.exceptions import (
    AuthError,
    NormalizationError,
    NotFoundError,
    TransportError,
    UnsupportedDateError,
)
from weather_cli.weather.weatherapi import WeatherAPIProvider

LOCATION_BLOCK = {"name": "London", "region": "City of London", "country": "United Kingdom"}


def _day_payload(day: str, **day_overrides: Any) -> dict[str, Any]:
    day_block: dict[str, Any] = {
        "avgtemp_c": 9.1,
        "avghumidity": 80,
        "maxwind_kph": 36.0,
        "condition": {"text": "Overcast"},
    }
    day_block.update(day_overrides)
    return {
        "location": LOCATION_BLOCK,
        "forecast": {"forecastday": [{"date": day, "day": day_block}]},
    }


def _make_provider(
    monkeypatch: pytest.MonkeyPatch,
    fake: FakeHTTP,
    api_key: str | None = "wa-test-key",
) -> WeatherAPIProvider:
    provider = WeatherAPIProvider(
        settings=make_settings(),
        logger=logging.getLogger("test_weatherapi"),
        api_key=api_key,
    )
    monkeypatch.setattr(provider._client, "get", fake)
    return provider


def test_current_conditions_normalize_and_convert_wind(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = {
        "location": LOCATION_BLOCK,
        "current": {
            "last_updated_epoch": 1703505600,
            "temp_c": 10.0,
            "temp_f": 50.0,
            "humidity": 87,
            "wind_kph": 18.0,
            "condition": {"text": "Light rain"},
        },
    }
    fake = FakeHTTP((200, payload))
    provider = _make_provider(monkeypatch, fake)

    report = provider.fetch("London, UK")

    url, params = fake.calls[0]
    assert url == "https://api.weatherapi.com/v1/current.json"
    assert params == {"key": "wa-test-key", "q": "London, UK", "aqi": "no"}
    assert report.kind == "current"
    assert report.provider == "wa"
    assert report.location == "London, UK"
    assert report.resolved_name == "London, United Kingdom"
    assert report.observed_at == datetime(2023, 12, 25, 12, 0, tzinfo=UTC)
    assert report.temperature == 10.0
    assert report.humidity == 87
    assert report.wind_speed == 5.0
    assert report.conditions == "Light rain"


def test_past_date_uses_history_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeHTTP((200, _day_payload("2023-12-25")))
    provider = _make_provider(monkeypatch, fake)

    report = provider.fetch("London, UK", date(2023, 12, 25))

    url, params = fake.calls[0]
    assert url == "https://api.weatherapi.com/v1/history.json"
    assert params["dt"] == "2023-12-25"
    assert report.kind == "historical"
    assert report.date == date(2023, 12, 25)
    assert report.temperature == 9.1
    assert report.humidity == 80
    assert report.wind_speed == 10.0
    assert report.conditions == "Overcast"


def test_future_date_uses_forecast_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    target = today_utc() + timedelta(days=3)
    fake = FakeHTTP((200, _day_payload(target.isoformat())))
    provider = _make_provider(monkeypatch, fake)

    report = provider.fetch("London, UK", target)

    url, params = fake.calls[0]
    assert url == "https://api.weatherapi.com/v1/forecast.json"
    assert params["dt"] == target.isoformat()
    assert params["days"] == 1
    assert report.kind == "forecast"
    assert report.date == target


def test_missing_humidity_is_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = _day_payload("2023-12-25")
    del payload["forecast"]["forecastday"][0]["day"]["avghumidity"]
    provider = _make_provider(monkeypatch, FakeHTTP((200, payload)))

    report = provider.fetch("London, UK", date(2023, 12, 25))
    assert report.humidity is None


@pytest.mark.parametrize(
    "requested",
    [date(2009, 12, 31), today_utc() + timedelta(days=15)],
)
def test_date_outside_window_raises_unsupported_date(
    monkeypatch: pytest.MonkeyPatch, requested: date
) -> None:
    fake = FakeHTTP()
    provider = _make_provider(monkeypatch, fake)

    with pytest.raises(UnsupportedDateError):
        provider.fetch("London, UK", requested)
    assert fake.calls == []


def test_unknown_location_error_code_raises_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    body = {"error": {"code": 1006, "message": "No matching location found."}}
    provider = _make_provider(monkeypatch, FakeHTTP((400, body)))

    with pytest.raises(NotFoundError, match="No matching location found"):
        provider.fetch("Atlantis")


@pytest.mark.parametrize(
    ("status", "code"),
    [(401, 2006), (401, 1002), (403, 2008), (403, 2009)],
)
def test_key_error_codes_raise_auth_error(
    monkeypatch: pytest.MonkeyPatch, status: int, code: int
) -> None:
    body = {"error": {"code": code, "message": "API key problem."}}
    provider = _make_provider(monkeypatch, FakeHTTP((status, body)))

    with pytest.raises(AuthError) as exc_info:
        provider.fetch("London, UK")
    assert exc_info.value.status_code == status


def test_unmapped_server_error_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    body = {"error": {"code": 9999, "message": "Internal application error."}}
    provider = _make_provider(monkeypatch, FakeHTTP((500, body)))

    with pytest.raises(TransportError) as exc_info:
        provider.fetch("London, UK")
    assert exc_info.value.status_code == 500


def test_empty_forecastday_raises_normalization_error(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = {"location": LOCATION_BLOCK, "forecast": {"forecastday": []}}
    provider = _make_provider(monkeypatch, FakeHTTP((200, payload)))

    with pytest.raises(NormalizationError, match="forecastday"):
        provider.fetch("London, UK", date(2023, 12, 25))


def test_missing_key_raises_auth_error(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeHTTP()
    provider = _make_provider(monkeypatch, fake, api_key="")

    with pytest.raises(AuthError):
        provider.fetch("London, UK")
    assert fake.calls == []


def test_out_of_range_timestamp_raises_normalization_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    payload = {
        "location": LOCATION_BLOCK,
        "current": {"last_updated_epoch": 10**20, "temp_c": 10.0},
    }
    provider = _make_provider(monkeypatch, FakeHTTP((200, payload)))

    with pytest.raises(NormalizationError, match="last_updated_epoch"):
        provider.fetch("London, UK")
