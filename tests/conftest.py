"""Shared fixtures for weather_cli tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from weather_cli.log_setup import LOGGER_NAME


def make_settings(**overrides: Any) -> Any:
    defaults = {
        "http_timeout_seconds": 5.0,
        "user_agent": "weather-cli-tests/0.1",
        "openweather_base_url": "https://api.openweathermap.org",
        "weatherapi_base_url": "https://api.weatherapi.com",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


class FakeHTTP:
    """Replacement for httpx.Client.get returning queued responses."""

    def __init__(self, *responses: tuple[int, Any]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        self.calls.append((url, dict(params or {})))
        request = httpx.Request("GET", url, params=params)
        status, body = self._responses.pop(0)
        if isinstance(body, str):
            return httpx.Response(status, request=request, text=body)
        return httpx.Response(status, request=request, json=body)


@pytest.fixture(autouse=True)
def reset_app_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
