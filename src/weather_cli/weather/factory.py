"""Known provider ids and construction of provider instances."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import UnknownProviderError
from .base import WeatherProvider
from .mock import MockWeatherProvider
from .openweather import OpenWeatherProvider
from .weatherapi import WeatherAPIProvider

PROVIDER_CLASSES: dict[str, type[WeatherProvider]] = {
    OpenWeatherProvider.provider_id: OpenWeatherProvider,
    WeatherAPIProvider.provider_id: WeatherAPIProvider,
    MockWeatherProvider.provider_id: MockWeatherProvider,
}

MOCK_PROVIDER_ID = MockWeatherProvider.provider_id


def known_provider_ids() -> list[str]:
    return list(PROVIDER_CLASSES)


def provider_display_name(provider_id: str) -> str:
    return PROVIDER_CLASSES[provider_id].display_name


def normalize_provider_id(value: str) -> str:
    """Map an id or display name (any case) to its canonical provider id."""
    token = value.strip().lower()
    for provider_id, provider_cls in PROVIDER_CLASSES.items():
        if token in (provider_id, provider_cls.display_name.lower()):
            return provider_id
    available = ", ".join(
        f"'{cls.display_name}' ({provider_id})" for provider_id, cls in PROVIDER_CLASSES.items()
    )
    raise UnknownProviderError(
        f"Unknown provider: '{value}'. Available providers: {available}"
    )


def create_provider(
    provider_id: str,
    *,
    api_key: str | None,
    settings: Any,
    logger: logging.Logger,
) -> WeatherProvider:
    """Instantiate the provider registered under ``provider_id``."""
    canonical = normalize_provider_id(provider_id)
    if canonical == MOCK_PROVIDER_ID:
        return MockWeatherProvider(logger=logger, api_key=api_key)
    provider_cls = PROVIDER_CLASSES[canonical]
    return provider_cls(settings=settings, logger=logger, api_key=api_key)  # type: ignore[call-arg]
