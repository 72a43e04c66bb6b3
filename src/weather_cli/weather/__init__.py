"""Weather provider integrations."""

from .base import HTTPWeatherProvider, WeatherProvider
from .factory import create_provider, known_provider_ids, normalize_provider_id
from .mock import MockWeatherProvider
from .models import WeatherQuery, WeatherReport
from .openweather import OpenWeatherProvider
from .weatherapi import WeatherAPIProvider

__all__ = [
    "HTTPWeatherProvider",
    "MockWeatherProvider",
    "OpenWeatherProvider",
    "WeatherAPIProvider",
    "WeatherProvider",
    "WeatherQuery",
    "WeatherReport",
    "create_provider",
    "known_provider_ids",
    "normalize_provider_id",
]
