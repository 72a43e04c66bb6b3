"""Application exception classes."""

from __future__ import annotations


class WeatherCLIError(Exception):
    """Base class for every error raised by weather_cli."""


class ConfigError(WeatherCLIError):
    """Raised when settings or the persisted configuration file are invalid."""


class SelectionError(WeatherCLIError):
    """Raised when a provider or alias cannot be selected."""


class UnknownProviderError(SelectionError):
    """Raised for provider ids that are not known or not configured."""


class NoDefaultProviderError(SelectionError):
    """Raised when no provider was requested and none is marked default."""


class UnknownAliasError(SelectionError):
    """Raised when an alias name is not present in the alias store."""


class NoDefaultAliasError(SelectionError):
    """Raised when no location was given and no default alias exists."""


class AliasValidationError(SelectionError):
    """Raised when an alias name or address fails validation."""


class WeatherProviderError(WeatherCLIError):
    """Raised when weather provider requests or normalization fail."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class AuthError(WeatherProviderError):
    """Raised when the provider API key is missing or rejected."""


class NotFoundError(WeatherProviderError):
    """Raised when the provider cannot find the requested location."""


class UnsupportedDateError(WeatherProviderError):
    """Raised when a date falls outside the provider's supported window."""


class TransportError(WeatherProviderError):
    """Raised for network failures, timeouts and unexpected HTTP statuses."""


class NormalizationError(WeatherProviderError):
    """Raised when a provider response cannot be mapped to a WeatherReport."""
