"""Configured weather providers and default-provider selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from .config import Settings, load_settings
from .exceptions import NoDefaultProviderError, UnknownProviderError
from .log_setup import LOGGER_NAME
from .weather.base import WeatherProvider
from .weather.factory import (
    MOCK_PROVIDER_ID,
    create_provider,
    normalize_provider_id,
    provider_display_name,
)


class ProviderConfig(BaseModel):
    """Stored credentials and default flag for one provider."""

    id: str
    api_key: str | None = None
    is_default: bool = False

    @property
    def has_key(self) -> bool:
        return bool(self.api_key)


class ProviderRegistry:
    """Ordered mapping of provider id to ProviderConfig.

    Invariant: at most one config has ``is_default`` set. The first provider to
    receive a key while no default exists becomes the default; an existing
    default is never replaced implicitly.
    """

    def __init__(
        self,
        configs: Iterable[ProviderConfig] = (),
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._configs: dict[str, ProviderConfig] = {}
        self.settings = settings
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        for config in configs:
            self._configs[normalize_provider_id(config.id)] = config
        self._check_single_default()

    def list(self) -> list[ProviderConfig]:
        return list(self._configs.values())

    def get(self, provider_id: str) -> ProviderConfig | None:
        return self._configs.get(normalize_provider_id(provider_id))

    def default(self) -> ProviderConfig | None:
        return next((config for config in self._configs.values() if config.is_default), None)

    def set_key(self, provider_id: str, api_key: str) -> ProviderConfig:
        """Store ``api_key`` for the provider; it becomes default if none is set."""
        canonical = normalize_provider_id(provider_id)
        if not api_key or not api_key.strip():
            raise ValueError("API key must not be empty; use clear_key() to remove a key.")

        config = self._configs.get(canonical)
        if config is None:
            config = ProviderConfig(id=canonical)
            self._configs[canonical] = config
        config.api_key = api_key.strip()
        if self.default() is None:
            config.is_default = True
            self.logger.info("Provider '%s' set as default.", canonical)
        return config

    def clear_key(self, provider_id: str) -> ProviderConfig:
        """Drop the stored key. A default provider stays default but fails auth on use."""
        canonical = normalize_provider_id(provider_id)
        config = self._configs.get(canonical)
        if config is None:
            raise UnknownProviderError(
                f"Provider '{provider_display_name(canonical)}' ({canonical}) is not configured."
            )
        config.api_key = None
        if config.is_default and canonical != MOCK_PROVIDER_ID:
            self.logger.warning(
                "Default provider '%s' has no API key; queries will fail until re-keyed.",
                canonical,
            )
        return config

    def set_default(self, provider_id: str) -> ProviderConfig:
        canonical = normalize_provider_id(provider_id)
        config = self._configs.get(canonical)
        if config is None:
            if canonical != MOCK_PROVIDER_ID:
                raise UnknownProviderError(
                    f"Provider '{provider_display_name(canonical)}' ({canonical}) has no API "
                    f"key. Set it first using: 'weather provider {canonical} --key <API_KEY>'"
                )
            config = ProviderConfig(id=canonical)
            self._configs[canonical] = config

        for other in self._configs.values():
            other.is_default = False
        config.is_default = True
        return config

    def select(self, override: str | None = None) -> ProviderConfig:
        """Pick the config for a query: the override if given, else the default."""
        if override is not None and override.strip():
            canonical = normalize_provider_id(override)
            return self._configs.get(canonical) or ProviderConfig(id=canonical)

        config = self.default()
        if config is None:
            raise NoDefaultProviderError(
                "No provider specified and no default provider configured. "
                "Use --provider <ID> or 'weather provider <ID> --key <API_KEY>'."
            )
        return config

    def resolve(self, override: str | None = None) -> WeatherProvider:
        """Build the provider instance for a query.

        A provider without a stored key is still returned; it raises AuthError
        when fetched so the failure surfaces at dispatch time.
        """
        config = self.select(override)
        settings = self.settings
        if settings is None and config.id != MOCK_PROVIDER_ID:
            settings = self.settings = load_settings()
        return create_provider(
            config.id,
            api_key=config.api_key,
            settings=settings,
            logger=self.logger,
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {
            provider_id: config.model_dump(exclude={"id"})
            for provider_id, config in self._configs.items()
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> ProviderRegistry:
        configs = [ProviderConfig(id=provider_id, **values) for provider_id, values in data.items()]
        return cls(configs, settings=settings, logger=logger)

    def _check_single_default(self) -> None:
        defaults = [config.id for config in self._configs.values() if config.is_default]
        if len(defaults) > 1:
            raise ValueError(f"More than one default provider configured: {defaults}")
