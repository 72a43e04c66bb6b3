"""Orchestrates a weather lookup: alias -> provider -> fetch -> report."""

from __future__ import annotations

import logging
from datetime import date
from typing import Literal

from .aliases import AliasStore
from .log_setup import LOGGER_NAME
from .registry import ProviderRegistry
from .weather.models import WeatherQuery, WeatherReport

QueryState = Literal[
    "idle",
    "resolving_alias",
    "selecting_provider",
    "dispatching",
    "normalizing",
    "done",
    "failed",
]


class QueryResolver:
    """Runs one query through the resolution stages.

    Holds no persisted state; it only reads the registry and alias store. Any
    stage failure moves the resolver to ``failed`` and re-raises the original
    exception unchanged.
    """

    def __init__(
        self,
        providers: ProviderRegistry,
        aliases: AliasStore,
        logger: logging.Logger | None = None,
    ) -> None:
        self.providers = providers
        self.aliases = aliases
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.state: QueryState = "idle"
        self.failed_in: QueryState | None = None

    def get(
        self,
        token: str | None = None,
        *,
        date: date | None = None,
        provider: str | None = None,
    ) -> WeatherReport:
        """Resolve ``token`` and return the normalized report from the chosen provider."""
        self.failed_in = None
        try:
            self._enter("resolving_alias")
            address = self.aliases.resolve(token)

            self._enter("selecting_provider")
            weather_provider = self.providers.resolve(provider)

            with weather_provider:
                self.logger.info(
                    "Fetching weather from '%s' for '%s'%s.",
                    weather_provider.display_name,
                    address,
                    f" on {date.isoformat()}" if date else "",
                )
                query = WeatherQuery(location=address, date=date)
                self._enter("dispatching")
                raw = weather_provider.fetch_raw(query)

                self._enter("normalizing")
                report = weather_provider.normalize(query, raw)
        except Exception:
            self.failed_in = self.state
            self._enter("failed")
            raise

        self._enter("done")
        return report

    def _enter(self, state: QueryState) -> None:
        self.logger.debug("Query state %s -> %s", self.state, state)
        self.state = state
