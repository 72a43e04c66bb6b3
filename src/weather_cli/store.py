"""JSON persistence for the provider registry and alias store."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .aliases import AliasStore
from .config import Settings
from .exceptions import ConfigError, SelectionError
from .log_setup import LOGGER_NAME
from .registry import ProviderRegistry


class _StoredProvider(BaseModel):
    api_key: str | None = None
    is_default: bool = False


class _StoredAlias(BaseModel):
    address: str
    is_default: bool = False


class _StoredConfig(BaseModel):
    """On-disk schema of the configuration file."""

    providers: dict[str, _StoredProvider] = Field(default_factory=dict)
    aliases: dict[str, _StoredAlias] = Field(default_factory=dict)


class ConfigStore:
    """Owns the ProviderRegistry and AliasStore for the process lifetime.

    Load once at startup, then wrap every mutating command in ``mutate()`` so
    the change is on disk before anything reads it again. Not thread-safe.
    """

    def __init__(
        self,
        path: Path,
        providers: ProviderRegistry | None = None,
        aliases: AliasStore | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.path = path
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        if providers is None:
            providers = ProviderRegistry(logger=self.logger)
        self.providers = providers
        self.aliases = aliases if aliases is not None else AliasStore()

    @classmethod
    def load(
        cls,
        path: Path,
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> ConfigStore:
        """Read ``path``; a missing file yields empty stores."""
        logger = logger or logging.getLogger(LOGGER_NAME)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Config file not found at %s, starting empty.", path)
            return cls(
                path,
                providers=ProviderRegistry(settings=settings, logger=logger),
                logger=logger,
            )
        except UnicodeDecodeError as exc:
            raise ConfigError(f"Config file {path} is malformed: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Failed reading config file {path}: {exc}") from exc

        try:
            stored = _StoredConfig.model_validate(json.loads(text))
            providers = ProviderRegistry.from_dict(
                {key: value.model_dump() for key, value in stored.providers.items()},
                settings=settings,
                logger=logger,
            )
            aliases = AliasStore.from_dict(
                {key: value.model_dump() for key, value in stored.aliases.items()}
            )
        except (ValueError, ValidationError, SelectionError) as exc:
            raise ConfigError(f"Config file {path} is malformed: {exc}") from exc

        logger.debug(
            "Loaded config from %s (%d providers, %d aliases).",
            path,
            len(providers.list()),
            len(aliases),
        )
        return cls(path, providers=providers, aliases=aliases, logger=logger)

    def to_dict(self) -> dict[str, Any]:
        return {"providers": self.providers.to_dict(), "aliases": self.aliases.to_dict()}

    def save(self) -> None:
        """Write the config atomically: temp file, fsync, then rename over ``path``."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(self.to_dict(), fh, ensure_ascii=False, indent=2)
                fh.write("\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                self.logger.debug("Failed to remove temporary file %s", tmp_path)
            raise ConfigError(f"Failed writing config file {self.path}: {exc}") from exc
        self.logger.debug("Saved config to %s", self.path)

    @contextmanager
    def mutate(self) -> Iterator[ConfigStore]:
        """Yield the store and save it if the block completes without error."""
        yield self
        self.save()
