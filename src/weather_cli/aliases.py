"""Short location aliases, e.g. "home" -> "London, UK"."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from .exceptions import AliasValidationError, NoDefaultAliasError, UnknownAliasError

MAX_ALIAS_LENGTH = 5


class Alias(BaseModel):
    """A named address, optionally the default location."""

    name: str
    address: str
    is_default: bool = False


def _key(name: str) -> str:
    return name.strip().casefold()


class AliasStore:
    """Mapping of alias name to Alias; names compare case-insensitively.

    Invariant: at most one alias is the default. The first alias added while
    no default exists becomes the default.
    """

    def __init__(self, aliases: Iterable[Alias] = ()) -> None:
        self._aliases: dict[str, Alias] = {}
        for alias in aliases:
            key = _key(alias.name)
            if key in self._aliases:
                raise ValueError(f"Duplicate alias name: '{alias.name}'")
            self._aliases[key] = alias
        defaults = [alias.name for alias in self._aliases.values() if alias.is_default]
        if len(defaults) > 1:
            raise ValueError(f"More than one default alias configured: {defaults}")

    def __len__(self) -> int:
        return len(self._aliases)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._aliases

    def list(self) -> list[Alias]:
        return list(self._aliases.values())

    def get(self, name: str) -> Alias | None:
        return self._aliases.get(_key(name))

    def default(self) -> Alias | None:
        return next((alias for alias in self._aliases.values() if alias.is_default), None)

    def set(self, name: str, address: str) -> Alias:
        """Create or update an alias; it becomes default if no default exists."""
        name = self._validate_name(name)
        address = address.strip() if address else ""
        if not address:
            raise AliasValidationError("Address cannot be empty. Use --address <ADDRESS>")

        alias = self._aliases.get(_key(name))
        if alias is None:
            alias = Alias(name=name, address=address)
            self._aliases[_key(name)] = alias
        else:
            alias.address = address
        if self.default() is None:
            alias.is_default = True
        return alias

    def set_default(self, name: str) -> Alias:
        alias = self._require(name)
        for other in self._aliases.values():
            other.is_default = False
        alias.is_default = True
        return alias

    def remove(self, name: str) -> Alias:
        """Delete an alias. Removing the default leaves no default alias."""
        alias = self._require(name)
        del self._aliases[_key(name)]
        return alias

    def resolve(self, token: str | None = None) -> str:
        """Turn a user token into an address.

        Known alias names map to their address, a missing token maps to the
        default alias, and any other text is returned as a literal address.
        """
        if token is None:
            alias = self.default()
            if alias is None:
                raise NoDefaultAliasError(
                    "No location specified and no default alias found. "
                    "Pass a location or set a default alias with 'weather alias <NAME>'."
                )
            return alias.address

        alias = self._aliases.get(_key(token))
        if alias is not None:
            return alias.address
        return token

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {
            alias.name: alias.model_dump(exclude={"name"}) for alias in self._aliases.values()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AliasStore:
        return cls(
            Alias(name=cls._validate_name(name), **values) for name, values in data.items()
        )

    def _require(self, name: str) -> Alias:
        alias = self._aliases.get(_key(name))
        if alias is None:
            raise UnknownAliasError(f"Alias '{name}' not found.")
        return alias

    @staticmethod
    def _validate_name(name: str) -> str:
        name = name.strip() if name else ""
        if not name or len(name) > MAX_ALIAS_LENGTH or any(ch.isspace() for ch in name):
            raise AliasValidationError(
                f"Alias must be 1 to {MAX_ALIAS_LENGTH} characters long without spaces."
            )
        return name
