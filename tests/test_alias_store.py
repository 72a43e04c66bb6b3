"""Alias store: resolution, default handling, and validation."""

from __future__ import annotations

import pytest

from weather_cli.aliases import AliasStore
from weather_cli.exceptions import AliasValidationError, NoDefaultAliasError, UnknownAliasError


@pytest.mark.parametrize(
    ("name", "address"),
    [("home", "London, UK"), ("work", "Berlin"), ("nyc", "New York, USA")],
)
def test_resolve_returns_address_of_alias(name: str, address: str) -> None:
    store = AliasStore()
    store.set(name, address)
    assert store.resolve(name) == address


@pytest.mark.parametrize("token", ["Paris, FR", "somewhere unknown", "HOMEX"])
def test_unmatched_token_passes_through(token: str) -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    assert store.resolve(token) == token


def test_names_are_case_insensitive() -> None:
    store = AliasStore()
    store.set("Home", "London, UK")
    store.set("HOME", "Leeds, UK")

    assert len(store) == 1
    assert store.resolve("home") == "Leeds, UK"
    assert store.get("hOmE").name == "Home"


def test_first_alias_becomes_default() -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    store.set("work", "Berlin")

    assert store.default().name == "home"
    assert store.resolve(None) == "London, UK"


def test_set_default_moves_flag() -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    store.set("work", "Berlin")

    store.set_default("work")

    assert store.resolve() == "Berlin"
    assert [alias.is_default for alias in store.list()] == [False, True]


def test_set_default_for_missing_alias_raises() -> None:
    with pytest.raises(UnknownAliasError):
        AliasStore().set_default("home")


def test_removing_default_leaves_no_default() -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    store.set("work", "Berlin")

    removed = store.remove("home")

    assert removed.is_default is True
    assert store.default() is None
    with pytest.raises(NoDefaultAliasError):
        store.resolve(None)
    assert store.resolve("work") == "Berlin"


def test_remove_missing_alias_raises() -> None:
    with pytest.raises(UnknownAliasError):
        AliasStore().remove("home")


def test_padded_and_blank_tokens_are_not_trimmed() -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    assert store.resolve(" Paris, FR ") == " Paris, FR "
    assert store.resolve("   ") == "   "
    assert store.resolve(" HOME ") == "London, UK"


def test_from_dict_rejects_invalid_names() -> None:
    with pytest.raises(AliasValidationError):
        AliasStore.from_dict({"toolong": {"address": "London"}})


@pytest.mark.parametrize(
    ("name", "address"),
    [("", "London"), ("toolong", "London"), ("a b", "London"), ("home", "  ")],
)
def test_invalid_alias_rejected(name: str, address: str) -> None:
    with pytest.raises(AliasValidationError):
        AliasStore().set(name, address)


def test_dict_round_trip_preserves_flags() -> None:
    store = AliasStore()
    store.set("home", "London, UK")
    store.set("work", "Berlin")
    store.set_default("work")

    restored = AliasStore.from_dict(store.to_dict())
    assert restored.to_dict() == store.to_dict()
    assert restored.default().name == "work"
