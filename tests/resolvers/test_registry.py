"""Tests for the resolver registry."""

from __future__ import annotations

import npmlicense.resolvers  # noqa: F401  (registers the npm resolver)
from npmlicense.resolvers.npm.resolver import NpmResolver
from npmlicense.resolvers.registry import ResolverRegistry


def test_npm_resolver_is_registered() -> None:
    """Importing the resolvers package registers npm."""
    registry = ResolverRegistry.get_instance()

    assert "npm" in registry.list_ecosystems()
    assert registry.get("npm") is NpmResolver


def test_find_for_file() -> None:
    """package.json maps to the npm resolver; other files to nothing."""
    registry = ResolverRegistry.get_instance()

    assert isinstance(registry.find_for_file("package.json"), NpmResolver)
    assert registry.find_for_file("Cargo.toml") is None


def test_register_overrides_existing() -> None:
    """Registering twice keeps the latest class."""
    registry = ResolverRegistry()

    class Other(NpmResolver):
        pass

    registry.register("npm", NpmResolver)
    registry.register("npm", Other)

    assert registry.get("npm") is Other
    assert registry.list_ecosystems() == ["npm"]
