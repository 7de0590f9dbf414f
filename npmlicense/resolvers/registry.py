"""Resolver registry.

Ecosystems register their resolver class here; the CLI asks the registry
which resolver handles a given manifest file.
"""

import logging
from typing import Dict, List, Optional, Type

from npmlicense.resolvers.base import BaseResolver

logger = logging.getLogger("npmlicense.resolvers.registry")


class ResolverRegistry:
    """Global registry of ecosystem resolvers."""

    _instance: Optional["ResolverRegistry"] = None

    def __init__(self) -> None:
        """Initialize the registry."""
        # ecosystem -> Resolver class
        self._resolvers: Dict[str, Type[BaseResolver]] = {}

    @classmethod
    def get_instance(cls) -> "ResolverRegistry":
        """Get singleton instance.

        Returns:
            ResolverRegistry: Global registry instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, ecosystem: str, resolver_class: Type[BaseResolver]) -> None:
        """Register a resolver for an ecosystem.

        Args:
            ecosystem: Ecosystem identifier.
            resolver_class: Resolver class.
        """
        if ecosystem in self._resolvers:
            logger.warning("Overriding existing resolver for ecosystem: %s", ecosystem)
        self._resolvers[ecosystem] = resolver_class
        logger.debug("Registered resolver for %s: %s", ecosystem, resolver_class.__name__)

    def get(self, ecosystem: str) -> Optional[Type[BaseResolver]]:
        return self._resolvers.get(ecosystem)

    def find_for_file(self, filename: str, **kwargs) -> Optional[BaseResolver]:
        """Instantiate the first resolver that can handle ``filename``.

        Args:
            filename: Manifest file name or path.
            **kwargs: Passed to the resolver constructor.

        Returns:
            Optional[BaseResolver]: Resolver instance, or None.
        """
        for ecosystem in self.list_ecosystems():
            resolver = self._resolvers[ecosystem](**kwargs)
            if resolver.can_resolve(filename):
                logger.debug("Resolver %s handles %s", ecosystem, filename)
                return resolver
        return None

    def list_ecosystems(self) -> List[str]:
        return sorted(self._resolvers)


def register_resolver(ecosystem: str, resolver_class: Type[BaseResolver]) -> None:
    """Register a resolver with the global registry."""
    ResolverRegistry.get_instance().register(ecosystem, resolver_class)
