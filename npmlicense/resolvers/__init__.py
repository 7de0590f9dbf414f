"""Resolvers package.

Ecosystem license resolvers are registered from here.
"""

import logging

from npmlicense.resolvers.registry import register_resolver

logger = logging.getLogger("npmlicense.resolvers")

from npmlicense.resolvers.npm.resolver import NpmResolver  # noqa: E402

register_resolver(NpmResolver.ECOSYSTEM, NpmResolver)
logger.debug("Registered resolvers: %s", NpmResolver.ECOSYSTEM)

__all__ = ["NpmResolver"]
