"""Base resolver interface and error hierarchy.

Every ecosystem resolver answers two questions:
1. can_resolve - does this resolver apply to a given manifest file?
2. resolve - produce one license Result per installed package.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from npmlicense.config import DepsConfig
    from npmlicense.resolvers.models import Report

logger = logging.getLogger("npmlicense.resolvers.base")


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================

class RecoverableError(Exception):
    """Base class for recoverable resolution errors.

    These errors indicate expected failure conditions; the resolver records
    them on the affected Result and moves on to the next package.
    """
    pass


class ManifestError(RecoverableError):
    """Package manifest could not be loaded."""
    pass


class MissingManifestError(ManifestError):
    """Manifest file does not exist or cannot be read."""
    pass


class MalformedManifestError(ManifestError):
    """Manifest content is not a valid package.json document.

    Raised for invalid JSON, non-UTF-8 content, a non-object top level, or
    fields of the wrong type (e.g. a numeric ``name``).
    """
    pass


class LicenseFileError(RecoverableError):
    """Package directory or a matching license file could not be read."""
    pass


class PackageListError(RecoverableError):
    """Installed package paths could not be listed."""
    pass


class PackageInstallError(RecoverableError):
    """Package installation failed or timed out."""
    pass


class BaseResolver(ABC):
    """Base class for dependency license resolvers."""

    NAME: str = "base"
    ECOSYSTEM: str = "base"

    @abstractmethod
    def can_resolve(self, filename: str) -> bool:
        """Check whether this resolver handles the given manifest file.

        Args:
            filename: Manifest file name or path.

        Returns:
            bool: True if the resolver applies.
        """
        raise NotImplementedError

    @abstractmethod
    def resolve(
        self,
        pkg_file: Path,
        config: Optional["DepsConfig"] = None,
        report: Optional["Report"] = None,
    ) -> "Report":
        """Resolve licenses for every dependency of the project owning ``pkg_file``.

        Args:
            pkg_file: Path to the project manifest.
            config: Dependency configuration.
            report: Report to accumulate into; a new one is created if omitted.

        Returns:
            Report: The populated report.
        """
        raise NotImplementedError
