"""NPM ecosystem license resolution.

This package provides:
- Architecture normalization and platform-specific package detection
- package.json license / licenses field resolution
- package.json and LICENSE file reading
- npm CLI and node_modules walking collaborators
- The NpmResolver pipeline tying them together
"""

from npmlicense.resolvers.npm.arch import normalize_arch
from npmlicense.resolvers.npm.license_field import (
    resolve_license_field,
    resolve_licenses_field,
)
from npmlicense.resolvers.npm.manifest import PKG_FILE_NAME, parse_pkg_file, resolve_lcs_file
from npmlicense.resolvers.npm.package_manager import NodeModulesWalker, NpmCli, PackageManager
from npmlicense.resolvers.npm.platforms import (
    HostPlatform,
    analyze_package_platform,
    is_for_current_platform,
)
from npmlicense.resolvers.npm.resolver import NpmResolver

__all__ = [
    "PKG_FILE_NAME",
    "HostPlatform",
    "NodeModulesWalker",
    "NpmCli",
    "NpmResolver",
    "PackageManager",
    "analyze_package_platform",
    "is_for_current_platform",
    "normalize_arch",
    "parse_pkg_file",
    "resolve_lcs_file",
    "resolve_license_field",
    "resolve_licenses_field",
]
