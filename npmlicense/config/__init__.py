"""Configuration schema and loading for npmlicense."""

from .loader import ConfigError, load_deps_config
from .schema import (
    DepsConfig,
    ExcludeRule,
    HostConfig,
    InstallConfig,
    LicenseOverride,
)

__all__ = [
    "ConfigError",
    "DepsConfig",
    "ExcludeRule",
    "HostConfig",
    "InstallConfig",
    "LicenseOverride",
    "load_deps_config",
]
