"""Configuration schema definitions using Pydantic for validation.

The dependency configuration is handed to the resolver as a whole; only the
options documented on each model influence resolution.
"""

import fnmatch
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class LicenseOverride(BaseModel):
    """Manually declared license for a package.

    Attributes:
        name: Package name as declared in its manifest.
        license: SPDX id to report.
        version: Only apply to this exact version when set.
    """

    name: str
    license: str
    version: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "license")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty names and license ids."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    def matches(self, name: str, version: str) -> bool:
        if self.name != name:
            return False
        return self.version is None or self.version == version


class ExcludeRule(BaseModel):
    """Packages left out of the report.

    Rules are checked against both the installed directory name and the
    scoped name (``@types/node``), so ``@types/*`` and ``node`` both
    exclude ``@types/node``.

    Attributes:
        name: Exact package name or fnmatch-style glob.
    """

    name: str

    model_config = {"extra": "forbid"}

    def matches(self, name: str) -> bool:
        return self.name == name or fnmatch.fnmatchcase(name, self.name)


class InstallConfig(BaseModel):
    """Options for the package installation step.

    Attributes:
        skip: Never run the installer.
        prompt_timeout: Seconds to wait for an interactive skip answer.
        timeout: Seconds before an install is abandoned.
    """

    skip: bool = False
    prompt_timeout: float = Field(default=5.0, ge=0.0, le=300.0)
    timeout: float = Field(default=600.0, gt=0.0)

    model_config = {"extra": "allow"}


class HostConfig(BaseModel):
    """Override of the detected host platform (e.g. for cross-auditing)."""

    os: Optional[str] = None
    arch: Optional[str] = None

    model_config = {"extra": "forbid"}


class DepsConfig(BaseModel):
    """Top-level dependency license configuration.

    Attributes:
        licenses: Manual license declarations.
        excludes: Packages to leave out of the report.
        install: Installation step options.
        list_timeout: Seconds allowed for listing installed packages.
        workers: Number of packages resolved concurrently.
        host: Host platform override.
    """

    licenses: List[LicenseOverride] = Field(default_factory=list)
    excludes: List[ExcludeRule] = Field(default_factory=list)
    install: InstallConfig = Field(default_factory=InstallConfig)
    list_timeout: float = Field(default=120.0, gt=0.0)
    workers: int = Field(default=1, ge=1, le=64)
    host: HostConfig = Field(default_factory=HostConfig)

    model_config = {"extra": "allow"}  # Allow extra fields for extensibility

    def license_override(self, name: str, version: str) -> Optional[str]:
        """Return the configured license for a package, if any."""
        for override in self.licenses:
            if override.matches(name, version):
                return override.license
        return None

    def is_excluded(self, name: str) -> bool:
        return any(rule.matches(name) for rule in self.excludes)
