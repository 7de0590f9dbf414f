"""Data models shared by the license resolvers.

Package and Result are plain dataclasses owned by the resolver pipeline;
LicenseEntry and Manifest are pydantic models validated from package.json
content.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

UNKNOWN_LICENSE = "Unknown"


@dataclass(frozen=True)
class Package:
    """One installed dependency.

    Attributes:
        name: Final segment of ``path``.
        path: Package directory as emitted by the package lister.
    """

    name: str
    path: str


@dataclass
class Result:
    """License resolution outcome for a single package.

    A cross-platform package is never inspected, so it can never carry a
    license id.
    """

    package_name: str
    path: str
    license_spdx_id: str = ""
    license_content: str = ""
    license_file_path: str = ""
    is_cross_platform: bool = False
    version: str = ""
    resolve_errors: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.is_cross_platform and self.license_spdx_id:
            raise ValueError(
                f"cross-platform result for {self.package_name} cannot carry "
                f"license id {self.license_spdx_id!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable mapping of this result."""
        return asdict(self)


class FieldResolution(NamedTuple):
    """Outcome of resolving a manifest license field."""

    spdx_id: str
    ok: bool


NO_LICENSE = FieldResolution("", False)


class LicenseEntry(BaseModel):
    """One element of the legacy ``licenses`` array."""

    model_config = ConfigDict(extra="ignore")

    type: str = ""
    url: Optional[str] = None


class Manifest(BaseModel):
    """Parsed package.json metadata.

    ``license`` and ``licenses`` keep their raw JSON shape; the field
    resolvers decide what is usable.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    version: str = ""
    license: Any = None
    licenses: Any = None


@dataclass
class Report:
    """Accumulates per-package results for a project."""

    resolved: List[Result] = field(default_factory=list)
    skipped: List[Result] = field(default_factory=list)
    cross_platform: List[Result] = field(default_factory=list)

    def resolve(self, result: Result) -> None:
        self.resolved.append(result)

    def skip(self, result: Result) -> None:
        self.skipped.append(result)

    def skip_cross_platform(self, result: Result) -> None:
        self.cross_platform.append(result)

    def summary(self) -> Dict[str, int]:
        return {
            "resolved": len(self.resolved),
            "skipped": len(self.skipped),
            "cross_platform": len(self.cross_platform),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable mapping of the whole report."""
        return {
            "summary": self.summary(),
            "resolved": [r.to_dict() for r in self.resolved],
            "skipped": [r.to_dict() for r in self.skipped],
            "cross_platform": [r.to_dict() for r in self.cross_platform],
        }


__all__ = [
    "UNKNOWN_LICENSE",
    "Package",
    "Result",
    "FieldResolution",
    "NO_LICENSE",
    "LicenseEntry",
    "Manifest",
    "Report",
]
