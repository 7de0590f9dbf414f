"""npm dependency license resolver.

Pipeline per installed package:

    classify by name -> (foreign platform) skip without I/O
                     -> read package.json -> license / licenses field
                     -> attach LICENSE file text as evidence
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Union

from npmlicense.config import DepsConfig
from npmlicense.resolvers.base import (
    BaseResolver,
    LicenseFileError,
    ManifestError,
    PackageInstallError,
    PackageListError,
)
from npmlicense.resolvers.models import Manifest, Package, Report, Result
from npmlicense.resolvers.npm.license_field import resolve_manifest_license
from npmlicense.resolvers.npm.manifest import PKG_FILE_NAME, parse_pkg_file, resolve_lcs_file
from npmlicense.resolvers.npm.package_manager import NODE_MODULES, NpmCli, PackageManager
from npmlicense.resolvers.npm.platforms import HostPlatform

logger = logging.getLogger("npmlicense.resolvers.npm.resolver")


class NpmResolver(BaseResolver):
    """Resolves licenses of the packages installed in an npm project."""

    NAME = "npm_resolver"
    ECOSYSTEM = "npm"

    def __init__(
        self,
        package_manager: Optional[PackageManager] = None,
        host: Optional[HostPlatform] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            package_manager: Lister/installer collaborator; ``NpmCli`` by default.
            host: Host platform used for classification; detected when omitted.
        """
        self.package_manager = package_manager if package_manager is not None else NpmCli()
        self.host = host if host is not None else HostPlatform.current()

    @classmethod
    def from_config(
        cls,
        config: DepsConfig,
        package_manager: Optional[PackageManager] = None,
    ) -> "NpmResolver":
        """Build a resolver whose collaborators follow ``config``."""
        if package_manager is None:
            package_manager = NpmCli(
                skip_install=config.install.skip,
                prompt_timeout=config.install.prompt_timeout,
                install_timeout=config.install.timeout,
                list_timeout=config.list_timeout,
            )
        host = HostPlatform.from_overrides(config.host.os, config.host.arch)
        return cls(package_manager=package_manager, host=host)

    def can_resolve(self, filename: str) -> bool:
        return os.path.basename(str(filename)) == PKG_FILE_NAME

    def get_installed_pkgs(self, root_dir: Union[str, Path]) -> List[Package]:
        """List the installed packages under ``root_dir``.

        Args:
            root_dir: The project's ``node_modules`` directory.

        Returns:
            List[Package]: Packages in the order the lister emitted them.
        """
        root_dir = Path(root_dir)
        try:
            output = self.package_manager.list_pkg_paths(root_dir)
        except PackageListError as e:
            logger.error("Failed to list installed packages under %s: %s", root_dir, e)
            return []

        # npm ls --parseable starts with the project directory itself.
        ignored = {os.path.normpath(str(root_dir)), os.path.normpath(str(root_dir.parent))}

        pkgs: List[Package] = []
        for line in (output or "").splitlines():
            pkg_path = line.strip()
            if not pkg_path or os.path.normpath(pkg_path) in ignored:
                continue
            name = os.path.basename(pkg_path.rstrip("/\\"))
            pkgs.append(Package(name=name, path=pkg_path))

        logger.debug("Found %d installed package(s) under %s", len(pkgs), root_dir)
        return pkgs

    def resolve_package_license(
        self,
        pkg_name: str,
        pkg_path: Union[str, Path],
        config: Optional[DepsConfig] = None,
    ) -> Result:
        """Resolve the license of one installed package.

        Packages built for another platform are reported as cross-platform
        without touching ``pkg_path``. Any read failure degrades the result
        instead of raising.

        Args:
            pkg_name: Package name.
            pkg_path: Package directory.
            config: Dependency configuration.

        Returns:
            Result: The resolution outcome.
        """
        pkg_path = str(pkg_path)
        if not self.host.matches(pkg_name):
            logger.debug(
                "Skipping %s: built for another platform than %s/%s",
                pkg_name,
                self.host.os,
                self.host.arch,
            )
            return Result(package_name=pkg_name, path=pkg_path, is_cross_platform=True)

        result = Result(package_name=pkg_name, path=pkg_path)

        manifest_path = Path(pkg_path) / PKG_FILE_NAME
        try:
            manifest = parse_pkg_file(manifest_path)
        except ManifestError as e:
            logger.debug("No usable manifest for %s: %s", pkg_name, e)
            result.resolve_errors.append(str(e))
            manifest = Manifest()

        result.version = manifest.version

        override = None
        if isinstance(config, DepsConfig):
            override = config.license_override(manifest.name or pkg_name, manifest.version)
        if override:
            result.license_spdx_id = override
        else:
            resolution = resolve_manifest_license(manifest)
            if resolution.ok:
                result.license_spdx_id = resolution.spdx_id
            elif manifest_path.exists():
                result.resolve_errors.append(f"cannot parse license field in {manifest_path}")

        try:
            resolve_lcs_file(result, pkg_path, config)
        except LicenseFileError as e:
            logger.debug("No license file for %s: %s", pkg_name, e)
            result.resolve_errors.append(str(e))

        return result

    def resolve(
        self,
        pkg_file: Union[str, Path],
        config: Optional[DepsConfig] = None,
        report: Optional[Report] = None,
    ) -> Report:
        """Resolve licenses for every installed dependency of a project.

        Args:
            pkg_file: Path to the project's package.json.
            config: Dependency configuration.
            report: Report to accumulate into.

        Returns:
            Report: The populated report.

        Raises:
            ValueError: If ``pkg_file`` is not a package.json.
        """
        pkg_file = Path(pkg_file)
        if not self.can_resolve(pkg_file.name):
            raise ValueError(f"{pkg_file} is not a {PKG_FILE_NAME} file")

        if not isinstance(config, DepsConfig):
            config = DepsConfig()
        report = report if report is not None else Report()
        project_dir = pkg_file.parent

        if self.package_manager.need_skip_install_pkgs():
            logger.info("Package installation skipped for %s", project_dir)
        else:
            try:
                self.package_manager.install_pkgs(project_dir)
            except PackageInstallError as e:
                logger.error("Failed to install packages in %s: %s", project_dir, e)

        pkgs = [
            pkg
            for pkg in self.get_installed_pkgs(project_dir / NODE_MODULES)
            if not self._excluded(pkg, config)
        ]
        logger.info("Resolving licenses of %d package(s) in %s", len(pkgs), project_dir)

        for result in self._resolve_all(pkgs, config):
            if result.is_cross_platform:
                report.skip_cross_platform(result)
            elif result.license_spdx_id:
                report.resolve(result)
            else:
                logger.warning(
                    "Failed to resolve the license of %s: %s",
                    result.package_name,
                    "; ".join(result.resolve_errors) or "no license declared",
                )
                report.skip(result)

        return report

    def _resolve_all(self, pkgs: List[Package], config: DepsConfig) -> List[Result]:
        if config.workers <= 1 or len(pkgs) <= 1:
            return [self.resolve_package_license(p.name, p.path, config) for p in pkgs]

        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            # map() yields in submission order, keeping the report deterministic.
            return list(
                pool.map(lambda p: self.resolve_package_license(p.name, p.path, config), pkgs)
            )

    @staticmethod
    def _excluded(pkg: Package, config: DepsConfig) -> bool:
        scoped = _scoped_name(pkg)
        if config.is_excluded(pkg.name) or config.is_excluded(scoped):
            logger.debug("Excluding %s (configured)", scoped)
            return True
        return False


def _scoped_name(pkg: Package) -> str:
    """Return ``@scope/name`` for packages installed under a scope directory."""
    pkg_dir = Path(pkg.path.rstrip("/\\"))
    if pkg_dir.parent.name.startswith("@"):
        return f"{pkg_dir.parent.name}/{pkg_dir.name}"
    return pkg.name


__all__ = ["NpmResolver"]
