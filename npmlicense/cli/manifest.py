"""Manifest command: inspect the license metadata of a single package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from npmlicense.resolvers.base import ManifestError
from npmlicense.resolvers.models import UNKNOWN_LICENSE
from npmlicense.resolvers.npm.license_field import resolve_manifest_license
from npmlicense.resolvers.npm.manifest import PKG_FILE_NAME, parse_pkg_file
from npmlicense.resolvers.npm.platforms import analyze_package_platform

logger = logging.getLogger("npmlicense.cli.manifest")


def manifest_command(args, console: Optional[Console] = None) -> int:
    """Execute manifest command.

    Args:
        args: Parsed command-line arguments (``path`` to a package directory
            or package.json).
        console: Rich console for the output (stdout by default).

    Returns:
        int: 0 when the manifest was read, 1 otherwise.
    """
    console = console or Console()
    path = Path(args.path).expanduser()
    if path.is_dir():
        path = path / PKG_FILE_NAME

    try:
        manifest = parse_pkg_file(path)
    except ManifestError as e:
        logger.error("%s", e)
        return 1

    resolution = resolve_manifest_license(manifest)
    pkg_os, pkg_arch = analyze_package_platform(manifest.name)

    console.print(f"name:     {manifest.name}", markup=False)
    console.print(f"version:  {manifest.version}", markup=False)
    console.print(
        f"license:  {resolution.spdx_id if resolution.ok else UNKNOWN_LICENSE}",
        markup=False,
    )
    if pkg_os:
        console.print(f"platform: {pkg_os}/{pkg_arch}", markup=False)
    return 0
