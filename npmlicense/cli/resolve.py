"""Resolve command implementation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from npmlicense.config import ConfigError, DepsConfig, load_deps_config
from npmlicense.resolvers.models import UNKNOWN_LICENSE, Report
from npmlicense.resolvers.npm.manifest import PKG_FILE_NAME
from npmlicense.resolvers.npm.package_manager import NodeModulesWalker
from npmlicense.resolvers.registry import ResolverRegistry

logger = logging.getLogger("npmlicense.cli.resolve")


def _manifest_path(source: str) -> Path:
    path = Path(source).expanduser()
    if path.is_dir():
        return path / PKG_FILE_NAME
    return path


def _apply_overrides(config: DepsConfig, args) -> DepsConfig:
    """Layer command-line switches over the loaded configuration.

    The merged values are validated again, so switches obey the same bounds
    as the configuration file.

    Raises:
        ConfigError: If a switch value is out of range.
    """
    data = config.model_dump()
    if getattr(args, "skip_install", False):
        data["install"]["skip"] = True
    if getattr(args, "host_os", None):
        data["host"]["os"] = args.host_os
    if getattr(args, "host_arch", None):
        data["host"]["arch"] = args.host_arch
    workers = getattr(args, "workers", None)
    if workers is not None:
        data["workers"] = workers

    try:
        return DepsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid command-line option: {e}") from e


def render_report(report: Report, console: Optional[Console] = None) -> None:
    """Print the report as a table followed by a one-line summary."""
    console = console or Console()

    table = Table(title="Dependency licenses", show_lines=False)
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("License")
    table.add_column("License file")

    for result in report.resolved:
        table.add_row(
            escape(result.package_name),
            escape(result.version),
            escape(result.license_spdx_id),
            escape(result.license_file_path),
        )
    for result in report.skipped:
        table.add_row(
            escape(result.package_name),
            escape(result.version),
            f"[red]{UNKNOWN_LICENSE}[/red]",
            escape(result.license_file_path),
        )
    console.print(table)

    if report.cross_platform:
        console.print(
            "Skipped %d package(s) built for other platforms: %s"
            % (
                len(report.cross_platform),
                ", ".join(r.package_name for r in report.cross_platform),
            ),
            markup=False,
        )

    summary = report.summary()
    console.print(
        f"Resolved: {summary['resolved']}  "
        f"Unresolved: {summary['skipped']}  "
        f"Cross-platform: {summary['cross_platform']}"
    )


def resolve_command(args, console: Optional[Console] = None) -> int:
    """Execute resolve command.

    Args:
        args: Parsed command-line arguments.
        console: Rich console for the report (stdout by default).

    Returns:
        int: Exit code.
    """
    pkg_file = _manifest_path(args.path)

    try:
        config = _apply_overrides(load_deps_config(getattr(args, "config", None)), args)
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    package_manager = NodeModulesWalker() if getattr(args, "walk", False) else None
    resolver = ResolverRegistry.get_instance().find_for_file(pkg_file.name)
    if resolver is None:
        logger.error("No resolver can handle %s", pkg_file)
        return 1
    if not pkg_file.is_file():
        logger.error("Manifest not found: %s", pkg_file)
        return 1

    if hasattr(resolver, "from_config"):
        resolver = resolver.from_config(config, package_manager=package_manager)

    logger.info("Resolving dependency licenses for %s", pkg_file)
    report = resolver.resolve(pkg_file, config)

    render_report(report, console)

    output = getattr(args, "output", None)
    if output:
        output_path = Path(output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error("Failed to write report to %s: %s", output_path, e)
            return 1
        logger.info("Report written to %s", output_path)

    return 0
