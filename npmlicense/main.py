"""Main CLI entry point for npmlicense.

Provides commands: resolve, manifest
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("npmlicense.cli")

# Trigger resolver registration by importing the resolvers package
import npmlicense.resolvers  # noqa: E402,F401

from npmlicense.cli.manifest import manifest_command  # noqa: E402
from npmlicense.cli.resolve import resolve_command  # noqa: E402
from npmlicense.resolvers.registry import ResolverRegistry  # noqa: E402


def setup_logging(
    verbose: bool = False,
    console: Optional[Console] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
        log_file: Also write log records to this file (optional).
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )
    handlers: list = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] [%(levelname)s] %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npmlicense",
        description="npmlicense - License classification for npm dependency trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Output log to file in addition to the console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve the licenses of every installed dependency of a project",
    )
    resolve_parser.add_argument(
        "path",
        help="Project directory or its package.json",
    )
    resolve_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional dependency configuration. Can be a path to a TOML/JSON "
            "file or an inline TOML/JSON string. When omitted, built-in "
            "defaults are used."
        ),
    )
    resolve_parser.add_argument(
        "-o",
        "--output",
        help="Write the report as JSON to this file",
    )
    resolve_parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not run npm install before resolving",
    )
    resolve_parser.add_argument(
        "--walk",
        action="store_true",
        help="Read node_modules directly instead of asking npm (implies --skip-install)",
    )
    resolve_parser.add_argument(
        "--host-os",
        help="Classify packages for this OS instead of the running one (linux, darwin, win32)",
    )
    resolve_parser.add_argument(
        "--host-arch",
        help="Classify packages for this architecture instead of the running one",
    )
    resolve_parser.add_argument(
        "-w",
        "--workers",
        type=int,
        help="Number of packages resolved concurrently (default: 1)",
    )

    manifest_parser = subparsers.add_parser(
        "manifest",
        help="Show the license metadata of a single package.json",
    )
    manifest_parser.add_argument(
        "path",
        help="Package directory or its package.json",
    )

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, log_file=getattr(args, "log_file", None))

    ecosystems = ResolverRegistry.get_instance().list_ecosystems()
    if not ecosystems:
        logger.warning("No resolvers were registered during startup!")
    else:
        logger.debug("Loaded resolver(s): %s", ", ".join(ecosystems))

    if args.command == "resolve":
        return resolve_command(args)
    elif args.command == "manifest":
        return manifest_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
