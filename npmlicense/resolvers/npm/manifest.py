"""package.json loading and license file discovery."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from npmlicense.resolvers.base import (
    LicenseFileError,
    MalformedManifestError,
    MissingManifestError,
)
from npmlicense.resolvers.models import Manifest, Result

logger = logging.getLogger("npmlicense.resolvers.npm.manifest")

PKG_FILE_NAME = "package.json"

# Compared against lower-cased directory entries.
LICENSE_FILE_NAMES = frozenset(
    {
        "license",
        "license.md",
        "license.txt",
        "licence",
        "licence.md",
        "licence.txt",
        "copying",
        "copying.md",
        "copying.txt",
    }
)


def parse_pkg_file(path: Union[str, Path]) -> Manifest:
    """Read and validate a package.json file.

    Args:
        path: Path to the manifest file.

    Returns:
        Manifest: Parsed manifest.

    Raises:
        MissingManifestError: If the file is missing or unreadable.
        MalformedManifestError: If the content is not a valid manifest.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise MissingManifestError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except UnicodeDecodeError as e:
        raise MalformedManifestError(f"Invalid encoding in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedManifestError(f"Invalid JSON in {path}: {e}") from e
    except RecursionError as e:
        raise MalformedManifestError(f"JSON nested too deeply in {path}") from e

    if not isinstance(data, dict):
        raise MalformedManifestError(
            f"Invalid manifest {path}: top level is {type(data).__name__}, expected object"
        )

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise MalformedManifestError(f"Invalid manifest {path}: {e}") from e

    logger.debug("Parsed %s (name=%s, version=%s)", path, manifest.name, manifest.version)
    return manifest


def resolve_lcs_file(
    result: Result,
    pkg_dir: Union[str, Path],
    config: Optional[Any] = None,
) -> None:
    """Attach the package's license file, if any, to ``result``.

    The first regular file (by name) matching ``LICENSE_FILE_NAMES``
    case-insensitively wins. Finding nothing is not an error.

    Args:
        result: Result to update in place.
        pkg_dir: Package directory.
        config: Dependency configuration (unused by the lookup itself).

    Raises:
        LicenseFileError: If the directory cannot be listed or a matching
            file cannot be read.
    """
    pkg_dir = Path(pkg_dir)
    try:
        entries = sorted(pkg_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise LicenseFileError(f"Cannot list {pkg_dir}: {e}") from e

    for entry in entries:
        if entry.name.lower() not in LICENSE_FILE_NAMES or not entry.is_file():
            continue
        try:
            content = entry.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            raise LicenseFileError(f"Cannot read {entry}: {e}") from e
        result.license_file_path = str(entry.absolute())
        result.license_content = content
        logger.debug("Found license file %s for %s", entry, result.package_name)
        return

    logger.debug("No license file in %s", pkg_dir)


__all__ = [
    "PKG_FILE_NAME",
    "LICENSE_FILE_NAMES",
    "parse_pkg_file",
    "resolve_lcs_file",
]
