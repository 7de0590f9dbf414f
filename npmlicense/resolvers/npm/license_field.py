"""Normalization of package.json license metadata.

package.json declares licenses in several shapes:

    "license": "MIT"
    "license": {"type": "MIT", "url": "..."}            (deprecated)
    "licenses": [{"type": "MIT"}, {"type": "Apache-2.0"}] (deprecated)

The resolvers here never raise; unusable input yields ``NO_LICENSE``.
"""

import json
import logging
from collections import abc
from typing import Any, Iterable, List

from npmlicense.resolvers.models import NO_LICENSE, FieldResolution, LicenseEntry, Manifest

logger = logging.getLogger("npmlicense.resolvers.npm.license_field")

LICENSES_SEPARATOR = " OR "


def resolve_license_field(raw: Any) -> FieldResolution:
    """Resolve the single-license ``license`` field.

    Args:
        raw: Decoded JSON value of the field, or its raw JSON bytes.

    Returns:
        FieldResolution: The id and True for a non-empty string or a mapping
        with a string ``type``; ``NO_LICENSE`` otherwise.
    """
    if isinstance(raw, (bytes, bytearray)):
        if not raw.strip():
            return NO_LICENSE
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError):
            logger.debug("Undecodable license field: %r", raw[:64])
            return NO_LICENSE

    if isinstance(raw, str):
        return FieldResolution(raw, True) if raw else NO_LICENSE

    if isinstance(raw, abc.Mapping):
        lcs_type = raw.get("type")
        if isinstance(lcs_type, str) and lcs_type:
            return FieldResolution(lcs_type, True)

    return NO_LICENSE


def resolve_licenses_field(entries: Iterable[LicenseEntry]) -> FieldResolution:
    """Resolve the legacy ``licenses`` array.

    Args:
        entries: License entries in manifest order. Raw mappings or strings
            are accepted as well and converted with :func:`license_entries`.

    Returns:
        FieldResolution: Entry types joined with ``" OR "`` in order.
    """
    if not entries or not isinstance(entries, abc.Iterable):
        return NO_LICENSE
    if isinstance(entries, (str, bytes, abc.Mapping)):
        return NO_LICENSE

    types: List[str] = []
    for entry in entries:
        if not isinstance(entry, LicenseEntry):
            converted = license_entries([entry])
            if not converted:
                continue
            entry = converted[0]
        if entry.type:
            types.append(entry.type)
    if not types:
        return NO_LICENSE
    return FieldResolution(LICENSES_SEPARATOR.join(types), True)


def license_entries(raw: Any) -> List[LicenseEntry]:
    """Convert a raw ``licenses`` value into entries, dropping unusable items."""
    if not isinstance(raw, list):
        return []

    entries: List[LicenseEntry] = []
    for item in raw:
        if isinstance(item, str):
            entries.append(LicenseEntry(type=item))
        elif isinstance(item, abc.Mapping):
            lcs_type = item.get("type")
            url = item.get("url")
            entries.append(
                LicenseEntry(
                    type=lcs_type if isinstance(lcs_type, str) else "",
                    url=url if isinstance(url, str) else None,
                )
            )
    return entries


def resolve_manifest_license(manifest: Manifest) -> FieldResolution:
    """Resolve a manifest's license, preferring ``license`` over ``licenses``."""
    resolution = resolve_license_field(manifest.license)
    if resolution.ok:
        return resolution
    return resolve_licenses_field(license_entries(manifest.licenses))


__all__ = [
    "LICENSES_SEPARATOR",
    "resolve_license_field",
    "resolve_licenses_field",
    "license_entries",
    "resolve_manifest_license",
]
