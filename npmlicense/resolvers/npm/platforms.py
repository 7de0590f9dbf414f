"""Platform-specific package detection.

Native npm packages ship one binary package per target and encode the
target in the package name, e.g. ``@esbuild/linux-x64``,
``@parcel/watcher-linux-arm64-glibc`` or ``@rollup/rollup-win32-x64-msvc``.
npm only materializes the variant matching the installing host, so the
others must be classified by name alone.
"""

from __future__ import annotations

import logging
import platform
import re
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from npmlicense.resolvers.npm.arch import is_canonical_arch, normalize_arch

logger = logging.getLogger("npmlicense.resolvers.npm.platforms")

OS_LINUX = "linux"
OS_DARWIN = "darwin"
OS_WIN32 = "win32"

KNOWN_OSES = frozenset({OS_LINUX, OS_DARWIN, OS_WIN32})

# Optional trailing segment naming the C runtime / ABI of the binary.
LIBC_QUALIFIERS = frozenset(
    {"glibc", "gnu", "musl", "msvc", "gnueabihf", "musleabihf", "eabi", "eabihf"}
)

NO_PLATFORM: Tuple[str, str] = ("", "")


def analyze_package_platform(pkg_name: str) -> Tuple[str, str]:
    """Extract the (os, arch) pair encoded in a package name.

    Accepted trailing shapes of the unscoped name are ``<os>-<arch>`` and
    ``<os>-<arch>-<libc>``. Anything else, including a lone OS or an extra
    unknown segment, counts as no platform information.

    Args:
        pkg_name: Package name, optionally scoped (``@scope/name``).

    Returns:
        Tuple[str, str]: ``(os, normalized_arch)`` or ``("", "")``.
    """
    if not pkg_name:
        return NO_PLATFORM

    base = pkg_name.rsplit("/", 1)[-1]
    parts = base.split("-")

    if len(parts) >= 3 and parts[-1] in LIBC_QUALIFIERS:
        found = _match_os_arch(parts[-3], parts[-2])
        if found != NO_PLATFORM:
            return found

    if len(parts) >= 2:
        return _match_os_arch(parts[-2], parts[-1])

    return NO_PLATFORM


def _match_os_arch(os_token: str, arch_token: str) -> Tuple[str, str]:
    if os_token not in KNOWN_OSES:
        return NO_PLATFORM
    arch = normalize_arch(arch_token)
    if not is_canonical_arch(arch):
        return NO_PLATFORM
    return os_token, arch


def is_for_current_platform(pkg_name: str, host_os: str, host_arch: str) -> bool:
    """Decide whether a package applies to the given host.

    Args:
        pkg_name: Package name.
        host_os: Host OS token (``linux``, ``darwin``, ``win32``).
        host_arch: Host architecture in any spelling.

    Returns:
        bool: True for platform-agnostic packages and exact OS/arch matches.
    """
    pkg_os, pkg_arch = analyze_package_platform(pkg_name)
    if not pkg_os:
        return True
    return pkg_os == host_os and pkg_arch == normalize_arch(host_arch)


def normalize_os(raw: str) -> str:
    """Map a ``sys.platform`` style value to the npm OS token."""
    if not raw:
        return raw
    lowered = raw.lower()
    if lowered in KNOWN_OSES:
        return lowered
    if lowered.startswith(("win", "cygwin", "msys")):
        return OS_WIN32
    if lowered == "macos":
        return OS_DARWIN
    return re.sub(r"\d+$", "", lowered)


@dataclass(frozen=True)
class HostPlatform:
    """OS and architecture of the host running the resolver."""

    os: str
    arch: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "arch", normalize_arch(self.arch))

    @classmethod
    def current(cls) -> "HostPlatform":
        """Detect the running interpreter's platform."""
        host = cls(os=normalize_os(sys.platform), arch=platform.machine())
        logger.debug("Detected host platform: %s/%s", host.os, host.arch)
        return host

    @classmethod
    def from_overrides(
        cls, os_name: Optional[str] = None, arch: Optional[str] = None
    ) -> "HostPlatform":
        """Detect the host, replacing either component when given."""
        detected = cls.current()
        return cls(
            os=normalize_os(os_name) if os_name else detected.os,
            arch=arch or detected.arch,
        )

    def matches(self, pkg_name: str) -> bool:
        return is_for_current_platform(pkg_name, self.os, self.arch)


__all__ = [
    "OS_LINUX",
    "OS_DARWIN",
    "OS_WIN32",
    "KNOWN_OSES",
    "LIBC_QUALIFIERS",
    "analyze_package_platform",
    "is_for_current_platform",
    "normalize_os",
    "HostPlatform",
]
