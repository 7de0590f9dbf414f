"""CPU architecture normalization.

npm, Node.js, Python and the various native toolchains spell the same
architecture differently (``x86_64``, ``amd64``, ``x64``). Everything that
compares architectures goes through :func:`normalize_arch` first.
"""

from typing import Dict

ARCH_X64 = "x64"
ARCH_IA32 = "386"
ARCH_ARM64 = "arm64"
ARCH_ARM = "arm"

CANONICAL_ARCHES = frozenset({ARCH_X64, ARCH_IA32, ARCH_ARM64, ARCH_ARM})

_ARCH_ALIASES: Dict[str, str] = {
    "amd64": ARCH_X64,
    "x64": ARCH_X64,
    "x86_64": ARCH_X64,
    "ia32": ARCH_IA32,
    "x86": ARCH_IA32,
    "386": ARCH_IA32,
    "i386": ARCH_IA32,
    "i686": ARCH_IA32,
    "arm64": ARCH_ARM64,
    "aarch64": ARCH_ARM64,
    "arm": ARCH_ARM,
    "armv6": ARCH_ARM,
    "armv6l": ARCH_ARM,
    "armv7": ARCH_ARM,
    "armv7l": ARCH_ARM,
    "armhf": ARCH_ARM,
    "armel": ARCH_ARM,
}


def normalize_arch(raw: str) -> str:
    """Map an architecture string to its canonical token.

    Unknown values are returned unchanged so they still compare equal to
    themselves.

    Args:
        raw: Architecture string in any spelling or case.

    Returns:
        str: Canonical token, or ``raw`` verbatim when unrecognized.
    """
    if not raw:
        return raw
    return _ARCH_ALIASES.get(raw.lower(), raw)


def is_canonical_arch(token: str) -> bool:
    return token in CANONICAL_ARCHES


__all__ = [
    "ARCH_X64",
    "ARCH_IA32",
    "ARCH_ARM64",
    "ARCH_ARM",
    "CANONICAL_ARCHES",
    "normalize_arch",
    "is_canonical_arch",
]
