"""Dotted version parsing and the minimum versions this tool relies on.

Versions are compared as four-component integer tuples. Tools report
their versions in slightly different shapes (``0.6.0``, ``v0.11.8``,
``2.4.0-p1``, ``2.3.x``) so parsing picks the first dotted numeric run and
pads it with zeros.
"""

from __future__ import annotations

import re

__all__ = [
    "META_MIN_VERSION",
    "MUTAGEN_MIN_VERSION",
    "WARDEN_MIN_VERSION",
    "WARDEN_SYNC_AUTOSTART_VERSION",
    "VersionTuple",
    "is_valid_meta_version",
    "parse_version",
    "version_at_least",
]

type VersionTuple = tuple[int, int, int, int]

WARDEN_MIN_VERSION = "0.2.0"
# Older warden releases do not start the mutagen sync session on `env up`.
WARDEN_SYNC_AUTOSTART_VERSION = "0.3.0"
MUTAGEN_MIN_VERSION = "0.10.3"
META_MIN_VERSION = "2.3.4"

_VERSION_RE = re.compile(r"\d+(?:\.\d+){0,3}")
_META_WILDCARD_RE = re.compile(r"^2\.[3-9]\.x$")


def parse_version(text: str) -> VersionTuple:
    """Parse the first dotted numeric run in ``text``.

    Missing components are zero; text without any digits parses as
    ``(0, 0, 0, 0)``.

    Example:
        parse_version("0.10.3") -> (0, 10, 3, 0)
        parse_version("2.3.x") -> (2, 3, 0, 0)
    """
    match = _VERSION_RE.search(text or "")
    if match is None:
        return (0, 0, 0, 0)
    parts = [int(p) for p in match.group(0).split(".")]
    parts.extend([0] * (4 - len(parts)))
    return (parts[0], parts[1], parts[2], parts[3])


def version_at_least(installed: str, required: str) -> bool:
    """Return True if ``installed`` is the same as or newer than ``required``."""
    return parse_version(installed) >= parse_version(required)


def is_valid_meta_version(value: str) -> bool:
    """Check a ``--meta-version`` value.

    Accepted: a concrete release at or above 2.3.4, or a minor-line
    wildcard such as ``2.4.x``.
    """
    if _META_WILDCARD_RE.match(value):
        return True
    return version_at_least(value, META_MIN_VERSION)
