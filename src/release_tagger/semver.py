"""
Parsing and ordering of release tag names.

Two tag shapes are recognised:

- semver tags ``vMAJOR.MINOR.PATCH`` (e.g. ``v1.2.3``), immutable releases;
- major tags ``vMAJOR`` (e.g. ``v1``), mutable aliases for the newest
  release of a major line.

Components are non-negative integers written without leading zeros, so a
parsed tag always formats back to the exact same string. Anything that does
not match parses to ``None``; callers filtering arbitrary tag lists never
have to catch exceptions.
"""

from __future__ import annotations

import functools
import re
from typing import Iterable, List, NamedTuple, Optional

_NUM = r"(0|[1-9][0-9]*)"
SEMVER_TAG_PATTERN = re.compile(rf"^v{_NUM}\.{_NUM}\.{_NUM}$")
MAJOR_TAG_PATTERN = re.compile(rf"^v{_NUM}$")


class VersionTriple(NamedTuple):
    """Parsed form of a semver tag. Tuple ordering is numeric."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return format_version(self)

    def bump_patch(self) -> "VersionTriple":
        return self._replace(patch=self.patch + 1)


def parse(tag: str) -> Optional[VersionTriple]:
    """Parse ``vM.m.p`` into a :class:`VersionTriple`, or return ``None``."""
    match = SEMVER_TAG_PATTERN.match(tag)
    if not match:
        return None
    return VersionTriple(*(int(part) for part in match.groups()))


def parse_major(tag: str) -> Optional[int]:
    """Parse a major tag ``vM`` into its integer, or return ``None``."""
    match = MAJOR_TAG_PATTERN.match(tag)
    if not match:
        return None
    return int(match.group(1))


def format_version(version: VersionTriple) -> str:
    return f"v{version.major}.{version.minor}.{version.patch}"


def is_semver_tag(tag: str) -> bool:
    return parse(tag) is not None


def is_major_tag(tag: str) -> bool:
    return parse_major(tag) is not None


def major_of(semver_tag: str) -> Optional[str]:
    """Project ``vM.m.p`` onto its major alias ``vM``.

    Returns ``None`` when ``semver_tag`` is not a well-formed semver tag.
    """
    version = parse(semver_tag)
    if version is None:
        return None
    return f"v{version.major}"


def compare_descending(a: str, b: str) -> int:
    """Comparator placing higher versions first.

    Both arguments must be well-formed semver tags. Components are compared
    as integers, so ``v1.10.0`` sorts ahead of ``v1.9.9``.
    """
    va, vb = parse(a), parse(b)
    if va is None or vb is None:
        raise ValueError(f"Cannot compare non-semver tags: {a!r}, {b!r}")
    if va == vb:
        return 0
    return -1 if va > vb else 1


def sort_descending(tags: Iterable[str]) -> List[str]:
    """Return the well-formed semver tags of ``tags``, highest first.

    Malformed names are dropped silently.
    """
    valid = [tag for tag in tags if is_semver_tag(tag)]
    return sorted(valid, key=functools.cmp_to_key(compare_descending))


def highest(tags: Iterable[str]) -> Optional[str]:
    """Return the highest well-formed semver tag in ``tags``, if any."""
    ordered = sort_descending(tags)
    return ordered[0] if ordered else None


def highest_major(tags: Iterable[str]) -> Optional[str]:
    """Return the numerically highest well-formed major tag in ``tags``."""
    majors = [(parse_major(tag), tag) for tag in tags]
    valid = [(num, tag) for num, tag in majors if num is not None]
    if not valid:
        return None
    return max(valid)[1]
