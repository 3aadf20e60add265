"""
Default tag suggestions derived from the existing tag set.

The module-level functions are pure: they look only at the tag names they
are given. :class:`TagSuggestionEngine` feeds them from a
:class:`~release_tagger.state.RepositoryStateReader`.
"""

from __future__ import annotations

from typing import Iterable

from release_tagger import semver
from release_tagger.state import RepositoryStateReader

DEFAULT_MAJOR_TAG = "v1"


def suggest_major(tags_at_head: Iterable[str], all_tags: Iterable[str]) -> str:
    """Suggest the moving major tag.

    Preference order:

    1. the highest major tag already pointing at HEAD;
    2. the major of the highest semver tag in the repository;
    3. ``v1``.
    """
    pointing = semver.highest_major(tags_at_head)
    if pointing is not None:
        return pointing
    latest = semver.highest(all_tags)
    if latest is not None:
        return semver.major_of(latest)
    return DEFAULT_MAJOR_TAG


def suggest_semver(major_tag: str, tags: Iterable[str]) -> str:
    """Suggest the next semver tag within ``major_tag``'s line.

    A patch bump of the highest existing ``<major>.x.y`` tag, or
    ``<major>.0.0`` when the line has no releases yet.
    """
    major = semver.parse_major(major_tag)
    versions = [semver.parse(tag) for tag in tags]
    in_line = [v for v in versions if v is not None and v.major == major]
    if not in_line:
        return f"{major_tag}.0.0"
    return semver.format_version(max(in_line).bump_patch())


class TagSuggestionEngine:
    """Computes default major and semver tags from current repository state."""

    def __init__(self, reader: RepositoryStateReader) -> None:
        self.reader = reader

    def suggest_major(self) -> str:
        head = self.reader.head_commit()
        return suggest_major(
            self.reader.tags_pointing_at(head),
            self.reader.list_tags("v*.*.*"),
        )

    def suggest_semver(self, major_tag: str) -> str:
        return suggest_semver(major_tag, self.reader.list_tags(f"{major_tag}.*"))
