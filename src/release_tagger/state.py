"""
Read-only view of repository state used by the release flow.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from release_tagger.vcs.backend import VCSBackend


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class RepositoryStateReader:
    """Queries tags, remote refs and working tree state through a backend."""

    def __init__(self, backend: VCSBackend) -> None:
        self.backend = backend

    def is_working_tree_clean(self) -> bool:
        return self.backend.is_working_tree_clean()

    def detect_default_branch(self, remote: str) -> str:
        branch = self.backend.detect_default_branch(remote)
        logger.debug("Default branch of %s is %s", remote, branch)
        return branch

    def list_tags(self, pattern: str = "*") -> Set[str]:
        return set(self.backend.list_tags(pattern))

    def remote_tag_oid(self, remote: str, tag: str) -> Optional[str]:
        oid = self.backend.remote_tag_oid(remote, tag)
        logger.debug("Remote %s has %s at %s", remote, tag, oid or "<absent>")
        return oid

    def head_commit(self) -> str:
        return self.backend.head_commit()

    def tags_pointing_at(self, commit: str) -> Set[str]:
        return set(self.backend.tags_pointing_at(commit))

    def tag_exists(self, name: str) -> bool:
        return self.backend.tag_exists(name)

    def current_branch(self) -> str:
        return self.backend.current_branch()
