"""
Backend interface for the version-control operations the release flow needs.

The release flow never shells out directly. It talks to an object that
satisfies :class:`VCSBackend`; production code uses
:class:`release_tagger.vcs.git_client.GitClient`, tests use an in-memory
repository that can change the remote between the lease read and the push.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Set, Tuple


class GitError(Exception):
    """Raised when a version-control command fails."""

    pass


class PushRejectedError(GitError):
    """Raised when an atomic push is refused.

    ``rejections`` maps each destination ref to the reason the backend reported,
    e.g. ``{"refs/tags/v1": "stale info", "refs/tags/v1.2.3": "atomic push failed"}``.
    With an atomic push none of the refs has been updated.
    """

    def __init__(self, remote: str, rejections: Dict[str, str]) -> None:
        details = ", ".join(f"{ref} ({reason})" for ref, reason in sorted(rejections.items()))
        super().__init__(f"Push to '{remote}' rejected: {details}")
        self.remote = remote
        self.rejections = rejections


def tag_ref(tag: str) -> str:
    """Return the fully qualified ref name of a tag."""
    return f"refs/tags/{tag}"


class UpdateMode(Enum):
    """How a ref update is protected on the remote."""

    CREATE = "create"  # plain push; the remote refuses to overwrite an existing tag
    LEASE = "lease"  # compare-and-swap against ``expected_old``


@dataclass(frozen=True)
class RefUpdate:
    """A single ref update inside a push transaction.

    ``source`` is the local ref whose value is pushed. For ``LEASE`` updates
    ``expected_old`` is the object id observed on the remote; ``None`` means
    the ref must not exist on the remote.
    """

    ref: str
    source: str
    mode: UpdateMode = UpdateMode.CREATE
    expected_old: Optional[str] = None

    @property
    def refspec(self) -> str:
        return f"{self.source}:{self.ref}"


@dataclass(frozen=True)
class PushTransaction:
    """Ordered set of ref updates the backend must apply all-or-nothing."""

    updates: Tuple[RefUpdate, ...] = field(default_factory=tuple)

    def refspecs(self) -> List[str]:
        return [update.refspec for update in self.updates]

    def leases(self) -> List[RefUpdate]:
        return [u for u in self.updates if u.mode is UpdateMode.LEASE]

    def find(self, ref: str) -> Optional[RefUpdate]:
        for update in self.updates:
            if update.ref == ref:
                return update
        return None


class VCSBackend(Protocol):
    """Read/write operations the release flow performs on a repository."""

    # Reads
    def list_tags(self, pattern: str = "*") -> Set[str]: ...

    def tags_pointing_at(self, commit: str) -> Set[str]: ...

    def tag_exists(self, name: str) -> bool: ...

    def head_commit(self) -> str: ...

    def short_commit(self, rev: str) -> str: ...

    def is_working_tree_clean(self) -> bool: ...

    def remote_exists(self, remote: str) -> bool: ...

    def detect_default_branch(self, remote: str) -> str: ...

    def current_branch(self) -> str: ...

    def remote_tag_oid(self, remote: str, tag: str) -> Optional[str]: ...

    # Writes
    def fetch(self, remote: str, force: bool = True) -> None: ...

    def pull_ff_only(self, remote: str, branch: str) -> None: ...

    def create_annotated_tag(self, name: str, message: str, target: str) -> None: ...

    def force_move_tag(self, name: str, message: str, target: str) -> None: ...

    def push_atomic(self, remote: str, transaction: PushTransaction) -> None: ...
