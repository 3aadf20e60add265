"""
Error taxonomy for release_tagger.

Every failure the release flow can surface to the operator derives from
:class:`ReleaseError`. The CLI maps each subclass to a distinct exit code
so that wrapping scripts can tell a dirty working tree apart from a lost
race on the remote.
"""

from __future__ import annotations

from typing import Optional


class ReleaseError(Exception):
    """Base class for all release flow failures."""

    pass


class PreconditionError(ReleaseError):
    """Raised when the repository is not in a state that allows tagging."""

    pass


class RemoteNotFound(PreconditionError):
    """Raised when the configured upstream remote does not exist."""

    def __init__(self, remote: str) -> None:
        super().__init__(
            f"Remote '{remote}' not found. Set UPSTREAM_REMOTE or add the remote."
        )
        self.remote = remote


class DefaultBranchUnknown(PreconditionError):
    """Raised when the remote's HEAD branch cannot be determined."""

    def __init__(self, remote: str) -> None:
        super().__init__(f"Could not detect default branch of remote '{remote}'.")
        self.remote = remote


class ValidationError(ReleaseError):
    """Raised when a tag name entered by the operator is malformed."""

    pass


class DuplicateTagError(ReleaseError):
    """Raised when a semver tag already exists locally or on the remote."""

    def __init__(self, tag: str, remote: Optional[str] = None) -> None:
        where = f"on remote '{remote}'" if remote else "locally"
        super().__init__(f"Semver tag '{tag}' already exists {where}. Choose another.")
        self.tag = tag
        self.remote = remote


class ConcurrentModificationError(ReleaseError):
    """Raised when the major tag moved on the remote after its lease was read."""

    def __init__(
        self,
        remote: str,
        ref: str,
        expected: Optional[str],
        observed: Optional[str] = None,
    ) -> None:
        expected_txt = expected or "<absent>"
        observed_txt = observed or "<unknown>"
        super().__init__(
            f"'{ref}' changed on remote '{remote}' since it was read "
            f"(expected {expected_txt}, now {observed_txt}). "
            f"Nothing was pushed; fetch and run the release again."
        )
        self.remote = remote
        self.ref = ref
        self.expected = expected
        self.observed = observed


class OperationCancelled(ReleaseError):
    """Raised when the operator declines a confirmation or aborts a prompt."""

    pass
