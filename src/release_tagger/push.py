"""
Atomic publication of a semver tag together with its moving major tag.

The major tag is pushed with a lease on the object id read from the remote
just before the push, and joined with the creation of the semver tag in a
single ``--atomic`` transaction. Either both refs land or neither does.
"""

from __future__ import annotations

import logging
from typing import Optional

from release_tagger.errors import (
    ConcurrentModificationError,
    DuplicateTagError,
    ReleaseError,
)
from release_tagger.state import RepositoryStateReader
from release_tagger.vcs.backend import (
    PushRejectedError,
    PushTransaction,
    RefUpdate,
    UpdateMode,
    VCSBackend,
    tag_ref,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

# Rejection reasons as reported by ``git push --porcelain``
REASON_ALREADY_EXISTS = "already exists"
REASON_STALE_INFO = "stale info"


def build_transaction(
    major_tag: str, semver_tag: str, major_old_oid: Optional[str]
) -> PushTransaction:
    """Return the two-ref transaction for a release.

    ``major_old_oid`` of ``None`` requires the major tag to be absent remotely.
    """
    return PushTransaction(
        updates=(
            RefUpdate(ref=tag_ref(semver_tag), source=tag_ref(semver_tag)),
            RefUpdate(
                ref=tag_ref(major_tag),
                source=tag_ref(major_tag),
                mode=UpdateMode.LEASE,
                expected_old=major_old_oid,
            ),
        )
    )


class DualPushCoordinator:
    """Publishes the semver and major tags as one lease-protected push."""

    def __init__(self, backend: VCSBackend, reader: RepositoryStateReader) -> None:
        self.backend = backend
        self.reader = reader

    def push(self, remote: str, major_tag: str, semver_tag: str) -> PushTransaction:
        """Push ``semver_tag`` and move ``major_tag`` on ``remote`` atomically.

        Raises
        ------
        DuplicateTagError
            If ``semver_tag`` already exists on the remote. Nothing is pushed.
        ConcurrentModificationError
            If ``major_tag`` changed on the remote after its lease was read.
            Nothing is pushed; the caller has to fetch and start over.
        PushRejectedError
            For any other rejection reported by the backend.
        """
        old_oid = self.reader.remote_tag_oid(remote, major_tag)
        if self.reader.remote_tag_oid(remote, semver_tag) is not None:
            raise DuplicateTagError(semver_tag, remote=remote)

        transaction = build_transaction(major_tag, semver_tag, old_oid)
        logger.info(
            "Pushing %s to %s with lease %s=%s",
            " ".join(transaction.refspecs()),
            remote,
            major_tag,
            old_oid or "<absent>",
        )
        try:
            self.backend.push_atomic(remote, transaction)
        except PushRejectedError as exc:
            translated = self._translate(exc, remote, major_tag, semver_tag, old_oid)
            if translated is None:
                raise
            raise translated from exc
        return transaction

    def _translate(
        self,
        exc: PushRejectedError,
        remote: str,
        major_tag: str,
        semver_tag: str,
        old_oid: Optional[str],
    ) -> Optional[ReleaseError]:
        semver_reason = exc.rejections.get(tag_ref(semver_tag), "")
        major_reason = exc.rejections.get(tag_ref(major_tag), "")
        if REASON_ALREADY_EXISTS in semver_reason:
            return DuplicateTagError(semver_tag, remote=remote)
        if REASON_STALE_INFO in major_reason:
            observed = self.reader.remote_tag_oid(remote, major_tag)
            return ConcurrentModificationError(remote, tag_ref(major_tag), old_oid, observed)
        return None
