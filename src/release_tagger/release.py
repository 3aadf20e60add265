"""
The release flow: from a clean checkout to a pushed semver + major tag pair.

Steps, in order:

1. check that the working tree is clean;
2. resolve the upstream remote and its default branch;
3. fetch tags and fast-forward the default branch when it is checked out;
4. suggest a major tag and let the operator accept or override it;
5. suggest a semver tag within that major and let the operator accept or
   override it;
6. confirm a semver/major mismatch and the move of an existing major tag;
7. ask for the annotation message;
8. create the semver tag, move the major tag, push both atomically.

Nothing is written before step 8, so declining any prompt leaves the
repository untouched. A failed push leaves the local tags in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import click

from release_tagger import semver
from release_tagger.config.loader import ReleaseConfig
from release_tagger.errors import (
    DuplicateTagError,
    OperationCancelled,
    PreconditionError,
    ValidationError,
)
from release_tagger.prompts import Operator
from release_tagger.push import DualPushCoordinator
from release_tagger.state import RepositoryStateReader
from release_tagger.suggest import TagSuggestionEngine
from release_tagger.tagging import TagWriter
from release_tagger.vcs.backend import VCSBackend


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a release run."""

    major_tag: str
    semver_tag: str
    major_short: str
    semver_short: str
    dry_run: bool = False

    def summary_lines(self) -> List[str]:
        if self.dry_run:
            return [
                f"(dry-run) Moving major: {self.major_tag} -> would point to {self.major_short}",
                f"(dry-run) Semver     : {self.semver_tag} -> would point to {self.semver_short}",
            ]
        return [
            f"Moving major: {self.major_tag} -> {self.major_short}",
            f"Semver     : {self.semver_tag} -> {self.semver_short}",
        ]


def default_message(semver_tag: str) -> str:
    return f"Release {semver_tag}"


def major_move_message(major_tag: str, semver_tag: str, message: str) -> str:
    return f"Move {major_tag} to {semver_tag}: {message}"


class ReleaseFlow:
    """Runs one release against ``backend`` with answers from ``operator``."""

    def __init__(
        self,
        config: ReleaseConfig,
        backend: VCSBackend,
        operator: Operator,
        echo: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config
        self.backend = backend
        self.operator = operator
        self.echo = echo or click.echo
        self.reader = RepositoryStateReader(backend)
        self.engine = TagSuggestionEngine(self.reader)
        self.writer = TagWriter(backend)
        self.coordinator = DualPushCoordinator(backend, self.reader)

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------
    def check_preconditions(self) -> str:
        """Verify the checkout and sync it with the remote.

        Returns the remote's default branch.
        """
        remote = self.config.upstream_remote
        if not self.reader.is_working_tree_clean():
            raise PreconditionError("Working tree not clean. Commit or stash changes first.")

        branch = self.reader.detect_default_branch(remote)
        self.echo(f"Upstream remote: {remote} (default branch: {branch})")

        self.backend.fetch(remote)
        current = self.reader.current_branch()
        if current == branch:
            self.backend.pull_ff_only(remote, branch)
        else:
            self.echo(
                f"Note: current branch is '{current}' (upstream default is '{branch}'). Skipping pull."
            )
        return branch

    # ------------------------------------------------------------------
    # Operator decisions
    # ------------------------------------------------------------------
    def choose_major(self) -> str:
        suggested = self.engine.suggest_major()
        major_tag = self.operator.ask("Moving major tag", suggested)
        if not semver.is_major_tag(major_tag):
            raise ValidationError(f"Invalid major tag '{major_tag}' (expected like v1, v2).")
        return major_tag

    def choose_semver(self, major_tag: str) -> str:
        suggested = self.engine.suggest_semver(major_tag)
        semver_tag = self.operator.ask("Semver tag", suggested)
        if not semver.is_semver_tag(semver_tag):
            raise ValidationError(f"Invalid semver tag '{semver_tag}' (expected like v1.2.3).")
        if self.reader.tag_exists(semver_tag):
            raise DuplicateTagError(semver_tag)
        return semver_tag

    def confirm_choices(self, major_tag: str, semver_tag: str) -> None:
        semver_major = semver.major_of(semver_tag)
        if semver_major != major_tag:
            self.echo(
                f"Warning: semver major '{semver_major}' does not match moving major '{major_tag}'."
            )
            if not self.operator.confirm("Continue anyway?"):
                raise OperationCancelled("Cancelled: semver and major tags disagree.")

        if self.reader.tag_exists(major_tag):
            self.echo(
                f"Moving major tag '{major_tag}' already exists and will be updated to this commit."
            )
            if not self.operator.confirm(f"Proceed to move '{major_tag}'?"):
                raise OperationCancelled(f"Cancelled: '{major_tag}' left where it is.")

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def run(self) -> ReleaseResult:
        remote = self.config.upstream_remote
        self.check_preconditions()

        major_tag = self.choose_major()
        semver_tag = self.choose_semver(major_tag)
        self.confirm_choices(major_tag, semver_tag)
        message = self.operator.ask("Tag message", default_message(semver_tag))

        head = self.reader.head_commit()
        head_short = self.backend.short_commit(head)
        self.echo(f"Tagging current commit {head_short} ...")
        self.writer.create_annotated(semver_tag, message, head)
        self.writer.force_move(major_tag, major_move_message(major_tag, semver_tag, message), head)

        self.echo(f"Pushing tags atomically to '{remote}' ...")
        self.coordinator.push(remote, major_tag, semver_tag)
        logger.info("Released %s and moved %s on %s", semver_tag, major_tag, remote)

        if self.config.dry_run:
            return ReleaseResult(major_tag, semver_tag, head_short, head_short, dry_run=True)
        return ReleaseResult(
            major_tag,
            semver_tag,
            self.backend.short_commit(major_tag),
            self.backend.short_commit(semver_tag),
        )
