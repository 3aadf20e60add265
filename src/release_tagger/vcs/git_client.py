"""
Git backend for release_tagger.

This module wraps the Git commands required by the release flow. Read-only
commands always execute; mutating commands (fetch, pull, tag, push) are
echoed as ``+ git ...`` and skipped entirely in dry-run mode. All subprocess
calls go through :meth:`GitClient._run` so that unit tests can mock them
easily.
"""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from release_tagger.errors import DefaultBranchUnknown, RemoteNotFound
from release_tagger.vcs.backend import (  # noqa: F401
    GitError,
    PushRejectedError,
    PushTransaction,
    tag_ref,
)


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs propagate to the root once the CLI configures logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

_HEAD_BRANCH_RE = re.compile(r"^\s*HEAD branch:\s*(\S+)\s*$", re.MULTILINE)
_REASON_RE = re.compile(r"\(([^)]*)\)\s*$")


def parse_push_porcelain(output: str) -> Dict[str, str]:
    """Extract rejected refs from ``git push --porcelain`` output.

    Rejected lines look like ``!<TAB>src:dst<TAB>[rejected] (stale info)``.
    """
    rejections: Dict[str, str] = {}
    for line in output.splitlines():
        if not line.startswith("!"):
            continue
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        dst = parts[1].split(":", 1)[-1]
        match = _REASON_RE.search(parts[2])
        rejections[dst] = match.group(1) if match else parts[2].strip()
    return rejections


class GitClient:
    """Client for the Git repository the release is cut from."""

    def __init__(
        self,
        repo_root: Path,
        dry_run: bool = False,
        echo: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.repo_root = repo_root
        self.dry_run = dry_run
        self._echo = echo or (lambda line: logger.info("%s", line))

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. ``.git`` may be a file for worktrees.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found on PATH") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    def _mutate(self, args: List[str], check: bool = True) -> Optional[subprocess.CompletedProcess]:
        """Echo a mutating command and run it unless in dry-run mode."""
        self._echo("+ " + shlex.join(["git"] + args))
        if self.dry_run:
            return None
        return self._run(args, check=check)

    # ------------------------------------------------------------------
    # Repository state
    # ------------------------------------------------------------------
    def is_working_tree_clean(self) -> bool:
        """Return True when neither the working tree nor the index has changes."""
        unstaged = self._run(["diff", "--quiet"], check=False)
        staged = self._run(["diff", "--cached", "--quiet"], check=False)
        return unstaged.returncode == 0 and staged.returncode == 0

    def head_commit(self) -> str:
        return self._run(["rev-parse", "HEAD"]).stdout.strip()

    def short_commit(self, rev: str) -> str:
        """Return the abbreviated commit id ``rev`` resolves to.

        Annotated tags are peeled to the commit they point at.
        """
        return self._run(["rev-parse", "--short", f"{rev}^{{commit}}"]).stdout.strip()

    def current_branch(self) -> str:
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()

    def list_tags(self, pattern: str = "*") -> Set[str]:
        result = self._run(["tag", "-l", pattern])
        return {line.strip() for line in result.stdout.splitlines() if line.strip()}

    def tags_pointing_at(self, commit: str) -> Set[str]:
        result = self._run(["tag", "--points-at", commit])
        return {line.strip() for line in result.stdout.splitlines() if line.strip()}

    def tag_exists(self, name: str) -> bool:
        result = self._run(["rev-parse", "-q", "--verify", tag_ref(name)], check=False)
        return result.returncode == 0

    # ------------------------------------------------------------------
    # Remote state
    # ------------------------------------------------------------------
    def remote_exists(self, remote: str) -> bool:
        result = self._run(["remote"], check=False)
        return remote in result.stdout.split()

    def detect_default_branch(self, remote: str) -> str:
        """Return the branch the remote's HEAD points at.

        Raises
        ------
        RemoteNotFound
            If ``remote`` is not configured.
        DefaultBranchUnknown
            If ``git remote show`` does not report a HEAD branch.
        """
        if not self.remote_exists(remote):
            raise RemoteNotFound(remote)
        result = self._run(["remote", "show", remote])
        match = _HEAD_BRANCH_RE.search(result.stdout)
        if not match or match.group(1) == "(unknown)":
            raise DefaultBranchUnknown(remote)
        return match.group(1)

    def remote_tag_oid(self, remote: str, tag: str) -> Optional[str]:
        """Return the object id of ``refs/tags/<tag>`` on the remote, if any.

        For annotated tags ``ls-remote`` also lists the peeled ``^{}`` entry;
        only the tag object id itself is a valid lease value.
        """
        ref = tag_ref(tag)
        result = self._run(["ls-remote", "--tags", remote, ref])
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1] == ref:
                return parts[0]
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def fetch(self, remote: str, force: bool = True) -> None:
        """Fetch branches and tags from ``remote``.

        With ``force`` local tags that differ from the remote are replaced,
        so a major tag moved by another release follows the remote.
        Without it Git refuses to clobber them and the fetch fails.
        """
        args = ["fetch", remote, "--tags", "--prune"]
        if force:
            args.append("--force")
        self._mutate(args)

    def pull_ff_only(self, remote: str, branch: str) -> None:
        self._mutate(["pull", "--ff-only", remote, branch])

    def create_annotated_tag(self, name: str, message: str, target: str) -> None:
        self._mutate(["tag", "-a", name, "-m", message, target])

    def force_move_tag(self, name: str, message: str, target: str) -> None:
        self._mutate(["tag", "-f", "-a", name, "-m", message, target])

    def push_atomic(self, remote: str, transaction: PushTransaction) -> None:
        """Push every update in ``transaction`` with ``git push --atomic``.

        Leased updates become ``--force-with-lease=<ref>:<expected>``; an
        empty expected value asks Git to require that the ref is absent.

        Raises
        ------
        PushRejectedError
            If Git reports any rejected ref. With ``--atomic`` no ref has
            been updated on the remote in that case.
        GitError
            If the push fails without a per-ref report (network, auth, ...).
        """
        args = ["push", "--porcelain", "--atomic", "--force-if-includes"]
        for update in transaction.leases():
            args.append(f"--force-with-lease={update.ref}:{update.expected_old or ''}")
        args.append(remote)
        args.extend(transaction.refspecs())

        result = self._mutate(args, check=False)
        if result is None or result.returncode == 0:
            return
        rejections = parse_push_porcelain(result.stdout)
        if rejections:
            logger.error("Atomic push to %s rejected: %s", remote, rejections)
            raise PushRejectedError(remote, rejections)
        logger.error(
            "Push failed: %s\nSTDOUT: %s\nSTDERR: %s",
            " ".join(args),
            result.stdout,
            result.stderr,
        )
        raise GitError(result.stderr.strip() or result.stdout.strip())
