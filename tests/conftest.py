import fnmatch
import itertools
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import pytest

from release_tagger.errors import DefaultBranchUnknown, RemoteNotFound
from release_tagger.vcs.backend import GitError, PushRejectedError, PushTransaction, UpdateMode

HEAD = "c0ffee0000000000000000000000000000000001"
OTHER = "beef000000000000000000000000000000000002"


@dataclass
class FakeTag:
    oid: str
    commit: str
    message: str = ""


class FakeRepository:
    """In-memory repository with one remote tag table per remote.

    ``before_push`` is called once, right before a push transaction is
    validated, which lets tests move refs on the remote after the lease
    was read.
    """

    def __init__(self, head: str = HEAD, branch: str = "main") -> None:
        self.head = head
        self.branch = branch
        self.clean = True
        self.remotes: Dict[str, Optional[str]] = {"upstream": "main"}
        self.local: Dict[str, FakeTag] = {}
        self.remote: Dict[str, Dict[str, FakeTag]] = {"upstream": {}}
        self.calls: List[tuple] = []
        self.pushes: List[PushTransaction] = []
        self.before_push: Optional[Callable[["FakeRepository"], None]] = None
        self._oids = itertools.count(1)

    # -- helpers -----------------------------------------------------------
    def new_oid(self) -> str:
        return f"{next(self._oids):040x}"

    def add_tag(self, name, commit=None, local=True, remote=None, message=""):
        tag = FakeTag(self.new_oid(), commit or self.head, message)
        if local:
            self.local[name] = tag
        if remote:
            self.remote[remote][name] = tag
        return tag

    def set_remote_tag(self, remote, name, commit):
        self.remote[remote][name] = FakeTag(self.new_oid(), commit)

    # -- reads -------------------------------------------------------------
    def list_tags(self, pattern="*"):
        return {name for name in self.local if fnmatch.fnmatchcase(name, pattern)}

    def tags_pointing_at(self, commit):
        return {name for name, tag in self.local.items() if tag.commit == commit}

    def tag_exists(self, name):
        return name in self.local

    def head_commit(self):
        return self.head

    def short_commit(self, rev):
        if rev in self.local:
            return self.local[rev].commit[:7]
        return rev[:7]

    def is_working_tree_clean(self):
        return self.clean

    def remote_exists(self, remote):
        return remote in self.remotes

    def detect_default_branch(self, remote):
        if remote not in self.remotes:
            raise RemoteNotFound(remote)
        if not self.remotes[remote]:
            raise DefaultBranchUnknown(remote)
        return self.remotes[remote]

    def current_branch(self):
        return self.branch

    def remote_tag_oid(self, remote, tag):
        found = self.remote[remote].get(tag)
        return found.oid if found else None

    # -- writes ------------------------------------------------------------
    def fetch(self, remote, force=True):
        self.calls.append(("fetch", remote))
        for name, tag in self.remote[remote].items():
            local = self.local.get(name)
            if local is not None and local.oid != tag.oid and not force:
                raise GitError(f"! [rejected] {name} -> {name} (would clobber existing tag)")
            self.local[name] = tag

    def pull_ff_only(self, remote, branch):
        self.calls.append(("pull", remote, branch))

    def create_annotated_tag(self, name, message, target):
        self.calls.append(("tag", name, target))
        if name in self.local:
            raise GitError(f"tag '{name}' already exists")
        self.local[name] = FakeTag(self.new_oid(), target, message)

    def force_move_tag(self, name, message, target):
        self.calls.append(("tag -f", name, target))
        self.local[name] = FakeTag(self.new_oid(), target, message)

    def push_atomic(self, remote, transaction):
        self.calls.append(("push", remote))
        if self.before_push is not None:
            hook, self.before_push = self.before_push, None
            hook(self)

        table = self.remote[remote]
        rejections = {}
        for update in transaction.updates:
            name = update.ref[len("refs/tags/"):]
            current = table.get(name)
            source = self.local[update.source[len("refs/tags/"):]]
            if update.mode is UpdateMode.LEASE:
                current_oid = current.oid if current else None
                if current_oid != update.expected_old:
                    rejections[update.ref] = "stale info"
            elif current is not None and current.oid != source.oid:
                rejections[update.ref] = "already exists"

        if rejections:
            for update in transaction.updates:
                rejections.setdefault(update.ref, "atomic push failed")
            raise PushRejectedError(remote, rejections)

        for update in transaction.updates:
            table[update.ref[len("refs/tags/"):]] = self.local[update.source[len("refs/tags/"):]]
        self.pushes.append(transaction)


class ScriptedOperator:
    """Replays queued answers. ``None`` in ``answers`` accepts the default."""

    def __init__(self, answers=(), confirmations=()):
        self.answers = list(answers)
        self.confirmations = list(confirmations)
        self.asked = []
        self.confirmed = []

    def ask(self, text, default):
        self.asked.append((text, default))
        answer = self.answers.pop(0) if self.answers else None
        return default if answer is None else answer

    def confirm(self, text):
        self.confirmed.append(text)
        return self.confirmations.pop(0) if self.confirmations else False


@pytest.fixture
def fake_repo():
    return FakeRepository()


@pytest.fixture
def scripted_operator():
    return ScriptedOperator
