"""
Local tag creation.

Semver tags are created once and never overwritten; major tags are moved
with force. Protection of the remote copy of a major tag happens at push
time, see :mod:`release_tagger.push`.
"""

from __future__ import annotations

import logging

from release_tagger import semver
from release_tagger.errors import DuplicateTagError, ValidationError
from release_tagger.vcs.backend import VCSBackend


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class TagWriter:
    """Creates and moves annotated tags in the local repository."""

    def __init__(self, backend: VCSBackend) -> None:
        self.backend = backend

    def create_annotated(self, name: str, message: str, target: str) -> None:
        """Create the annotated semver tag ``name`` at ``target``.

        Raises
        ------
        ValidationError
            If ``name`` is not a semver tag.
        DuplicateTagError
            If ``name`` already exists locally.
        """
        if not semver.is_semver_tag(name):
            raise ValidationError(f"Refusing to create non-semver tag '{name}' as a release.")
        if self.backend.tag_exists(name):
            raise DuplicateTagError(name)
        logger.debug("Creating tag %s at %s", name, target)
        self.backend.create_annotated_tag(name, message, target)

    def force_move(self, name: str, message: str, target: str) -> None:
        """Create or overwrite the annotated major tag ``name`` at ``target``."""
        if not semver.is_major_tag(name):
            raise ValidationError(f"Refusing to force-move non-major tag '{name}'.")
        logger.debug("Moving tag %s to %s", name, target)
        self.backend.force_move_tag(name, message, target)
