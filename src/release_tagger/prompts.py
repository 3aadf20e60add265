"""
Operator interaction for the release flow.

The flow asks questions through an object with ``ask`` and ``confirm``
methods. :class:`ClickOperator` answers them from the terminal; tests pass
an object replaying scripted answers instead.
"""

from __future__ import annotations

from typing import Protocol

import click

from release_tagger.errors import OperationCancelled


class Operator(Protocol):
    def ask(self, text: str, default: str) -> str: ...

    def confirm(self, text: str) -> bool: ...


class ClickOperator:
    """Prompts on the terminal with ``click``."""

    def ask(self, text: str, default: str) -> str:
        """Return the operator's answer, or ``default`` on empty input."""
        try:
            answer = click.prompt(f"   {text}", default=default, show_default=True, type=str)
        except click.Abort as exc:
            raise OperationCancelled("Aborted at prompt.") from exc
        return answer.strip() or default

    def confirm(self, text: str) -> bool:
        try:
            return click.confirm(f"   {text}", default=False)
        except click.Abort as exc:
            raise OperationCancelled("Aborted at prompt.") from exc
