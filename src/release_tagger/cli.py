"""
Command line interface for the release_tagger tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``tag-release`` command. It loads the
configuration from the environment, locates the Git repository, runs the
release flow, and maps every failure to a distinct exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple, Type

import click

from release_tagger import __version__
from release_tagger.config.loader import ConfigError, load_config
from release_tagger.errors import (
    ConcurrentModificationError,
    DuplicateTagError,
    OperationCancelled,
    PreconditionError,
    ValidationError,
)
from release_tagger.prompts import ClickOperator
from release_tagger.release import ReleaseFlow
from release_tagger.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
# 2 is reserved for click usage errors
EXIT_PRECONDITION_FAILED = 3
EXIT_VALIDATION_ERROR = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_DUPLICATE_TAG = 7
EXIT_CONCURRENT_MODIFICATION = 8
EXIT_CANCELLED = 9

_EXIT_CODES: List[Tuple[Type[Exception], int]] = [
    (ConfigError, EXIT_CONFIG_ERROR),
    (PreconditionError, EXIT_PRECONDITION_FAILED),
    (ValidationError, EXIT_VALIDATION_ERROR),
    (DuplicateTagError, EXIT_DUPLICATE_TAG),
    (ConcurrentModificationError, EXIT_CONCURRENT_MODIFICATION),
    (OperationCancelled, EXIT_CANCELLED),
    (GitError, EXIT_VCS_FAILURE),
]


def exit_code_for(exc: Exception) -> int:
    """Return the exit code the CLI uses for ``exc``."""
    for exc_type, code in _EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return EXIT_GENERIC_ERROR


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_summary_box(title: str, items: List[str]):
    """Print a formatted summary box."""
    max_width = max(len(title), max(len(item) for item in items) if items else 0)
    box_width = max_width + 2

    click.echo(f"\n┌{'─' * box_width}┐")
    click.echo(f"│ {title.ljust(box_width - 1)}│")
    click.echo(f"├{'─' * box_width}┤")
    for item in items:
        click.echo(f"│ {item.ljust(box_width - 1)}│")
    click.echo(f"└{'─' * box_width}┘")


def _flow_echo(line: str) -> None:
    """Route flow messages to the matching status helper."""
    if line.startswith("Warning: "):
        print_warning(line[len("Warning: "):])
    elif line.startswith("Note: "):
        print_info(line[len("Note: "):])
    else:
        click.echo(line)


@click.command()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="tag-release")
def main(verbose: bool) -> None:
    """🏷  Create and push a semver tag plus its moving major tag.

    Configuration is read from the environment: UPSTREAM_REMOTE selects the
    remote (default "upstream") and DRY_RUN=1 prints the Git commands that
    would modify the repository instead of running them.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    click.echo("\n" + "=" * 60)
    click.echo("🏷  Release Tagger".center(60))
    click.echo("=" * 60)

    ctx = click.get_current_context(silent=True)

    try:
        config = load_config()
        if config.dry_run:
            print_info("Dry run: mutating Git commands are printed, not executed")

        repo_root = GitClient.find_repo_root(Path.cwd())
        if repo_root is None:
            raise PreconditionError("No Git repository found in current directory or parent directories.")
        logger.debug("Repository root: %s", repo_root)

        client = GitClient(repo_root, dry_run=config.dry_run, echo=click.echo)
        flow = ReleaseFlow(config, client, ClickOperator(), echo=_flow_echo)
        result = flow.run()

    except click.exceptions.Exit:
        raise
    except (
        ConfigError,
        PreconditionError,
        ValidationError,
        DuplicateTagError,
        ConcurrentModificationError,
        OperationCancelled,
        GitError,
    ) as exc:
        print_error(str(exc))
        if isinstance(exc, ConcurrentModificationError):
            print_info("Local tags created by this run were left in place.", indent=1)
        raise click.exceptions.Exit(exit_code_for(exc))
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)

    print_success("Done!")
    print_summary_box("Release tags", result.summary_lines())
    raise click.exceptions.Exit(EXIT_SUCCESS)
