"""
Version control integration.

This package contains the backend interface the release flow is written
against and the Git implementation used in production.
"""

from .backend import (  # noqa: F401
    GitError,
    PushRejectedError,
    PushTransaction,
    RefUpdate,
    UpdateMode,
    VCSBackend,
)
from .git_client import GitClient  # noqa: F401
