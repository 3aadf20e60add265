"""
Configuration loader for release_tagger.

The tool is configured through two environment variables:

- ``UPSTREAM_REMOTE``: name of the remote tags are read from and pushed to
  (default ``upstream``);
- ``DRY_RUN``: ``1`` to print mutating Git commands instead of running
  them, ``0`` (the default) to run them.

The values are validated and returned as an immutable
:class:`ReleaseConfig`. Invalid values raise :class:`ConfigError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_REMOTE = "upstream"
_TRUE_VALUES = {"1"}
_FALSE_VALUES = {"", "0"}


class ConfigError(Exception):
    """Raised when an environment setting is invalid."""

    pass


@dataclass(frozen=True)
class ReleaseConfig:
    """Settings for one release run."""

    upstream_remote: str = DEFAULT_REMOTE
    dry_run: bool = False


def load_config(environ: Optional[Mapping[str, str]] = None) -> ReleaseConfig:
    """Build the release configuration from ``environ``.

    Args:
        environ: Mapping to read settings from. Defaults to ``os.environ``.

    Returns:
        The validated :class:`ReleaseConfig`.

    Raises:
        ConfigError: If ``DRY_RUN`` is not ``0`` or ``1``, or the remote
            name contains whitespace.
    """
    env = os.environ if environ is None else environ

    remote = env.get("UPSTREAM_REMOTE", "").strip() or DEFAULT_REMOTE
    if any(ch.isspace() for ch in remote):
        raise ConfigError(f"Invalid UPSTREAM_REMOTE '{remote}': remote names cannot contain whitespace")

    raw_dry_run = env.get("DRY_RUN", "").strip()
    if raw_dry_run in _TRUE_VALUES:
        dry_run = True
    elif raw_dry_run in _FALSE_VALUES:
        dry_run = False
    else:
        raise ConfigError(f"Invalid DRY_RUN '{raw_dry_run}': expected 0 or 1")

    config = ReleaseConfig(upstream_remote=remote, dry_run=dry_run)
    logger.debug("Loaded configuration: %s", config)
    return config
