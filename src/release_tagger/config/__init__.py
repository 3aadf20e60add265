"""
Configuration loading for release_tagger.

Settings come from the environment and are frozen into a
:class:`ReleaseConfig` once at startup. See
:mod:`release_tagger.config.loader` for implementation details.
"""

from .loader import ConfigError, ReleaseConfig, load_config  # noqa: F401
