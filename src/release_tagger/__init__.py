"""
Top-level package for release_tagger.

This package exposes the main CLI entry point via the
``release_tagger.cli`` module.
"""

from pathlib import Path

__all__ = ["__version__", "__base_version__"]

# Used when the version cannot be derived from git tags
__base_version__ = "0"

# Full version - derived from the tags of the checkout this package is run
# from, never from the repository being released
try:
    from release_tagger._version import generate_version, package_checkout
    _checkout = package_checkout(Path(__file__).resolve().parent)
    if _checkout is not None:
        __version__ = generate_version(__base_version__, _checkout)
    else:
        __version__ = f"{__base_version__}.0.0.dev0"
except Exception:
    # Fallback if version generation fails
    __version__ = f"{__base_version__}.0.0.dev0"
