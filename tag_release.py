#!/usr/bin/env python
"""
Thin wrapper script to invoke the release_tagger CLI.

Running ``python tag_release.py`` is equivalent to running the
``tag-release`` console script installed via ``pyproject.toml``.
"""

from release_tagger.cli import main


if __name__ == "__main__":
    main(prog_name="tag-release")
