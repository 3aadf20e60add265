"""
Dynamic version generation for release_tagger.

The tool is released with the same tags it creates, so its own version is
read back from them:

- Release: the highest ``vM.m.p`` tag in the checkout, as ``M.m.p``
- Local label: the short commit SHA of HEAD

Format: {major}.{minor}.{patch}.dev0+g{commit_sha}
Example: 1.4.2.dev0+ga1b2c3d
"""

import subprocess
from pathlib import Path
from typing import Optional

from release_tagger import semver


def package_checkout(package_dir: Path) -> Optional[Path]:
    """
    Return the source checkout holding ``package_dir`` (``<root>/src/release_tagger``).

    Returns:
        The checkout root, or None for an installed copy outside a checkout.
    """
    root = package_dir.parent.parent
    if (root / ".git").exists():
        return root
    return None


def _git(args, repo_path: Optional[Path] = None) -> str:
    cmd = ["git"]
    if repo_path:
        cmd += ["-C", str(repo_path)]
    result = subprocess.run(cmd + args, capture_output=True, text=True, check=True)
    return result.stdout.strip()


def get_git_commit_sha(repo_path: Optional[Path] = None) -> str:
    """
    Get the short commit SHA of the current HEAD.

    Returns:
        Short commit SHA (7 characters) or 'unknown' if not in a git repo.
    """
    try:
        return _git(["rev-parse", "--short=7", "HEAD"], repo_path)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


def get_release_from_tags(repo_path: Optional[Path] = None) -> Optional[semver.VersionTriple]:
    """
    Get the highest release recorded in ``vM.m.p`` tags.

    Returns:
        The parsed version, or None if there are no release tags.
    """
    try:
        output = _git(["tag", "-l", "v*.*.*"], repo_path)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    latest = semver.highest(output.splitlines())
    return semver.parse(latest) if latest else None


def generate_version(base_version: str, repo_path: Optional[Path] = None) -> str:
    """
    Generate the full version string in PEP 440 compliant format.

    Args:
        base_version: Major version used when no release tag exists.
        repo_path: Path to the repository root. If None, uses the current
            directory; callers pass the tool's own checkout.
    """
    release = get_release_from_tags(repo_path)
    if release is None:
        public = f"{base_version}.0.0"
    else:
        public = f"{release.major}.{release.minor}.{release.patch}"
    commit_sha = get_git_commit_sha(repo_path)
    if commit_sha == "unknown":
        return f"{public}.dev0"
    return f"{public}.dev0+g{commit_sha}"
