"""Locate the working repository under the configured root layout.

Repositories are expected at ``<repo_root>/<owner>/<repo>`` (the ghq
layout). Any directory below that pair resolves to the pair itself.
"""

import os
from typing import Optional

import git

from git_wt.models.worktree import GitRepository
from git_wt.utils.logging import get_logger

logger = get_logger(__name__)


def _resolve_primary_worktree(candidate: str) -> str:
    """Map a linked worktree directory to its primary repository directory."""
    try:
        common_dir = git.Repo(candidate).common_dir
        return os.path.dirname(os.path.realpath(common_dir))
    except Exception as e:
        logger.debug(f"Could not resolve primary worktree for {candidate}: {e}")
        return candidate


def find_repository(cwd: str, repo_root: str) -> Optional[GitRepository]:
    """Derive the repository root for ``cwd``.

    Args:
        cwd: Current working directory
        repo_root: Root of the ``<owner>/<repo>`` layout

    Returns:
        GitRepository, or None when cwd is outside the layout or has no ``.git``
    """
    try:
        current = os.path.realpath(cwd)
        root = os.path.realpath(repo_root)

        if not current.startswith(root + os.sep):
            logger.debug(f"{current} is not under {root}")
            return None

        parts = os.path.relpath(current, root).split(os.sep)
        if len(parts) < 2:
            logger.debug(f"{current} is not inside an <owner>/<repo> directory")
            return None

        candidate = os.path.join(root, parts[0], parts[1])
        git_path = os.path.join(candidate, ".git")
        if not os.path.exists(git_path):
            logger.debug(f"No .git found in {candidate}")
            return None

        # A .git file means we are inside a linked worktree
        if os.path.isfile(git_path):
            candidate = _resolve_primary_worktree(candidate)

        return GitRepository(path=candidate, name=os.path.basename(candidate))
    except Exception as e:
        logger.debug(f"Could not locate repository from {cwd}: {e}")
        return None
