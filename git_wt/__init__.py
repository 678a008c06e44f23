"""
git-wt - An interactive front-end for git worktrees
"""

from .__version__ import __version__
from .core import WorktreeManager
from .cli.main import main

__all__ = ["WorktreeManager", "main", "__version__"]
