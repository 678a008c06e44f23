"""Git-related services for git-wt."""

from .base import GitServiceBase, format_git_error
from .repository import find_repository
from .worktrees import WorktreeService
from .branches import BranchService

__all__ = [
    "GitServiceBase",
    "format_git_error",
    "find_repository",
    "WorktreeService",
    "BranchService",
]
