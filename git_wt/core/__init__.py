"""Core command orchestration for git-wt."""

from .worktree_manager import WorktreeManager, default_worktree_path

__all__ = ["WorktreeManager", "default_worktree_path"]
