"""Data models for git-wt."""

from .worktree import WorktreeInfo, WorktreeStatus, GitRepository, RemovalFailure, DETACHED
from .branch import BranchInfo, BranchType
from .pull_request import PullRequestInfo
from .prune import PrunableWorktree, PruneReason, PruneOptions, PruneResult
from .hook import HookContext, HookType

__all__ = [
    "WorktreeInfo",
    "WorktreeStatus",
    "GitRepository",
    "RemovalFailure",
    "DETACHED",
    "BranchInfo",
    "BranchType",
    "PullRequestInfo",
    "PrunableWorktree",
    "PruneReason",
    "PruneOptions",
    "PruneResult",
    "HookContext",
    "HookType",
]
