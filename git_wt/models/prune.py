"""Prune decision models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from git_wt.models.worktree import WorktreeInfo


class PruneReason(Enum):
    """Why a worktree is considered safe to delete."""
    MERGED_PR = "merged-pr"
    DELETED_BRANCH = "deleted-branch"


@dataclass(frozen=True)
class PrunableWorktree:
    """A worktree selected for pruning, with its justification."""

    worktree: WorktreeInfo
    reason: PruneReason
    has_uncommitted_changes: bool = False
    # Set only when reason is MERGED_PR
    pr_number: Optional[int] = None
    pr_title: Optional[str] = None
    merged_at: Optional[str] = None


@dataclass
class PruneOptions:
    """Options for a prune run."""

    dry_run: bool = False
    force: bool = False
    merged_only: bool = True
    all: bool = False


@dataclass
class PruneResult:
    """Outcome of a prune run."""

    candidates: List[PrunableWorktree] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (path, error)
    cancelled: bool = False
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return not self.failed
