"""Worktree data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DETACHED = "detached"


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a git worktree."""

    path: str
    branch: str  # Branch name, or "detached"
    commit: str
    is_main: bool  # Is this the primary working tree?

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED

    def __str__(self) -> str:
        main_marker = " (main)" if self.is_main else ""
        return f"{self.branch} @ {self.path}{main_marker}"


@dataclass(frozen=True)
class WorktreeStatus:
    """Dirty/locked state of a worktree, as needed before removal."""

    is_dirty: bool
    is_locked: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class GitRepository:
    """A repository located under the configured root."""

    path: str
    name: str


class RemovalFailure(Enum):
    """Known causes of a failed ``git worktree remove``."""
    UNCOMMITTED_CHANGES = "uncommitted-changes"
    LOCKED = "locked"
    CURRENT_DIRECTORY = "current-directory"
    OTHER = "other"
