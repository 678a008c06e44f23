"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional


class BranchType(Enum):
    """Where a branch lives."""
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class BranchInfo:
    """A branch offered for worktree creation."""
    name: str
    type: BranchType
    in_use: bool = False
    worktree_path: Optional[str] = None  # Set only when in_use
    remote_name: Optional[str] = None  # Set only for remote branches
    # PR fields are None unless PR enrichment was requested
    has_pull_request: Optional[bool] = None
    pr_number: Optional[int] = None
    pr_title: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.type == BranchType.REMOTE

    @property
    def qualified_name(self) -> str:
        """Name as git shows it, e.g. ``origin/feature`` for remote branches."""
        if self.remote_name:
            return f"{self.remote_name}/{self.name}"
        return self.name
