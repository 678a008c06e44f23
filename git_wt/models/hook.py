"""Hook data models."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class HookType(Enum):
    """Points in the add/remove lifecycle where hook scripts run."""
    PRE_ADD = "pre-add"
    POST_ADD = "post-add"
    PRE_REMOVE = "pre-remove"
    POST_REMOVE = "post-remove"


@dataclass(frozen=True)
class HookContext:
    """Values passed to a hook script as positional arguments."""

    branch_name: str
    worktree_path: str
    repo_path: str
    success: Optional[bool] = None  # Only set for post hooks

    def to_args(self) -> List[str]:
        args = [self.branch_name, self.worktree_path, self.repo_path]
        if self.success is not None:
            args.append("true" if self.success else "false")
        return args
