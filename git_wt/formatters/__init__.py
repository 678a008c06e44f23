"""Formatting utilities for git-wt.

- lines: selector lines for branches and worktrees
- prune: prune candidate descriptions
"""

from .lines import (
    branch_text,
    worktree_text,
    to_ansi,
    render_branch_lines,
    render_worktree_lines,
)
from .prune import format_prune_reason, format_prune_candidate

__all__ = [
    "branch_text",
    "worktree_text",
    "to_ansi",
    "render_branch_lines",
    "render_worktree_lines",
    "format_prune_reason",
    "format_prune_candidate",
]
