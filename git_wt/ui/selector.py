"""Interactive selection of worktrees and branches through fzf."""

from typing import Callable, List, Optional, Sequence, TextIO, Union, TYPE_CHECKING

from rich.console import Console

from git_wt.constants import (
    PROMPT_SELECT_BRANCH,
    PROMPT_SELECT_WORKTREE,
    PROMPT_SELECT_WORKTREE_REMOVE,
)
from git_wt.formatters.lines import render_branch_lines, render_worktree_lines
from git_wt.models.branch import BranchInfo
from git_wt.models.worktree import WorktreeInfo
from git_wt.ui.fzf import ensure_interactive, run_fzf
from git_wt.ui.resolution import resolve_branch, resolve_worktree
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from git_wt.config import Config

logger = get_logger(__name__)

Matcher = Callable[[Sequence[str], str], Optional[str]]


class InteractiveSelector:
    """Encode objects as lines, run the matcher, decode the chosen line.

    Every ``select_*`` method returns None when there is nothing to choose
    from, when the user cancels, and when the chosen line cannot be decoded.
    """

    def __init__(
        self,
        config: Union["Config", dict],
        console: Optional[Console] = None,
        matcher: Matcher = run_fzf,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.config = config
        self.console = console or Console(stderr=True)
        self.matcher = matcher
        self.stdin = stdin
        self.stdout = stdout

    def _choose(self, lines: List[str], prompt: str) -> Optional[str]:
        ensure_interactive(self.config, self.stdin, self.stdout)
        return self.matcher(lines, prompt)

    def select_worktree(
        self, worktrees: Sequence[WorktreeInfo], prompt: str = PROMPT_SELECT_WORKTREE
    ) -> Optional[WorktreeInfo]:
        if not worktrees:
            self.console.print("[yellow]No worktrees found[/yellow]")
            return None

        lines = render_worktree_lines(worktrees)
        chosen = self._choose(lines, prompt)
        return resolve_worktree(chosen, lines, worktrees)

    def select_worktree_for_removal(self, worktrees: Sequence[WorktreeInfo]) -> Optional[WorktreeInfo]:
        """Select among linked worktrees only; the primary worktree is never offered."""
        removable = [wt for wt in worktrees if not wt.is_main]
        if not removable:
            self.console.print("[yellow]No removable worktrees found[/yellow]")
            return None
        return self.select_worktree(removable, PROMPT_SELECT_WORKTREE_REMOVE)

    def select_branch(
        self, branches: Sequence[BranchInfo], prompt: str = PROMPT_SELECT_BRANCH
    ) -> Optional[BranchInfo]:
        if not branches:
            self.console.print("[yellow]No branches found[/yellow]")
            return None

        lines = render_branch_lines(branches)
        chosen = self._choose(lines, prompt)
        return resolve_branch(chosen, lines, branches)
