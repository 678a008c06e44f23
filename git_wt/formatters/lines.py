"""Selector line rendering for branches and worktrees.

Every domain object renders to exactly one line. Styling is applied to
substrings only, so the plain text of a line never depends on color.
"""

from typing import List, Sequence

from rich.console import Console
from rich.text import Text

from git_wt.constants import STYLES
from git_wt.models.branch import BranchInfo
from git_wt.models.worktree import WorktreeInfo


def branch_text(branch: BranchInfo) -> Text:
    """
    Build the styled line for a branch.

    Shape: ``[<remote>/]<name> [<type>]`` followed by an optional
    ``(PR #N: title)`` annotation and an optional ``(in use: <path>)`` one.

    Args:
        branch: Branch to render

    Returns:
        Rich Text for the line
    """
    text = Text()
    if branch.remote_name:
        text.append(f"{branch.remote_name}/", style=STYLES["remote"])
    text.append(branch.name, style=STYLES[branch.type.value])
    text.append(f" [{branch.type.value}]", style=STYLES["annotation"])

    if branch.has_pull_request and branch.pr_number is not None:
        pr_label = f" (PR #{branch.pr_number}"
        if branch.pr_title:
            pr_label += f": {branch.pr_title}"
        text.append(pr_label + ")", style=STYLES["pr"])

    if branch.in_use and branch.worktree_path:
        text.append(f" (in use: {branch.worktree_path})", style=STYLES["annotation"])
    return text


def worktree_text(worktree: WorktreeInfo) -> Text:
    """Build the styled ``<path> [<branch>]`` line, primary marked ``(main)``."""
    text = Text(worktree.path)
    label = f"{worktree.branch} (main)" if worktree.is_main else worktree.branch
    text.append(" [")
    text.append(label, style=STYLES["main"] if worktree.is_main else STYLES["branch"])
    text.append("]")
    return text


_ansi_console = Console(force_terminal=True, color_system="standard", highlight=False)


def to_ansi(text: Text) -> str:
    """Render Text as a single line with ANSI escape sequences."""
    with _ansi_console.capture() as capture:
        _ansi_console.print(text, end="", soft_wrap=True)
    return capture.get()


def render_branch_lines(branches: Sequence[BranchInfo]) -> List[str]:
    """ANSI lines for branches, in the order given."""
    return [to_ansi(branch_text(b)) for b in branches]


def render_worktree_lines(worktrees: Sequence[WorktreeInfo]) -> List[str]:
    """ANSI lines for worktrees, in the order given."""
    return [to_ansi(worktree_text(wt)) for wt in worktrees]
