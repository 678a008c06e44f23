"""Prune candidate formatting."""

from rich.markup import escape

from git_wt.models.prune import PrunableWorktree, PruneReason


def format_prune_reason(candidate: PrunableWorktree) -> str:
    """
    Describe why a worktree is prunable.

    Examples:
        "merged PR #12: Add X (2024-01-02T10:00:00+00:00)"
        "branch deleted on remote"
    """
    if candidate.reason == PruneReason.MERGED_PR:
        reason = f"merged PR #{candidate.pr_number}"
        if candidate.pr_title:
            reason += f": {candidate.pr_title}"
        if candidate.merged_at:
            reason += f" ({candidate.merged_at})"
        return reason
    return "branch deleted on remote"


def format_prune_candidate(candidate: PrunableWorktree) -> str:
    """Format one candidate as a rich-markup bullet line."""
    wt = candidate.worktree
    line = f"  • {escape(wt.path)} (branch: {escape(wt.branch)}, {escape(format_prune_reason(candidate))})"
    if candidate.has_uncommitted_changes:
        line += " [yellow]⚠ uncommitted changes[/yellow]"
    return line
