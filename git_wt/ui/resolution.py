"""Decode a line chosen in the fuzzy matcher back to the object it was rendered from.

The decode is an ordered chain of pure functions, each taking
``(chosen_line, rendered_lines, items)`` and returning the matching item or
None. A later tier only runs when every earlier one found nothing:

1. exact match on the ANSI-stripped, trimmed line
2. position of the first rendered line equal after whitespace normalisation
3. field extraction from the line (branch name or worktree path)

If all tiers fail the result is None, the same as a cancelled selection.
"""

import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from git_wt.models.branch import BranchInfo
from git_wt.models.worktree import WorktreeInfo
from git_wt.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Resolver = Callable[[str, Sequence[str], Sequence[T]], Optional[T]]

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_ansi(line: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_RE.sub("", line)


def clean_line(line: str) -> str:
    return strip_ansi(line).strip()


def _normalize_whitespace(line: str) -> str:
    return _WHITESPACE_RE.sub(" ", clean_line(line))


def build_line_map(rendered_lines: Sequence[str], items: Sequence[T]) -> Dict[str, T]:
    """Map each clean line to its item.

    Lines that occur more than once are left out so that an exact hit is
    never ambiguous; those fall through to the positional tier.
    """
    counts: Dict[str, int] = {}
    for line in rendered_lines:
        key = clean_line(line)
        counts[key] = counts.get(key, 0) + 1

    return {
        clean_line(line): item
        for line, item in zip(rendered_lines, items)
        if counts[clean_line(line)] == 1
    }


def match_exact(chosen: str, rendered_lines: Sequence[str], items: Sequence[T]) -> Optional[T]:
    return build_line_map(rendered_lines, items).get(clean_line(chosen))


def match_position(chosen: str, rendered_lines: Sequence[str], items: Sequence[T]) -> Optional[T]:
    target = _normalize_whitespace(chosen)
    if not target:
        return None
    for index, line in enumerate(rendered_lines):
        if _normalize_whitespace(line) == target and index < len(items):
            return items[index]
    return None


def extract_branch_name(line: str) -> Optional[Tuple[Optional[str], str]]:
    """Recover ``(remote, name)`` from a branch line.

    The first space-separated token is taken as ``[<remote>/]<name>``; it
    is split on the first ``/`` only, so ``origin/feature/user-auth/login``
    gives remote ``origin`` and name ``feature/user-auth/login``. A token
    without ``/`` gives remote None.

    Returns:
        None when the line holds no usable name (empty, or starts with an annotation)
    """
    text = clean_line(line)
    if not text:
        return None
    token = text.split(" ", 1)[0]
    if not token or token.startswith("["):
        return None
    if "/" in token:
        remote, name = token.split("/", 1)
        if not name:
            return None
        return remote, name
    return None, token


def match_extracted_branch(
    chosen: str, rendered_lines: Sequence[str], items: Sequence[BranchInfo]
) -> Optional[BranchInfo]:
    text = clean_line(chosen)
    extracted = extract_branch_name(text)
    if extracted is None:
        return None

    # Local branch names may contain "/", so try the whole token first
    token = text.split(" ", 1)[0]
    for branch in items:
        if branch.qualified_name == token:
            return branch

    remote, name = extracted
    candidates = [b for b in items if b.name == name]
    for branch in candidates:
        if branch.remote_name == remote:
            return branch
    return candidates[0] if candidates else None


def extract_worktree_path(line: str) -> Optional[str]:
    """Recover the path from a ``<path> [<branch>]`` line."""
    text = clean_line(line)
    if not text or text.startswith("["):
        return None
    path = text.rsplit(" [", 1)[0].strip() if text.endswith("]") else text
    return path or None


def match_extracted_worktree(
    chosen: str, rendered_lines: Sequence[str], items: Sequence[WorktreeInfo]
) -> Optional[WorktreeInfo]:
    path = extract_worktree_path(chosen)
    if path is None:
        return None
    for worktree in items:
        if worktree.path == path:
            return worktree
    return None


def resolve_selection(
    chosen: Optional[str],
    rendered_lines: Sequence[str],
    items: Sequence[T],
    resolvers: Sequence[Resolver],
) -> Optional[T]:
    """Run the resolver chain and return the first match."""
    if chosen is None:
        return None
    for resolver in resolvers:
        item = resolver(chosen, rendered_lines, items)
        if item is not None:
            logger.debug(f"Resolved selection via {resolver.__name__}")
            return item
    logger.debug(f"Could not resolve selection: {clean_line(chosen)!r}")
    return None


BRANCH_RESOLVERS: List[Resolver] = [match_exact, match_position, match_extracted_branch]
WORKTREE_RESOLVERS: List[Resolver] = [match_exact, match_position, match_extracted_worktree]


def resolve_branch(
    chosen: Optional[str], rendered_lines: Sequence[str], branches: Sequence[BranchInfo]
) -> Optional[BranchInfo]:
    return resolve_selection(chosen, rendered_lines, branches, BRANCH_RESOLVERS)


def resolve_worktree(
    chosen: Optional[str], rendered_lines: Sequence[str], worktrees: Sequence[WorktreeInfo]
) -> Optional[WorktreeInfo]:
    return resolve_selection(chosen, rendered_lines, worktrees, WORKTREE_RESOLVERS)
