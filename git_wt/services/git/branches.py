"""Branch query service for git-wt."""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple, Union, TYPE_CHECKING

from git_wt.exceptions import PRSourceUnavailableError
from git_wt.models.branch import BranchInfo, BranchType
from git_wt.models.worktree import WorktreeInfo
from git_wt.services.git.base import GitServiceBase
from git_wt.services.git.worktrees import WorktreeService
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from git_wt.config import Config
    from git_wt.services.github_service import GitHubService

logger = get_logger(__name__)


def parse_remote_refs(lines: Iterable[str]) -> List[Tuple[str, str]]:
    """Split ``<remote>/<branch>`` lines into (remote, branch) pairs.

    Symbolic HEAD entries (``origin/HEAD``, ``origin/HEAD -> origin/main``
    or a bare ``origin``) are skipped.
    """
    refs = []
    for line in lines:
        line = line.strip()
        if not line or "->" in line or "/" not in line:
            continue
        remote, name = line.split("/", 1)
        if not name or name == "HEAD":
            continue
        refs.append((remote, name))
    return refs


def build_branch_list(
    local_names: Iterable[str],
    remote_refs: Iterable[Tuple[str, str]],
    worktrees: Iterable[WorktreeInfo],
) -> List[BranchInfo]:
    """Combine local and remote branches into the canonical selection order.

    A remote branch is dropped when a local branch with the same short name
    exists, whichever remote it comes from. Local branches come first, each
    group sorted by name. Selection decoding relies on this order.
    """
    checked_out: Dict[str, str] = {}
    for wt in worktrees:
        if not wt.is_detached:
            checked_out.setdefault(wt.branch, wt.path)

    local_set = {name.strip() for name in local_names if name.strip()}

    local_branches = [
        BranchInfo(
            name=name,
            type=BranchType.LOCAL,
            in_use=name in checked_out,
            worktree_path=checked_out.get(name),
        )
        for name in sorted(local_set)
    ]

    seen = set()
    remote_branches = []
    for remote, name in sorted(remote_refs, key=lambda ref: (ref[1], ref[0])):
        if name in local_set or (remote, name) in seen:
            continue
        seen.add((remote, name))
        remote_branches.append(
            BranchInfo(
                name=name,
                type=BranchType.REMOTE,
                in_use=name in checked_out,
                worktree_path=checked_out.get(name),
                remote_name=remote,
            )
        )

    return local_branches + remote_branches


class BranchService(GitServiceBase):
    """Service for listing branches available for new worktrees."""

    def __init__(
        self,
        repo_path: str,
        config: Union["Config", dict],
        worktree_service: Optional[WorktreeService] = None,
        github_service: Optional["GitHubService"] = None,
    ):
        """Initialize the branch service.

        Args:
            repo_path: Path to the git repository
            config: Configuration dictionary or Config object
            worktree_service: Used to mark branches that are checked out
            github_service: PR data source, only used when PR info is requested
        """
        super().__init__(repo_path, config)
        self.worktree_service = worktree_service or WorktreeService(repo_path, config)
        self.github_service = github_service

    def list_branches(self, include_pr_info: bool = False) -> List[BranchInfo]:
        """List local and remote branches.

        Args:
            include_pr_info: Attach open pull request data to each branch

        Returns:
            Branches in canonical order; empty if git could not be run
        """
        worktrees = self.worktree_service.list_worktrees()
        try:
            repo = self._get_repo()
            # for-each-ref lists real refs only; `git branch` would add
            # "(HEAD detached at ...)" entries
            local_output = repo.git.for_each_ref(
                "--format=%(refname:short)", "refs/heads", kill_after_timeout=self.command_timeout
            )
            remote_output = repo.git.for_each_ref(
                "--format=%(refname:short)", "refs/remotes", kill_after_timeout=self.command_timeout
            )
        except Exception as e:
            logger.debug(f"Could not list branches: {e}")
            return []

        branches = build_branch_list(
            local_output.splitlines(),
            parse_remote_refs(remote_output.splitlines()),
            worktrees,
        )
        logger.debug(f"Found {len(branches)} branches")

        if include_pr_info:
            branches = self._enrich_with_pr_info(branches)
        return branches

    def _enrich_with_pr_info(self, branches: List[BranchInfo]) -> List[BranchInfo]:
        """Attach open PR data, matching PRs to branches by head ref name.

        PR data is fetched once for all branches. On any failure the branches
        are returned unchanged.
        """
        if self.github_service is None:
            logger.debug("[GitHub] No PR data source configured")
            return branches

        try:
            pull_requests = self.github_service.fetch_open_pull_requests()
        except PRSourceUnavailableError as e:
            logger.warning(f"[GitHub] PR info unavailable: {e}")
            return branches
        except Exception as e:
            logger.warning(f"[GitHub] Failed to fetch PR info: {e}")
            return branches

        by_head = {}
        for pr in pull_requests:
            by_head.setdefault(pr.head_ref_name, pr)

        enriched = []
        for branch in branches:
            pr = by_head.get(branch.name)
            enriched.append(
                replace(
                    branch,
                    has_pull_request=pr is not None,
                    pr_number=pr.number if pr else None,
                    pr_title=pr.title if pr else None,
                )
            )
        logger.debug(f"[GitHub] Matched {sum(1 for b in enriched if b.has_pull_request)} branches to PRs")
        return enriched
