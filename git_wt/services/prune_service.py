"""Prune decision engine: find and remove worktrees whose branches are done."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union, TYPE_CHECKING

from rich.console import Console

from git_wt.constants import GITHUB_TOKEN_HINT
from git_wt.exceptions import PRSourceUnavailableError, PruneAbortedError
from git_wt.formatters.prune import format_prune_candidate
from git_wt.models.branch import BranchType
from git_wt.models.prune import PrunableWorktree, PruneOptions, PruneReason, PruneResult
from git_wt.models.pull_request import PR_STATE_MERGED, PullRequestInfo
from git_wt.models.worktree import WorktreeInfo
from git_wt.services.git.worktrees import WorktreeService
from git_wt.ui.prompts import confirm as confirm_prompt
from git_wt.utils.logging import get_logger
from git_wt.utils.threading import get_optimal_worker_count

if TYPE_CHECKING:
    from git_wt.config import Config
    from git_wt.services.github_service import GitHubService

logger = get_logger(__name__)

ConfirmFn = Callable[[Console, str], bool]


def classify_candidate(
    worktree: WorktreeInfo,
    remote_exists: bool,
    merged_by_head: Mapping[str, PullRequestInfo],
    merged_only: bool,
    include_deleted: bool,
    has_uncommitted_changes: bool = False,
) -> Optional[PrunableWorktree]:
    """Decide whether one worktree is prunable.

    Precedence:
        1. branch gone from the remote: ``deleted-branch``, kept only with include_deleted
        2. merged_only and a MERGED PR whose head is the branch: ``merged-pr``
        3. otherwise not prunable
    """
    if not remote_exists:
        if not include_deleted:
            return None
        return PrunableWorktree(
            worktree=worktree,
            reason=PruneReason.DELETED_BRANCH,
            has_uncommitted_changes=has_uncommitted_changes,
        )

    if merged_only:
        pr = merged_by_head.get(worktree.branch)
        if pr is not None and pr.head_ref_name == worktree.branch and pr.state == PR_STATE_MERGED:
            return PrunableWorktree(
                worktree=worktree,
                reason=PruneReason.MERGED_PR,
                has_uncommitted_changes=has_uncommitted_changes,
                pr_number=pr.number,
                pr_title=pr.title,
                merged_at=pr.merged_at,
            )
    return None


def index_merged_pull_requests(pull_requests: List[PullRequestInfo]) -> Dict[str, PullRequestInfo]:
    """Map head ref to the first merged PR for it (the list is newest first)."""
    merged: Dict[str, PullRequestInfo] = {}
    for pr in pull_requests:
        if pr.state == PR_STATE_MERGED:
            merged.setdefault(pr.head_ref_name, pr)
    return merged


class PruneService:
    """Finds prunable worktrees and removes them after confirmation."""

    def __init__(
        self,
        repo_path: str,
        config: Union["Config", dict],
        worktree_service: Optional[WorktreeService] = None,
        github_service: Optional["GitHubService"] = None,
        console: Optional[Console] = None,
        confirm: ConfirmFn = confirm_prompt,
    ):
        """Initialize the prune service.

        Args:
            repo_path: Path to the primary worktree
            config: Configuration dictionary or Config object
            worktree_service: Git worktree queries and mutations
            github_service: PR data source; None means PR data is unavailable
            console: Console for user-facing output
            confirm: Yes/no prompt, replaced in tests
        """
        self.repo_path = repo_path
        self.config = config
        self.worktree_service = worktree_service or WorktreeService(repo_path, config)
        self.github_service = github_service
        self.console = console or Console()
        self.confirm = confirm
        self.workers = config.get("workers")

    def _fetch_merged_pull_requests(self) -> Dict[str, PullRequestInfo]:
        """Get merged PRs or abort: prune never guesses without them."""
        if self.github_service is None:
            raise PruneAbortedError("Cannot determine merged pull requests: no PR data source")

        try:
            pull_requests = self.github_service.fetch_merged_pull_requests()
        except PRSourceUnavailableError as e:
            message = f"Cannot determine merged pull requests ({e.reason}): {e.message}"
            if e.reason == PRSourceUnavailableError.UNAUTHENTICATED:
                message += f"\n{GITHUB_TOKEN_HINT}"
            raise PruneAbortedError(message, cause=e) from e

        return index_merged_pull_requests(pull_requests)

    def _probe(self, worktree: WorktreeInfo) -> Tuple[bool, bool]:
        remote_exists = self.worktree_service.branch_exists(worktree.branch, BranchType.REMOTE)
        dirty = self.worktree_service.has_uncommitted_changes(worktree.path)
        return remote_exists, dirty

    def find_prunable_worktrees(
        self, merged_only: bool = True, include_deleted: bool = False
    ) -> List[PrunableWorktree]:
        """Classify every linked worktree.

        Args:
            merged_only: Prune worktrees whose branch has a merged PR
            include_deleted: Prune worktrees whose branch was deleted on the remote

        Returns:
            Prunable worktrees in ``git worktree list`` order

        Raises:
            PruneAbortedError: merged_only is set and PR data is unavailable
        """
        ok, error = self.worktree_service.refresh_remote()
        if not ok:
            self.console.print(
                f"[yellow]⚠️  Could not fetch from remote, using last known state: {error}[/yellow]"
            )

        merged_by_head: Dict[str, PullRequestInfo] = {}
        if merged_only:
            merged_by_head = self._fetch_merged_pull_requests()

        candidates = [
            wt for wt in self.worktree_service.list_worktrees()
            if not wt.is_main and not wt.is_detached
        ]
        if not candidates:
            return []

        workers = get_optimal_worker_count(self.workers, task_count=len(candidates))
        logger.debug(f"Probing {len(candidates)} worktrees with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            probes = list(executor.map(self._probe, candidates))

        prunable = []
        for worktree, (remote_exists, dirty) in zip(candidates, probes):
            result = classify_candidate(
                worktree,
                remote_exists=remote_exists,
                merged_by_head=merged_by_head,
                merged_only=merged_only,
                include_deleted=include_deleted,
                has_uncommitted_changes=dirty,
            )
            if result is not None:
                logger.debug(f"Prunable: {worktree.path} ({result.reason.value})")
                prunable.append(result)
        return prunable

    def run(self, options: PruneOptions) -> PruneResult:
        """Find candidates, show them, confirm, and remove them.

        A failed removal is recorded and the batch continues.
        """
        result = PruneResult(dry_run=options.dry_run)
        result.candidates = self.find_prunable_worktrees(
            merged_only=options.merged_only, include_deleted=options.all
        )

        if not result.candidates:
            self.console.print("[green]No worktrees to prune[/green]")
            return result

        self.console.print(f"\n[yellow]Found {len(result.candidates)} worktrees to prune:[/yellow]")
        for candidate in result.candidates:
            self.console.print(format_prune_candidate(candidate))

        dirty_count = sum(1 for c in result.candidates if c.has_uncommitted_changes)
        if dirty_count:
            self.console.print(
                f"\n[yellow]⚠️  {dirty_count} worktrees have uncommitted changes that will be lost[/yellow]"
            )

        if options.dry_run:
            self.console.print("\n[dim]Dry run: no worktrees were removed[/dim]")
            return result

        if not options.force and not self.confirm(self.console, "\nProceed with removal?"):
            self.console.print("[yellow]Prune cancelled[/yellow]")
            result.cancelled = True
            return result

        self.console.print("")
        for candidate in result.candidates:
            path = candidate.worktree.path
            ok, error = self.worktree_service.remove_worktree(path, force=options.force)
            if ok:
                result.removed.append(path)
                self.console.print(f"[green]✓ Removed worktree at {path}[/green]")
            else:
                result.failed.append((path, error or "Unknown error"))
                self.console.print(f"[red]✗ Failed to remove worktree at {path}: {error}[/red]")

        self.worktree_service.prune_worktree_metadata()

        color = "red" if result.failed else "green"
        self.console.print(
            f"\n[{color}]Removed {len(result.removed)}, failed {len(result.failed)}[/{color}]"
        )
        return result
