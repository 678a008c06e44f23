"""User-facing worktree commands for git-wt"""

import os
import subprocess
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from git_wt.config import Config
from git_wt.constants import CD_MARKER_PREFIX, PROMPT_SELECT_WORKTREE, PROMPT_SELECT_WORKTREE_CD
from git_wt.exceptions import HookError, NotInRepositoryError
from git_wt.formatters.lines import worktree_text
from git_wt.models.hook import HookContext, HookType
from git_wt.models.prune import PruneOptions
from git_wt.models.worktree import GitRepository, WorktreeInfo
from git_wt.services.git import BranchService, WorktreeService, find_repository
from git_wt.services.github_service import GitHubService
from git_wt.services.hook_service import HookService
from git_wt.services.prune_service import PruneService
from git_wt.ui.prompts import confirm as confirm_prompt
from git_wt.ui.selector import InteractiveSelector
from git_wt.utils.logging import get_logger

logger = get_logger(__name__)


def default_worktree_path(repository: GitRepository, branch_name: str, worktree_dir: Optional[str] = None) -> str:
    """
    Compute where a new worktree for a branch goes.

    ``<worktree_dir>/<repo>-<branch>`` when a base directory is configured,
    otherwise ``<repo path>-<branch>`` next to the repository. The branch
    name is used as is, so ``feature/x`` nests ``x`` under ``<repo>-feature``.

    Args:
        repository: The primary repository
        branch_name: Branch the worktree checks out
        worktree_dir: Optional base directory for worktrees

    Returns:
        Absolute or user-relative path for the new worktree
    """
    if worktree_dir:
        return os.path.join(os.path.expanduser(worktree_dir), f"{repository.name}-{branch_name}")
    return f"{repository.path}-{branch_name}"


class WorktreeManager:
    """Sequences selection, hooks and git calls for each wt command.

    Each command method returns the process exit code. Environment errors
    (no repository, no terminal for selection) are raised as WtError.
    """

    def __init__(
        self,
        config: Union[Config, dict],
        cwd: Optional[str] = None,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        repository: Optional[GitRepository] = None,
        worktree_service: Optional[WorktreeService] = None,
        branch_service: Optional[BranchService] = None,
        github_service: Optional[GitHubService] = None,
        hook_service: Optional[HookService] = None,
        selector: Optional[InteractiveSelector] = None,
        confirm: Callable[[Console, str], bool] = confirm_prompt,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """Initialize the manager.

        Services not passed in are created on first use for the repository
        found from ``cwd``.
        """
        if isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config
        self.cwd = cwd or os.getcwd()
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.confirm = confirm
        self.runner = runner

        self._repository = repository
        self._worktree_service = worktree_service
        self._branch_service = branch_service
        self._github_service = github_service
        self._hook_service = hook_service
        self._selector = selector

    @property
    def repository(self) -> GitRepository:
        if self._repository is None:
            repository = find_repository(self.cwd, self.config.repo_root)
            if repository is None:
                raise NotInRepositoryError(self.cwd)
            logger.debug(f"Using repository {repository.path}")
            self._repository = repository
        return self._repository

    @property
    def worktree_service(self) -> WorktreeService:
        if self._worktree_service is None:
            self._worktree_service = WorktreeService(self.repository.path, self.config)
        return self._worktree_service

    @property
    def github_service(self) -> GitHubService:
        if self._github_service is None:
            self._github_service = GitHubService(self.repository.path, self.config)
        return self._github_service

    @property
    def branch_service(self) -> BranchService:
        if self._branch_service is None:
            self._branch_service = BranchService(
                self.repository.path,
                self.config,
                worktree_service=self.worktree_service,
                github_service=self.github_service,
            )
        return self._branch_service

    @property
    def hook_service(self) -> HookService:
        if self._hook_service is None:
            self._hook_service = HookService(self.config, console=self.err_console)
        return self._hook_service

    @property
    def selector(self) -> InteractiveSelector:
        if self._selector is None:
            self._selector = InteractiveSelector(self.config, console=self.err_console)
        return self._selector

    def close(self) -> None:
        if self._github_service is not None:
            self._github_service.close()

    def _run_hook(self, hook_type: HookType, context: HookContext) -> None:
        try:
            self.hook_service.run_hook(hook_type, context)
        except HookError as e:
            logger.warning(f"Ignoring hook failure: {e}")

    def _select_worktree(self, prompt: str) -> Optional[WorktreeInfo]:
        worktrees = self.worktree_service.list_worktrees()
        return self.selector.select_worktree(worktrees, prompt)

    # list

    def list_worktrees(self) -> int:
        repository = self.repository
        self.console.print(f"[blue]Worktrees in current repository ({escape(repository.path)}):[/blue]")
        worktrees = self.worktree_service.list_worktrees()
        if not worktrees:
            self.console.print("No worktrees found")
            return 0
        for worktree in worktrees:
            self.console.print(worktree_text(worktree), soft_wrap=True)
        return 0

    # add

    def _checked_out_at(self, branch_name: str) -> Optional[str]:
        for worktree in self.worktree_service.list_worktrees():
            if worktree.branch == branch_name:
                return worktree.path
        return None

    def add_worktree(self, branch: Optional[str] = None, path: Optional[str] = None, pr_only: bool = False) -> int:
        """Create a worktree, selecting the branch interactively when not given.

        Args:
            branch: Branch to check out
            path: Worktree location (default from ``default_worktree_path``)
            pr_only: Offer only branches with an open pull request
        """
        repository = self.repository

        remote_name = None
        if branch is None:
            include_pr_info = pr_only or self.config.show_pr_info
            branches = self.branch_service.list_branches(include_pr_info=include_pr_info)
            if pr_only:
                branches = [b for b in branches if b.has_pull_request]
            selected = self.selector.select_branch(branches)
            if selected is None:
                return 0
            branch = selected.name
            remote_name = selected.remote_name

        in_use_path = self._checked_out_at(branch)
        if in_use_path:
            self.console.print(
                f"[yellow]⚠️  Branch '{escape(branch)}' is already checked out at {escape(in_use_path)}[/yellow]"
            )
            if not self.confirm(self.console, "Create another worktree for it anyway?"):
                self.console.print("[yellow]Cancelled[/yellow]")
                return 0

        worktree_path = path or default_worktree_path(repository, branch, self.config.worktree_dir)
        self.console.print(
            f"[yellow]Creating worktree for branch '{escape(branch)}' at '{escape(worktree_path)}'[/yellow]"
        )

        context = HookContext(branch_name=branch, worktree_path=worktree_path, repo_path=repository.path)
        self._run_hook(HookType.PRE_ADD, context)
        success, error = self.worktree_service.add_worktree(branch, worktree_path, remote_name=remote_name)
        self._run_hook(HookType.POST_ADD, replace(context, success=success))

        if success:
            self.console.print("[green]✅ Worktree created successfully![/green]")
            return 0
        self.err_console.print(f"[red]❌ Failed to create worktree: {escape(error or 'unknown error')}[/red]")
        return 1

    # remove

    def remove_worktree(self) -> int:
        """Select a linked worktree and remove it after confirmation."""
        repository = self.repository
        worktrees = self.worktree_service.list_worktrees()
        selected = self.selector.select_worktree_for_removal(worktrees)
        if selected is None:
            return 0

        status = self.worktree_service.check_worktree_status(selected.path)
        if status.error:
            self.console.print(f"[yellow]⚠️  {escape(status.error)}[/yellow]")

        force = False
        if status.is_dirty or status.is_locked:
            problems = []
            if status.is_dirty:
                problems.append("has uncommitted changes")
            if status.is_locked:
                problems.append("is locked")
            self.console.print(
                f"[yellow]⚠️  Worktree {escape(selected.path)} {' and '.join(problems)}[/yellow]"
            )
            if not self.confirm(self.console, "Force removal?"):
                self.console.print("[yellow]Cancelled[/yellow]")
                return 0
            force = True

        if not self.confirm(self.console, f"Remove worktree: {escape(selected.path)}?"):
            self.console.print("[yellow]Cancelled[/yellow]")
            return 0

        self.console.print(f"[yellow]Removing worktree: {escape(selected.path)}[/yellow]")
        context = HookContext(branch_name=selected.branch, worktree_path=selected.path, repo_path=repository.path)
        self._run_hook(HookType.PRE_REMOVE, context)
        success, error = self.worktree_service.remove_worktree(selected.path, force=force)
        self._run_hook(HookType.POST_REMOVE, replace(context, success=success))

        if success:
            self.console.print("[green]✅ Worktree removed successfully![/green]")
            return 0
        self.err_console.print(f"[red]❌ Failed to remove worktree: {escape(error or 'unknown error')}[/red]")
        return 1

    # cd / select

    def change_directory(self) -> int:
        """Select a worktree and hand its path to the shell function.

        The path goes to the switch file when one is configured; otherwise,
        or when writing it fails, a ``WT_CD:<path>`` marker is printed.
        """
        selected = self._select_worktree(PROMPT_SELECT_WORKTREE_CD)
        if selected is None:
            return 0

        switch_file = self.config.switch_file
        if switch_file:
            try:
                Path(switch_file).write_text(selected.path)
                logger.debug(f"Wrote {selected.path} to {switch_file}")
                return 0
            except OSError as e:
                self.err_console.print(
                    f"[yellow]⚠️  Could not write switch file {escape(switch_file)}: {escape(str(e))}[/yellow]"
                )

        self.console.out(f"{CD_MARKER_PREFIX}{selected.path}", highlight=False)
        return 0

    def select_worktree(self) -> int:
        """Print the selected worktree's path."""
        selected = self._select_worktree(PROMPT_SELECT_WORKTREE_CD)
        if selected is not None:
            self.console.out(selected.path, highlight=False)
        return 0

    # exec

    def _run_command(self, command: List[str], cwd: Optional[str] = None) -> int:
        logger.debug(f"Running {command} (cwd={cwd})")
        try:
            return self.runner(command, cwd=cwd).returncode
        except FileNotFoundError:
            self.err_console.print(f"[red]Command not found: {escape(command[0])}[/red]")
            return 127

    def exec_in_worktree(self, command: List[str]) -> int:
        """Run a command inside the selected worktree (``wt -- cmd``)."""
        if not command:
            return self.change_directory()
        selected = self._select_worktree(PROMPT_SELECT_WORKTREE)
        if selected is None:
            return 0
        return self._run_command(command, cwd=selected.path)

    def exec_with_worktree(self, command: List[str]) -> int:
        """Run a command with the selected worktree's path as last argument."""
        selected = self._select_worktree(PROMPT_SELECT_WORKTREE)
        if selected is None:
            return 0
        return self._run_command([*command, selected.path])

    # prune

    def prune(self, options: PruneOptions) -> int:
        """Remove worktrees whose pull request was merged or whose branch is gone.

        Raises:
            PruneAbortedError: merged PR data was needed but unavailable
        """
        repository = self.repository
        prune_service = PruneService(
            repository.path,
            self.config,
            worktree_service=self.worktree_service,
            github_service=self.github_service,
            console=self.console,
            confirm=self.confirm,
        )
        result = prune_service.run(options)
        return 0 if result.success else 1
