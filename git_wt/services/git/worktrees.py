"""Worktree operations service for git-wt."""

import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Set

import git

from git_wt.models.branch import BranchType
from git_wt.models.worktree import DETACHED, RemovalFailure, WorktreeInfo, WorktreeStatus
from git_wt.services.git.base import GitServiceBase, format_git_error
from git_wt.utils.logging import get_logger

logger = get_logger(__name__)

_BRANCH_REF_PREFIX = "refs/heads/"

REMOVAL_MESSAGES = {
    RemovalFailure.UNCOMMITTED_CHANGES: "Worktree has uncommitted changes. Use force removal to proceed.",
    RemovalFailure.LOCKED: "Worktree is locked. Use force removal to proceed.",
    RemovalFailure.CURRENT_DIRECTORY: "Cannot remove worktree that is the current working directory.",
}


def _same_path(a: str, b: str) -> bool:
    return os.path.normcase(os.path.realpath(a)) == os.path.normcase(os.path.realpath(b))


def parse_worktree_porcelain(output: str, repo_path: str) -> List[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Format (one stanza per worktree, separated by blank lines):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached", or "bare")

    Stanzas without a ``worktree`` line are dropped. The first stanza that is
    bare, or whose path is ``repo_path``, is the primary worktree.
    """
    worktrees: List[WorktreeInfo] = []
    main_found = False

    for stanza in re.split(r"\n\s*\n", output.strip()):
        values: Dict[str, str] = {}
        markers: Set[str] = set()
        for line in stanza.splitlines():
            line = line.strip()
            if not line:
                continue
            key, _, value = line.partition(" ")
            if value:
                values.setdefault(key, value)
            else:
                markers.add(key)

        path = values.get("worktree")
        if not path:
            continue

        branch_ref = values.get("branch")
        if not branch_ref:
            branch = DETACHED
        elif branch_ref.startswith(_BRANCH_REF_PREFIX):
            branch = branch_ref[len(_BRANCH_REF_PREFIX):]
        else:
            branch = branch_ref

        is_main = not main_found and ("bare" in markers or _same_path(path, repo_path))
        main_found = main_found or is_main

        worktrees.append(
            WorktreeInfo(
                path=path,
                branch=branch,
                commit=values.get("HEAD", ""),
                is_main=is_main,
            )
        )

    return worktrees


def classify_removal_error(output: str) -> RemovalFailure:
    """Map ``git worktree remove`` diagnostics to a known failure cause."""
    text = output.lower()
    if "uncommitted changes" in text or "modified or untracked files" in text:
        return RemovalFailure.UNCOMMITTED_CHANGES
    if "locked" in text:
        return RemovalFailure.LOCKED
    if "current working directory" in text:
        return RemovalFailure.CURRENT_DIRECTORY
    return RemovalFailure.OTHER


def describe_removal_error(output: str) -> str:
    """User-facing message for a failed removal; unknown causes are shown verbatim."""
    failure = classify_removal_error(output)
    return REMOVAL_MESSAGES.get(failure, output.strip())


class WorktreeService(GitServiceBase):
    """Service for querying and mutating git worktrees."""

    def list_worktrees(self) -> List[WorktreeInfo]:
        """Get all worktrees of the repository.

        Returns:
            List of WorktreeInfo in git's order. Empty if git could not be run,
            which means "no information", not "no worktrees".
        """
        try:
            repo = self._get_repo()
            output = repo.git.worktree("list", "--porcelain", kill_after_timeout=self.command_timeout)
        except Exception as e:
            logger.debug(f"Could not list worktrees: {e}")
            return []

        worktrees = parse_worktree_porcelain(output, self.repo_path)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def add_worktree(
        self, branch_name: str, path: str, remote_name: Optional[str] = None
    ) -> tuple[bool, Optional[str]]:
        """Create a worktree for a branch.

        An existing local branch is checked out directly; a branch that only
        exists on the remote gets a local tracking branch; otherwise a new
        branch is created from HEAD.

        Args:
            branch_name: Short branch name
            path: Worktree location
            remote_name: Remote the branch was picked from (defaults to the configured remote)

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        if self.branch_exists(branch_name, BranchType.LOCAL):
            args = ["add", path, branch_name]
        elif self.branch_exists(branch_name, BranchType.REMOTE, remote_name):
            remote = remote_name or self.remote_name
            args = ["add", path, "-b", branch_name, f"{remote}/{branch_name}"]
        else:
            args = ["add", path, "-b", branch_name]

        try:
            repo = self._get_repo()
            repo.git.worktree(*args, kill_after_timeout=self.command_timeout)
            logger.info(f"Created worktree for {branch_name} at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error(e)
            logger.error(f"Failed to create worktree at {path}: {error_msg}")
            return False, error_msg
        except Exception as e:
            error_msg = f"Unexpected error creating worktree: {e}"
            logger.error(error_msg)
            return False, error_msg

    def remove_worktree(self, path: str, force: bool = False) -> tuple[bool, Optional[str]]:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked

        Returns:
            Tuple of (success, error_message). error_message is None on success,
            otherwise a classified message (see ``describe_removal_error``).
        """
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(path)

        try:
            repo = self._get_repo()
            repo.git.worktree(*args, kill_after_timeout=self.command_timeout)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = describe_removal_error(format_git_error(e))
            logger.error(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg
        except Exception as e:
            error_msg = f"Failed to remove worktree: {e}"
            logger.error(error_msg)
            return False, error_msg

    def prune_worktree_metadata(self) -> tuple[bool, Optional[str]]:
        """Prune stale worktree administrative files (``git worktree prune``)."""
        try:
            repo = self._get_repo()
            repo.git.worktree("prune", kill_after_timeout=self.command_timeout)
            logger.info("Pruned worktree metadata")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error(e)
            logger.warning(f"Failed to prune worktree metadata: {error_msg}")
            return False, error_msg
        except Exception as e:
            error_msg = f"Unexpected error pruning worktree metadata: {e}"
            logger.warning(error_msg)
            return False, error_msg

    def _status_porcelain(self, worktree_path: str) -> str:
        repo = self._get_repo()
        return repo.git.execute(
            ["git", "-C", worktree_path, "status", "--porcelain"],
            kill_after_timeout=self.command_timeout,
        )

    def has_uncommitted_changes(self, worktree_path: str) -> bool:
        """Check a worktree for uncommitted changes.

        Any failure to run the probe counts as "has changes".
        """
        try:
            return bool(self._status_porcelain(worktree_path).strip())
        except Exception as e:
            logger.warning(f"Could not check worktree status for {worktree_path}: {e}")
            return True

    @staticmethod
    def is_locked(worktree_path: str) -> bool:
        """Check for git's lock file in the worktree's administrative directory."""
        git_file = Path(worktree_path) / ".git"
        try:
            if not git_file.is_file():
                return False
            content = git_file.read_text().strip()
        except OSError as e:
            logger.debug(f"Could not read {git_file}: {e}")
            return False

        if not content.startswith("gitdir:"):
            return False
        admin_dir = Path(content[len("gitdir:"):].strip())
        if not admin_dir.is_absolute():
            admin_dir = Path(worktree_path) / admin_dir
        return (admin_dir / "locked").exists()

    def check_worktree_status(self, worktree_path: str) -> WorktreeStatus:
        """Get dirty and locked state of a worktree before removing it."""
        if not os.path.exists(worktree_path):
            return WorktreeStatus(is_dirty=False, is_locked=False, error="Worktree directory does not exist")

        is_locked = self.is_locked(worktree_path)
        try:
            is_dirty = bool(self._status_porcelain(worktree_path).strip())
        except git.exc.GitCommandError as e:
            error_msg = format_git_error(e)
            logger.warning(f"Could not check worktree status for {worktree_path}: {error_msg}")
            return WorktreeStatus(is_dirty=True, is_locked=is_locked, error=error_msg)
        except Exception as e:
            logger.warning(f"Could not check worktree status for {worktree_path}: {e}")
            return WorktreeStatus(is_dirty=True, is_locked=is_locked, error=str(e))

        return WorktreeStatus(is_dirty=is_dirty, is_locked=is_locked)

    def refresh_remote(self) -> tuple[bool, Optional[str]]:
        """Fetch the remote with pruning so remote-tracking refs are current."""
        try:
            repo = self._get_repo()
            repo.git.fetch("--prune", self.remote_name, kill_after_timeout=self.command_timeout)
            logger.info(f"Fetched {self.remote_name} with --prune")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = format_git_error(e)
            logger.warning(f"Fetch from {self.remote_name} failed: {error_msg}")
            return False, error_msg
        except Exception as e:
            logger.warning(f"Fetch from {self.remote_name} failed: {e}")
            return False, str(e)
