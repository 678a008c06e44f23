"""Shared plumbing for the GitPython-backed services."""

from typing import Optional, Union, TYPE_CHECKING

import git

from git_wt.models.branch import BranchType
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from git_wt.config import Config

logger = get_logger(__name__)


def format_git_error(error: Exception) -> str:
    """Extract git's own diagnostic text from a GitCommandError.

    GitPython wraps stderr as ``"\\n  stderr: '<text>'"``; this returns just
    ``<text>``. Falls back to ``str(error)`` when stderr is empty.
    """
    text = (getattr(error, "stderr", "") or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip()
    if len(text) >= 2 and text[0] == text[-1] == "'":
        text = text[1:-1]
    text = text.strip()
    return text or str(error)


class GitServiceBase:
    """Base class holding the repository path, config and timeout policy."""

    def __init__(self, repo_path: str, config: Union["Config", dict]):
        self.repo_path = repo_path
        self.config = config
        self.remote_name = config.get("remote_name", "origin")
        self.command_timeout = config.get("command_timeout", 30)

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance.

        GitPython repos are lightweight - they don't clone, just open the existing repo.
        """
        return git.Repo(self.repo_path)

    def branch_exists(
        self, branch_name: str, scope: BranchType = BranchType.LOCAL, remote_name: Optional[str] = None
    ) -> bool:
        """Check whether a branch ref exists locally or on a remote.

        Args:
            branch_name: Short branch name (e.g. ``feature/login``)
            scope: BranchType.LOCAL for refs/heads, BranchType.REMOTE for refs/remotes/<remote>
            remote_name: Remote to look on (defaults to the configured remote)

        Returns:
            True if the ref exists; False if it doesn't or the probe failed
        """
        if scope == BranchType.LOCAL:
            ref = f"refs/heads/{branch_name}"
        else:
            ref = f"refs/remotes/{remote_name or self.remote_name}/{branch_name}"

        try:
            repo = self._get_repo()
            repo.git.show_ref("--verify", "--quiet", ref, kill_after_timeout=self.command_timeout)
            return True
        except git.exc.GitCommandError:
            return False
        except Exception as e:
            logger.debug(f"Error checking ref {ref}: {e}")
            return False
