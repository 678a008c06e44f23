"""GitHub pull request data source"""

import re
from typing import List, Optional, TYPE_CHECKING, Union

import git
from github import Auth, BadCredentialsException, Github, GithubException

from git_wt.exceptions import PRSourceUnavailableError
from git_wt.models.pull_request import (
    PR_STATE_CLOSED,
    PR_STATE_MERGED,
    PR_STATE_OPEN,
    PullRequestInfo,
)
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from github.PullRequest import PullRequest
    from github.Repository import Repository
    from git_wt.config import Config

logger = get_logger(__name__)

_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_github_remote(remote_url: str) -> Optional[str]:
    """Extract ``owner/repo`` from an SSH or HTTPS GitHub remote URL."""
    match = _GITHUB_REMOTE_RE.search(remote_url.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def to_pull_request_info(pr: "PullRequest") -> PullRequestInfo:
    """Normalise a PyGithub PullRequest into a PullRequestInfo record."""
    if pr.merged_at is not None:
        state = PR_STATE_MERGED
    elif pr.state == "open":
        state = PR_STATE_OPEN
    else:
        state = PR_STATE_CLOSED

    return PullRequestInfo(
        number=pr.number,
        title=pr.title,
        head_ref_name=pr.head.ref,
        state=state,
        merged_at=pr.merged_at.isoformat() if pr.merged_at else None,
    )


class GitHubService:
    def __init__(self, repo_path: str, config: Union["Config", dict]):
        """Initialize the service.

        The API connection is set up lazily on first use, so constructing the
        service never touches the network.
        """
        self.repo_path = repo_path
        self.config = config
        self.github_token = config.get("github_token")
        self.remote_name = config.get("remote_name", "origin")
        self.timeout = config.get("command_timeout", 30)
        self.max_prs = config.get("max_prs_to_fetch", 200)
        self.github_repo: Optional[str] = None
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None

    def _get_remote_url(self) -> str:
        repo = git.Repo(self.repo_path)
        return repo.remote(self.remote_name).url

    def setup_github_api(self, remote_url: Optional[str] = None) -> None:
        """Connect to the GitHub API for the repository's remote.

        Raises:
            PRSourceUnavailableError: reason ``unauthenticated`` when there is
                no token or GitHub rejects it, ``unavailable`` otherwise
        """
        if self.gh_repo is not None:
            return

        if not self.github_token:
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAUTHENTICATED, "No GitHub token configured"
            )

        try:
            if remote_url is None:
                remote_url = self._get_remote_url()
        except Exception as e:
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAVAILABLE, f"No '{self.remote_name}' remote: {e}"
            ) from e

        slug = parse_github_remote(remote_url)
        if not slug:
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAVAILABLE, f"Not a GitHub repository ({remote_url})"
            )

        try:
            self.github = Github(auth=Auth.Token(self.github_token), timeout=self.timeout)
            self.gh_repo = self.github.get_repo(slug)
            self.github_repo = slug
        except BadCredentialsException as e:
            self.close()
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAUTHENTICATED, "GitHub rejected the token"
            ) from e
        except GithubException as e:
            self.close()
            reason = (
                PRSourceUnavailableError.UNAUTHENTICATED
                if e.status == 401
                else PRSourceUnavailableError.UNAVAILABLE
            )
            raise PRSourceUnavailableError(reason, f"GitHub API error {e.status}") from e
        except Exception as e:
            self.close()
            raise PRSourceUnavailableError(PRSourceUnavailableError.UNAVAILABLE, str(e)) from e

        logger.debug(f"[GitHub] GitHub integration enabled for: {slug}")

    def _list_pulls(self, state: str) -> List["PullRequest"]:
        self.setup_github_api()
        assert self.gh_repo is not None

        try:
            pulls = self.gh_repo.get_pulls(state=state, sort="updated", direction="desc")
            result = []
            for pr in pulls:
                if state == "closed" and pr.merged_at is None:
                    continue
                result.append(pr)
                if len(result) >= self.max_prs:
                    break
            return result
        except BadCredentialsException as e:
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAUTHENTICATED, "GitHub rejected the token"
            ) from e
        except GithubException as e:
            raise PRSourceUnavailableError(
                PRSourceUnavailableError.UNAVAILABLE, f"GitHub API error {e.status}"
            ) from e
        except Exception as e:
            raise PRSourceUnavailableError(PRSourceUnavailableError.UNAVAILABLE, str(e)) from e

    def fetch_open_pull_requests(self) -> List[PullRequestInfo]:
        """Get open pull requests (newest activity first)."""
        pulls = [to_pull_request_info(pr) for pr in self._list_pulls("open")]
        logger.debug(f"[GitHub] Fetched {len(pulls)} open PRs")
        return pulls

    def fetch_merged_pull_requests(self) -> List[PullRequestInfo]:
        """Get merged pull requests (most recently updated first)."""
        pulls = [to_pull_request_info(pr) for pr in self._list_pulls("closed")]
        logger.debug(f"[GitHub] Fetched {len(pulls)} merged PRs")
        return pulls

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        if self.github:
            try:
                self.github.close()
                logger.debug("[GitHub] Closed GitHub API connection")
            except Exception as e:
                logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
        self.github = None
        self.gh_repo = None
