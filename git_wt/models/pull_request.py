"""Pull request data model."""

from dataclasses import dataclass
from typing import Optional

PR_STATE_OPEN = "OPEN"
PR_STATE_CLOSED = "CLOSED"
PR_STATE_MERGED = "MERGED"


@dataclass(frozen=True)
class PullRequestInfo:
    """A pull request record, normalised from the GitHub API."""

    number: int
    title: str
    head_ref_name: str
    state: str  # OPEN, CLOSED or MERGED
    merged_at: Optional[str] = None  # ISO-8601 timestamp when merged

    @property
    def is_merged(self) -> bool:
        return self.state == PR_STATE_MERGED
