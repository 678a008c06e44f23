"""Tests for the prune decision engine"""
from unittest.mock import Mock

import pytest

from git_wt.exceptions import PRSourceUnavailableError, PruneAbortedError
from git_wt.models.prune import PruneOptions, PruneReason
from git_wt.models.pull_request import PullRequestInfo
from git_wt.models.worktree import WorktreeInfo
from git_wt.services.git.worktrees import WorktreeService
from git_wt.services.prune_service import PruneService, classify_candidate, index_merged_pull_requests


MAIN = WorktreeInfo(path="/r", branch="main", commit="a", is_main=True)
FEAT = WorktreeInfo(path="/r-f", branch="feat", commit="b", is_main=False)
GONE = WorktreeInfo(path="/r-gone", branch="gone", commit="c", is_main=False)
DETACHED = WorktreeInfo(path="/r-d", branch="detached", commit="d", is_main=False)

MERGED_FEAT = PullRequestInfo(
    number=12, title="Add X", head_ref_name="feat", state="MERGED", merged_at="2024-01-02T10:00:00+00:00"
)


def _worktree_service(worktrees, remote_branches=(), dirty=(), failing=()):
    service = Mock(spec=WorktreeService)
    service.refresh_remote.return_value = (True, None)
    service.list_worktrees.return_value = list(worktrees)
    service.branch_exists.side_effect = lambda name, scope: name in remote_branches
    service.has_uncommitted_changes.side_effect = lambda path: path in dirty
    service.remove_worktree.side_effect = lambda path, force=False: (
        (False, "boom") if path in failing else (True, None)
    )
    service.prune_worktree_metadata.return_value = (True, None)
    return service


def _github_service(merged=(), error=None):
    service = Mock()
    if error is not None:
        service.fetch_merged_pull_requests.side_effect = error
    else:
        service.fetch_merged_pull_requests.return_value = list(merged)
    return service


def _prune_service(worktree_service, github_service, output, confirm=None, workers=2):
    return PruneService(
        "/r",
        {"workers": workers},
        worktree_service=worktree_service,
        github_service=github_service,
        console=output,
        confirm=confirm or Mock(return_value=True),
    )


class TestClassifyCandidate:
    """Test the per-worktree decision."""

    def test_deleted_branch_excluded_by_default(self):
        assert classify_candidate(GONE, False, {}, merged_only=True, include_deleted=False) is None

    def test_deleted_branch_included_with_all(self):
        result = classify_candidate(GONE, False, {}, merged_only=False, include_deleted=True)
        assert result.reason == PruneReason.DELETED_BRANCH
        assert result.pr_number is None

    def test_deleted_branch_takes_precedence_over_merged_pr(self):
        result = classify_candidate(FEAT, False, {"feat": MERGED_FEAT}, merged_only=True, include_deleted=True)
        assert result.reason == PruneReason.DELETED_BRANCH

    def test_merged_pr(self):
        result = classify_candidate(
            FEAT, True, {"feat": MERGED_FEAT}, merged_only=True, include_deleted=False, has_uncommitted_changes=True
        )
        assert result.reason == PruneReason.MERGED_PR
        assert result.pr_number == 12
        assert result.pr_title == "Add X"
        assert result.merged_at == "2024-01-02T10:00:00+00:00"
        assert result.has_uncommitted_changes

    def test_pr_must_be_merged(self):
        closed = PullRequestInfo(number=3, title="t", head_ref_name="feat", state="CLOSED")
        assert classify_candidate(FEAT, True, {"feat": closed}, merged_only=True, include_deleted=False) is None

    def test_merged_pr_ignored_outside_merged_only(self):
        assert classify_candidate(FEAT, True, {"feat": MERGED_FEAT}, merged_only=False, include_deleted=True) is None

    def test_index_keeps_newest_merged(self):
        older = PullRequestInfo(number=1, title="old", head_ref_name="feat", state="MERGED")
        closed = PullRequestInfo(number=5, title="closed", head_ref_name="other", state="CLOSED")
        index = index_merged_pull_requests([MERGED_FEAT, older, closed])

        assert index == {"feat": MERGED_FEAT}


class TestFindPrunableWorktrees:
    """Test candidate selection across the whole repository."""

    def test_active_branch_without_merged_pr_is_kept(self, output):
        worktree_service = _worktree_service([MAIN, FEAT], remote_branches={"main", "feat"})
        service = _prune_service(worktree_service, _github_service([]), output)

        assert service.find_prunable_worktrees(merged_only=True) == []

    def test_unauthenticated_source_aborts(self, output):
        worktree_service = _worktree_service([MAIN, FEAT, GONE], remote_branches={"main"})
        github_service = _github_service(
            error=PRSourceUnavailableError(PRSourceUnavailableError.UNAUTHENTICATED, "No GitHub token configured")
        )
        service = _prune_service(worktree_service, github_service, output)

        with pytest.raises(PruneAbortedError) as exc_info:
            service.run(PruneOptions(merged_only=True, all=True))

        assert "unauthenticated" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, PRSourceUnavailableError)
        worktree_service.branch_exists.assert_not_called()
        worktree_service.remove_worktree.assert_not_called()

    def test_missing_source_aborts(self, output):
        worktree_service = _worktree_service([MAIN, GONE], remote_branches={"main"})
        service = _prune_service(worktree_service, None, output)

        with pytest.raises(PruneAbortedError):
            service.find_prunable_worktrees(merged_only=True)
        worktree_service.remove_worktree.assert_not_called()

    def test_all_includes_deleted_branches_without_pr_data(self, output):
        worktree_service = _worktree_service([MAIN, FEAT, GONE], remote_branches={"main", "feat"})
        github_service = _github_service(
            error=PRSourceUnavailableError(PRSourceUnavailableError.UNAVAILABLE, "down")
        )
        service = _prune_service(worktree_service, github_service, output)

        result = service.find_prunable_worktrees(merged_only=False, include_deleted=True)

        assert [(c.worktree.path, c.reason) for c in result] == [("/r-gone", PruneReason.DELETED_BRANCH)]
        github_service.fetch_merged_pull_requests.assert_not_called()

    def test_main_and_detached_are_never_candidates(self, output):
        worktree_service = _worktree_service([MAIN, DETACHED])
        service = _prune_service(worktree_service, _github_service([]), output)

        assert service.find_prunable_worktrees(merged_only=False, include_deleted=True) == []
        probed = [call.args[0] for call in worktree_service.branch_exists.call_args_list]
        assert probed == []

    def test_results_keep_worktree_order(self, output):
        worktrees = [MAIN] + [
            WorktreeInfo(path=f"/r-{n}", branch=f"b{n}", commit=str(n), is_main=False) for n in range(8)
        ]
        worktree_service = _worktree_service(worktrees, remote_branches={"main"}, dirty={"/r-3"})
        service = _prune_service(worktree_service, _github_service([]), output, workers=4)

        result = service.find_prunable_worktrees(merged_only=False, include_deleted=True)

        assert [c.worktree.path for c in result] == [f"/r-{n}" for n in range(8)]
        assert [c.has_uncommitted_changes for c in result] == [n == 3 for n in range(8)]

    def test_fetch_failure_warns_and_continues(self, output):
        worktree_service = _worktree_service([MAIN, GONE], remote_branches={"main"})
        worktree_service.refresh_remote.return_value = (False, "could not resolve host")
        service = _prune_service(worktree_service, _github_service([]), output)

        result = service.find_prunable_worktrees(merged_only=False, include_deleted=True)

        assert len(result) == 1
        assert "could not resolve host" in output.file.getvalue()


class TestPruneRun:
    """Test presentation, confirmation and execution."""

    def test_dry_run_reports_without_deleting(self, output):
        worktree_service = _worktree_service([MAIN, FEAT], remote_branches={"main", "feat"})
        confirm = Mock()
        service = _prune_service(worktree_service, _github_service([MERGED_FEAT]), output, confirm=confirm)

        result = service.run(PruneOptions(dry_run=True))

        assert len(result.candidates) == 1
        candidate = result.candidates[0]
        assert candidate.worktree.path == "/r-f"
        assert candidate.reason == PruneReason.MERGED_PR
        assert candidate.pr_number == 12
        assert candidate.pr_title == "Add X"
        assert result.dry_run
        assert result.removed == []
        worktree_service.remove_worktree.assert_not_called()
        confirm.assert_not_called()
        text = output.file.getvalue()
        assert "/r-f" in text
        assert "merged PR #12: Add X" in text

    def test_declined_confirmation(self, output):
        worktree_service = _worktree_service([MAIN, FEAT], remote_branches={"main", "feat"})
        confirm = Mock(return_value=False)
        service = _prune_service(worktree_service, _github_service([MERGED_FEAT]), output, confirm=confirm)

        result = service.run(PruneOptions())

        assert result.cancelled
        confirm.assert_called_once()
        worktree_service.remove_worktree.assert_not_called()

    def test_confirmed_removal(self, output):
        worktree_service = _worktree_service([MAIN, FEAT], remote_branches={"main", "feat"})
        service = _prune_service(worktree_service, _github_service([MERGED_FEAT]), output)

        result = service.run(PruneOptions())

        assert result.removed == ["/r-f"]
        assert result.success
        worktree_service.remove_worktree.assert_called_once_with("/r-f", force=False)
        worktree_service.prune_worktree_metadata.assert_called_once()
        assert "Removed 1, failed 0" in output.file.getvalue()

    def test_force_skips_confirmation(self, output):
        worktree_service = _worktree_service([MAIN, FEAT], remote_branches={"main", "feat"}, dirty={"/r-f"})
        confirm = Mock()
        service = _prune_service(worktree_service, _github_service([MERGED_FEAT]), output, confirm=confirm)

        result = service.run(PruneOptions(force=True))

        confirm.assert_not_called()
        worktree_service.remove_worktree.assert_called_once_with("/r-f", force=True)
        assert result.removed == ["/r-f"]
        assert "uncommitted changes" in output.file.getvalue()

    def test_partial_failure_continues(self, output):
        worktree_service = _worktree_service(
            [MAIN, FEAT, GONE], remote_branches={"main", "feat"}, failing={"/r-f"}
        )
        service = _prune_service(worktree_service, _github_service([MERGED_FEAT]), output)

        result = service.run(PruneOptions(merged_only=True, all=True))

        assert [c.worktree.path for c in result.candidates] == ["/r-f", "/r-gone"]
        assert result.failed == [("/r-f", "boom")]
        assert result.removed == ["/r-gone"]
        assert not result.success
        worktree_service.prune_worktree_metadata.assert_called_once()
        assert "Removed 1, failed 1" in output.file.getvalue()

    def test_nothing_to_prune(self, output):
        worktree_service = _worktree_service([MAIN])
        confirm = Mock()
        service = _prune_service(worktree_service, _github_service([]), output, confirm=confirm)

        result = service.run(PruneOptions())

        assert result.candidates == []
        confirm.assert_not_called()
        assert "No worktrees to prune" in output.file.getvalue()
