"""Tests for GitHubService"""
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
from github import BadCredentialsException, GithubException

from git_wt.exceptions import PRSourceUnavailableError
from git_wt.services.github_service import GitHubService, parse_github_remote, to_pull_request_info


def _pr(number, head, state="closed", merged_at=None, title=None):
    pr = Mock()
    pr.number = number
    pr.title = title or f"PR {number}"
    pr.head.ref = head
    pr.state = state
    pr.merged_at = merged_at
    return pr


MERGED_AT = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


class TestParseGithubRemote:
    def test_ssh(self):
        assert parse_github_remote("git@github.com:test/repo.git") == "test/repo"

    def test_https(self):
        assert parse_github_remote("https://github.com/test/repo.git") == "test/repo"
        assert parse_github_remote("https://github.com/test/repo") == "test/repo"

    def test_non_github(self):
        assert parse_github_remote("git@gitlab.com:test/repo.git") is None
        assert parse_github_remote("/srv/git/repo.git") is None


class TestToPullRequestInfo:
    def test_merged(self):
        info = to_pull_request_info(_pr(12, "feat", merged_at=MERGED_AT, title="Add X"))

        assert info.number == 12
        assert info.title == "Add X"
        assert info.head_ref_name == "feat"
        assert info.state == "MERGED"
        assert info.merged_at == "2024-01-02T10:00:00+00:00"
        assert info.is_merged

    def test_open_and_closed(self):
        assert to_pull_request_info(_pr(1, "a", state="open")).state == "OPEN"
        assert to_pull_request_info(_pr(2, "b", state="closed")).state == "CLOSED"


class TestGitHubServiceSetup:
    """Test GitHub API setup."""

    def test_no_token_is_unauthenticated(self, test_config):
        test_config.github_token = None
        service = GitHubService("/fake", test_config)

        with pytest.raises(PRSourceUnavailableError) as exc_info:
            service.setup_github_api("git@github.com:test/repo.git")

        assert exc_info.value.reason == PRSourceUnavailableError.UNAUTHENTICATED

    def test_non_github_remote_is_unavailable(self, test_config):
        service = GitHubService("/fake", test_config)

        with pytest.raises(PRSourceUnavailableError) as exc_info:
            service.setup_github_api("git@gitlab.com:test/repo.git")

        assert exc_info.value.reason == PRSourceUnavailableError.UNAVAILABLE

    def test_setup_with_github_url(self, test_config):
        service = GitHubService("/fake", test_config)

        with patch("git_wt.services.github_service.Github") as mock_github_class:
            mock_gh = Mock()
            mock_github_class.return_value = mock_gh

            service.setup_github_api("git@github.com:test/repo.git")

            assert service.github_repo == "test/repo"
            assert service.gh_repo is mock_gh.get_repo.return_value
            mock_gh.get_repo.assert_called_once_with("test/repo")
            assert mock_github_class.call_args.kwargs["timeout"] == 30

    def test_bad_credentials_is_unauthenticated(self, test_config):
        service = GitHubService("/fake", test_config)

        with patch("git_wt.services.github_service.Github") as mock_github_class:
            mock_github_class.return_value.get_repo.side_effect = BadCredentialsException(
                401, {"message": "Bad credentials"}, {}
            )

            with pytest.raises(PRSourceUnavailableError) as exc_info:
                service.setup_github_api("https://github.com/test/repo.git")

        assert exc_info.value.reason == PRSourceUnavailableError.UNAUTHENTICATED
        assert service.gh_repo is None

    def test_api_error_is_unavailable(self, test_config):
        service = GitHubService("/fake", test_config)

        with patch("git_wt.services.github_service.Github") as mock_github_class:
            mock_github_class.return_value.get_repo.side_effect = GithubException(
                404, {"message": "Not Found"}, {}
            )

            with pytest.raises(PRSourceUnavailableError) as exc_info:
                service.setup_github_api("https://github.com/test/repo.git")

        assert exc_info.value.reason == PRSourceUnavailableError.UNAVAILABLE

    def test_remote_url_from_repository(self, git_repo, test_config):
        git_repo.create_remote("upstream", "git@github.com:someone/project.git")
        test_config.remote_name = "upstream"
        service = GitHubService(git_repo.working_dir, test_config)

        with patch("git_wt.services.github_service.Github"):
            service.setup_github_api()

        assert service.github_repo == "someone/project"


class TestFetchPullRequests:
    """Test PR listing and normalisation."""

    def _service(self, test_config, pulls=None, error=None):
        service = GitHubService("/fake", test_config)
        service.github_repo = "test/repo"
        service.gh_repo = Mock()
        if error is not None:
            service.gh_repo.get_pulls.side_effect = error
        else:
            service.gh_repo.get_pulls.return_value = pulls
        return service

    def test_open_pull_requests(self, test_config):
        service = self._service(test_config, [_pr(3, "feat", state="open")])

        pulls = service.fetch_open_pull_requests()

        assert [(p.number, p.state) for p in pulls] == [(3, "OPEN")]
        service.gh_repo.get_pulls.assert_called_once_with(state="open", sort="updated", direction="desc")

    def test_merged_skips_unmerged_closed(self, test_config):
        service = self._service(
            test_config,
            [_pr(1, "a", merged_at=MERGED_AT), _pr(2, "b"), _pr(3, "c", merged_at=MERGED_AT)],
        )

        pulls = service.fetch_merged_pull_requests()

        assert [p.number for p in pulls] == [1, 3]
        assert all(p.state == "MERGED" for p in pulls)

    def test_merged_is_capped(self, test_config):
        test_config.max_prs_to_fetch = 2
        service = self._service(
            test_config, [_pr(n, f"b{n}", merged_at=MERGED_AT) for n in range(5)]
        )

        assert len(service.fetch_merged_pull_requests()) == 2

    def test_api_failure_raises_unavailable(self, test_config):
        service = self._service(test_config, error=GithubException(500, {"message": "oops"}, {}))

        with pytest.raises(PRSourceUnavailableError) as exc_info:
            service.fetch_merged_pull_requests()

        assert exc_info.value.reason == PRSourceUnavailableError.UNAVAILABLE

    def test_close(self, test_config):
        service = self._service(test_config, [])
        github = Mock()
        service.github = github

        service.close()

        github.close.assert_called_once()
        assert service.gh_repo is None
