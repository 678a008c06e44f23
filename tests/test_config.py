"""Tests for Config"""
import os

import pytest

from git_wt.config import Config


class TestConfigDefaults:
    def test_defaults(self):
        config = Config()

        assert config.worktree_dir is None
        assert config.remote_name == "origin"
        assert config.show_pr_info is False
        assert config.command_timeout == 30
        assert config.hook_timeout == 300
        assert config.max_prs_to_fetch == 200
        assert config.hook_shell == "zsh"
        assert config.repo_root.endswith(os.path.join("ghq", "github.com"))

    def test_repo_root_is_expanded(self):
        config = Config(repo_root="~/src/")
        assert config.repo_root == os.path.join(os.path.expanduser("~"), "src")


class TestConfigValidation:
    def test_empty_remote_name(self):
        with pytest.raises(ValueError, match="remote_name"):
            Config(remote_name="  ")

    def test_non_positive_timeouts(self):
        with pytest.raises(ValueError, match="command_timeout"):
            Config(command_timeout=0)
        with pytest.raises(ValueError, match="hook_timeout"):
            Config(hook_timeout=-1)

    def test_non_positive_workers(self):
        with pytest.raises(ValueError, match="workers"):
            Config(workers=0)

    def test_non_positive_max_prs(self):
        with pytest.raises(ValueError, match="max_prs_to_fetch"):
            Config(max_prs_to_fetch=0)


class TestConfigFromEnv:
    """Test building the config at the process boundary."""

    def test_reads_environment(self):
        env = {
            "WT_WORKTREE_DIR": "/worktrees",
            "WT_SHOW_PR_INFO": "yes",
            "GITHUB_TOKEN": "abc",
            "CI": "true",
            "TERM": "dumb",
            "WT_SWITCH_FILE": "/tmp/switch",
            "WT_CLI_PATH": "/opt/wt",
            "WT_REPO_ROOT": "/src",
            "WT_HOOKS_DIR": "/hooks",
            "WT_HOOK_SHELL": "bash",
            "WT_COMMAND_TIMEOUT": "5",
            "WT_HOOK_TIMEOUT": "60",
        }
        config = Config.from_env(env)

        assert config.worktree_dir == "/worktrees"
        assert config.show_pr_info is True
        assert config.github_token == "abc"
        assert config.ci is True
        assert config.term == "dumb"
        assert config.switch_file == "/tmp/switch"
        assert config.cli_path == "/opt/wt"
        assert config.repo_root == "/src"
        assert config.global_hooks_dir == "/hooks"
        assert config.hook_shell == "bash"
        assert config.command_timeout == 5
        assert config.hook_timeout == 60

    def test_empty_environment(self):
        config = Config.from_env({})

        assert config.github_token is None
        assert config.ci is False
        assert config.switch_file is None

    def test_gh_token_fallback(self):
        assert Config.from_env({"GH_TOKEN": "gh"}).github_token == "gh"
        assert Config.from_env({"GITHUB_TOKEN": "a", "GH_TOKEN": "b"}).github_token == "a"

    @pytest.mark.parametrize("value", ["1", "TRUE", "on", "Yes"])
    def test_truthy_values(self, value):
        assert Config.from_env({"CI": value}).ci is True

    @pytest.mark.parametrize("value", ["", "0", "false", "no"])
    def test_falsy_values(self, value):
        assert Config.from_env({"CI": value}).ci is False

    def test_overrides_win(self):
        config = Config.from_env({"WT_HOOK_SHELL": "bash"}, hook_shell="sh", verbose=True, workers=None)

        assert config.hook_shell == "sh"
        assert config.verbose is True
        assert config.workers is None

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            Config.from_env({"WT_COMMAND_TIMEOUT": "soon"})


class TestConfigAccess:
    def test_to_dict_masks_token(self):
        data = Config(github_token="secret").to_dict()
        assert data["github_token"] == "***"
        assert data["remote_name"] == "origin"

    def test_get(self):
        config = Config()
        assert config.get("remote_name") == "origin"
        assert config.get("unknown", "fallback") == "fallback"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"remote_name": "upstream", "stale_days": 30})
        assert config.remote_name == "upstream"
