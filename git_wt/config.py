"""Configuration handling for git-wt"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def _is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_VALUES


def _default_repo_root() -> str:
    return str(Path.home() / "ghq" / "github.com")


def _default_hooks_dir() -> str:
    return str(Path.home() / ".zsh" / "hooks" / "wt")


@dataclass
class Config:
    """Configuration for git-wt with validation.

    Built once at the process boundary (see ``from_env``) and handed to
    every service, so nothing below the CLI touches the environment.
    """

    # Worktree layout
    worktree_dir: Optional[str] = None  # None = sibling of the repository
    repo_root: str = field(default_factory=_default_repo_root)
    remote_name: str = "origin"

    # Pull request decoration
    show_pr_info: bool = False
    github_token: Optional[str] = None
    max_prs_to_fetch: int = 200

    # Interactivity signals
    ci: bool = False
    term: Optional[str] = None

    # Shell integration
    switch_file: Optional[str] = None
    cli_path: Optional[str] = None

    # Hooks
    global_hooks_dir: str = field(default_factory=_default_hooks_dir)
    hook_shell: str = "zsh"

    # Timeouts (seconds)
    command_timeout: int = 30
    hook_timeout: int = 300

    # Execution
    workers: Optional[int] = None  # None = auto-detect
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_repo_root()
        self._validate_timeouts()
        self._validate_max_prs()
        self._validate_workers()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_repo_root(self):
        """Validate repo_root is not empty and normalise it."""
        if not self.repo_root or not self.repo_root.strip():
            raise ValueError("repo_root cannot be empty")
        self.repo_root = os.path.expanduser(self.repo_root.strip()).rstrip(os.sep) or os.sep

    def _validate_timeouts(self):
        """Validate timeouts are positive."""
        if self.command_timeout <= 0:
            raise ValueError(f"command_timeout must be positive, got {self.command_timeout}")
        if self.hook_timeout <= 0:
            raise ValueError(f"hook_timeout must be positive, got {self.hook_timeout}")

    def _validate_max_prs(self):
        """Validate max_prs_to_fetch is positive."""
        if self.max_prs_to_fetch <= 0:
            raise ValueError(f"max_prs_to_fetch must be positive, got {self.max_prs_to_fetch}")

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Config":
        """Create Config from process environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)
            **overrides: Explicit values (e.g. from CLI flags) that win over the environment
        """
        env = os.environ if environ is None else environ
        values = {
            "worktree_dir": env.get("WT_WORKTREE_DIR") or None,
            "show_pr_info": _is_truthy(env.get("WT_SHOW_PR_INFO")),
            "github_token": env.get("GITHUB_TOKEN") or env.get("GH_TOKEN") or None,
            "ci": _is_truthy(env.get("CI")),
            "term": env.get("TERM"),
            "switch_file": env.get("WT_SWITCH_FILE") or None,
            "cli_path": env.get("WT_CLI_PATH") or None,
        }
        if env.get("WT_REPO_ROOT"):
            values["repo_root"] = env["WT_REPO_ROOT"]
        if env.get("WT_HOOKS_DIR"):
            values["global_hooks_dir"] = env["WT_HOOKS_DIR"]
        if env.get("WT_HOOK_SHELL"):
            values["hook_shell"] = env["WT_HOOK_SHELL"]
        if env.get("WT_COMMAND_TIMEOUT"):
            values["command_timeout"] = int(env["WT_COMMAND_TIMEOUT"])
        if env.get("WT_HOOK_TIMEOUT"):
            values["hook_timeout"] = int(env["WT_HOOK_TIMEOUT"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert config to a dictionary (token masked)."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        if result["github_token"]:
            result["github_token"] = "***"
        return result

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
