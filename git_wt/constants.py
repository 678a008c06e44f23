"""Shared constants for git-wt."""

# Exit status fzf uses when the user aborts with ESC / Ctrl-C
FZF_CANCELLED_EXIT_CODE = 130
# Exit status fzf uses when nothing matched the query
FZF_NO_MATCH_EXIT_CODE = 1

FZF_OPTIONS = ["--ansi", "--height", "~40%", "--reverse", "--border"]

# Selector prompts
PROMPT_SELECT_WORKTREE = "Select worktree: "
PROMPT_SELECT_WORKTREE_CD = "Select worktree to cd: "
PROMPT_SELECT_WORKTREE_REMOVE = "Select worktree to remove: "
PROMPT_SELECT_BRANCH = "Select branch: "

# Marker the shell function looks for when no switch file could be written
CD_MARKER_PREFIX = "WT_CD:"

# Repository-specific hooks live under <repo>/.wt/hooks/<hook-type>
REPO_HOOKS_SUBDIR = (".wt", "hooks")

# Rich styles for the selector lines and listings
STYLES = {
    "local": "green",
    "remote": "blue",
    "main": "blue",
    "branch": "green",
    "annotation": "bright_black",
    "pr": "magenta",
}

# Remediation hints shown when an external tool is missing or not authenticated
FZF_INSTALL_HINT = "Install fzf (https://github.com/junegunn/fzf) to use interactive selection."
GITHUB_TOKEN_HINT = (
    "Set the GITHUB_TOKEN environment variable to a token with 'repo' scope.\n"
    "  Get a token at: https://github.com/settings/tokens"
)
