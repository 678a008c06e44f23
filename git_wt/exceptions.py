"""Custom exceptions for git-wt"""

from typing import Optional


class WtError(Exception):
    """Base exception for all git-wt errors."""
    pass


class NotInRepositoryError(WtError):
    """Raised when the current directory is not inside a recognized repository."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd
        message = "Not in a git repository"
        if cwd:
            message += f" ({cwd})"
        super().__init__(message)


class SelectorUnavailableError(WtError):
    """Raised when the interactive matcher cannot be used at all.

    Covers a non-interactive execution context as well as a missing
    fzf binary. ``remediation`` holds a hint for the user, if any.
    """

    def __init__(self, message: str, remediation: Optional[str] = None):
        self.remediation = remediation
        super().__init__(message)


class SelectorError(WtError):
    """Raised when the matcher ran but failed with an unexpected exit status."""

    def __init__(self, exit_code: int, message: Optional[str] = None):
        self.exit_code = exit_code
        error_msg = f"fzf exited with code {exit_code}"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class PRSourceUnavailableError(WtError):
    """Raised when pull request data cannot be obtained.

    ``reason`` is either ``"unavailable"`` (no GitHub remote, API failure)
    or ``"unauthenticated"`` (no token, or the token was rejected).
    """

    UNAVAILABLE = "unavailable"
    UNAUTHENTICATED = "unauthenticated"

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        self.message = message
        error_msg = f"Pull request data {reason}"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class PruneAbortedError(WtError):
    """Raised when prune must stop before classifying or deleting anything."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class HookError(WtError):
    """Raised when a hook script fails. Never propagated past the orchestrator."""

    def __init__(self, hook_type: str, script: str, message: Optional[str] = None):
        self.hook_type = hook_type
        self.script = script
        self.message = message

        error_msg = f"Hook '{hook_type}' ({script}) failed"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)
