"""Driver for the external fzf line matcher."""

import subprocess
import sys
from typing import List, Optional, Sequence, TextIO, Union, TYPE_CHECKING

from git_wt.constants import (
    FZF_CANCELLED_EXIT_CODE,
    FZF_INSTALL_HINT,
    FZF_NO_MATCH_EXIT_CODE,
    FZF_OPTIONS,
)
from git_wt.exceptions import SelectorError, SelectorUnavailableError
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from git_wt.config import Config

logger = get_logger(__name__)


def _isatty(stream: Optional[TextIO]) -> bool:
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, ValueError):
        return False


def ensure_interactive(
    config: Union["Config", dict],
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Refuse to start the matcher where nobody can answer it.

    Raises:
        SelectorUnavailableError: when running under CI, on a dumb terminal,
            or with neither stdin nor stdout attached to a terminal
    """
    if config.get("ci"):
        raise SelectorUnavailableError("Interactive selection is not available in CI")
    if config.get("term") == "dumb":
        raise SelectorUnavailableError("Interactive selection is not available on a dumb terminal")

    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    if not _isatty(stdin) and not _isatty(stdout):
        raise SelectorUnavailableError(
            "Interactive selection requires a terminal",
            "Pass the branch or path explicitly when running non-interactively.",
        )


def run_fzf(lines: Sequence[str], prompt: str, options: Optional[List[str]] = None) -> Optional[str]:
    """Show lines in fzf and return the chosen one.

    Args:
        lines: Lines to choose from, possibly ANSI-styled
        prompt: Prompt shown by fzf
        options: fzf options (defaults to FZF_OPTIONS)

    Returns:
        The selected line as fzf printed it, or None when cancelled or nothing matched

    Raises:
        SelectorUnavailableError: fzf is not installed
        SelectorError: fzf failed with any other exit status
    """
    command = ["fzf", *(FZF_OPTIONS if options is None else options), "--prompt", prompt]
    logger.debug(f"Running {command} with {len(lines)} lines")

    try:
        result = subprocess.run(
            command,
            input="\n".join(lines),
            stdout=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise SelectorUnavailableError("fzf is not installed", FZF_INSTALL_HINT) from e

    if result.returncode in (FZF_CANCELLED_EXIT_CODE, FZF_NO_MATCH_EXIT_CODE):
        logger.debug(f"fzf returned {result.returncode}, no selection")
        return None
    if result.returncode != 0:
        raise SelectorError(result.returncode)

    selected = (result.stdout or "").rstrip("\r\n")
    return selected or None
