"""Command-line argument parsing for git-wt."""

import argparse
from typing import List, Optional, Sequence, Tuple

from git_wt.__version__ import __version__

COMMANDS = ("list", "add", "remove", "rm", "prune", "cd", "select", "shell-init")

# Pass-through modes for command lines that are not wt subcommands
EXEC_IN_WORKTREE = "exec-in"      # wt -- <cmd...>
EXEC_WITH_WORKTREE = "exec-with"  # wt <cmd> <args...>


def split_command_line(argv: Sequence[str]) -> Tuple[List[str], Optional[str], List[str]]:
    """
    Separate wt's own arguments from a command to run against a worktree.

    Args:
        argv: Arguments without the program name

    Returns:
        Tuple of (wt arguments, pass-through mode or None, pass-through command)

    Examples:
        ["--", "ls", "-la"]  -> ([], "exec-in", ["ls", "-la"])
        ["code", "--wait"]   -> ([], "exec-with", ["code", "--wait"])
        ["add", "feature"]   -> (["add", "feature"], None, [])
    """
    argv = list(argv)
    for index, arg in enumerate(argv):
        if arg == "--":
            return argv[:index], EXEC_IN_WORKTREE, argv[index + 1:]
        if arg.startswith("-"):
            continue
        if arg in COMMANDS:
            return argv, None, []
        return argv[:index], EXEC_WITH_WORKTREE, argv[index:]
    return argv, None, []


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wt",
        description="Git worktree operations wrapper with interactive interface",
        epilog="Run without a command to select a worktree and cd into it (requires 'eval \"$(wt shell-init)\"'). "
        "'wt -- <cmd>' runs a command inside the selected worktree; 'wt <cmd> [args]' passes its path as last argument.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-wt {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    subparsers.add_parser("list", help="List git worktrees in current repository")

    add_parser = subparsers.add_parser(
        "add", help="Add a new worktree (interactive branch selection if no branch specified)"
    )
    add_parser.add_argument("branch", nargs="?", help="Branch to check out")
    add_parser.add_argument("path", nargs="?", help="Worktree location (default: <repo>-<branch>)")
    add_parser.add_argument(
        "--pr-only", action="store_true", help="Show only branches with open pull requests"
    )

    subparsers.add_parser("remove", aliases=["rm"], help="Remove a worktree in current repository")

    prune_parser = subparsers.add_parser(
        "prune",
        help="Remove worktrees whose pull request was merged",
        epilog="Requires GITHUB_TOKEN unless --all is given without --merged-only.",
    )
    prune_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what would be removed without removing anything",
    )
    prune_parser.add_argument(
        "--force",
        action="store_true",
        help="Skip confirmation and remove worktrees with uncommitted changes",
    )
    prune_parser.add_argument(
        "--merged-only",
        action="store_true",
        help="Prune worktrees whose branch has a merged pull request (default)",
    )
    prune_parser.add_argument(
        "--all",
        action="store_true",
        help="Prune worktrees whose branch was deleted on the remote",
    )

    subparsers.add_parser("cd", help="Change directory to selected worktree")
    subparsers.add_parser("select", help="Select worktree and print its path")
    subparsers.add_parser("shell-init", help="Output shell integration function")

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse wt's own command-line arguments."""
    args = build_parser().parse_args(argv)
    if args.command == "rm":
        args.command = "remove"
    return args
