"""Command-line interface for git-wt"""

import sys
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from git_wt.cli.args import EXEC_IN_WORKTREE, EXEC_WITH_WORKTREE, parse_args, split_command_line
from git_wt.cli.shell import render_shell_init
from git_wt.config import Config
from git_wt.core import WorktreeManager
from git_wt.exceptions import SelectorUnavailableError, WtError
from git_wt.models.prune import PruneOptions
from git_wt.utils.logging import get_logger, setup_logging

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def run_command(manager: WorktreeManager, args, mode: Optional[str], passthrough: List[str]) -> int:
    """Dispatch parsed arguments to the manager and return the exit code."""
    if mode == EXEC_IN_WORKTREE:
        return manager.exec_in_worktree(passthrough)
    if mode == EXEC_WITH_WORKTREE:
        return manager.exec_with_worktree(passthrough)

    command = args.command
    if command is None or command == "cd":
        return manager.change_directory()
    if command == "select":
        return manager.select_worktree()
    if command == "list":
        return manager.list_worktrees()
    if command == "add":
        return manager.add_worktree(args.branch, args.path, pr_only=args.pr_only)
    if command == "remove":
        return manager.remove_worktree()
    if command == "prune":
        options = PruneOptions(
            dry_run=args.dry_run,
            force=args.force,
            merged_only=(not args.all) or args.merged_only,
            all=args.all,
        )
        return manager.prune(options)

    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    argv = sys.argv[1:] if argv is None else list(argv)
    wt_args, mode, passthrough = split_command_line(argv)
    args = parse_args(wt_args)

    setup_logging(verbose=args.verbose, debug=args.debug)

    try:
        config = Config.from_env(verbose=args.verbose, debug=args.debug)
    except ValueError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        return 1

    try:
        if args.debug:
            err_console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                err_console.print(f"  {key}: {escape(str(value))}")

        if args.command == "shell-init":
            console.out(render_shell_init(config.cli_path), highlight=False)
            return 0

        manager = WorktreeManager(config, console=console, err_console=err_console)
        try:
            return run_command(manager, args, mode, passthrough)
        finally:
            manager.close()
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled[/yellow]")
        return 1
    except SelectorUnavailableError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if e.remediation:
            err_console.print(f"[yellow]{escape(e.remediation)}[/yellow]")
        return 1
    except WtError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if args.debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
