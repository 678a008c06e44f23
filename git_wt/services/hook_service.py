"""Hook script execution for git-wt"""

import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union, TYPE_CHECKING

from rich.console import Console

from git_wt.constants import REPO_HOOKS_SUBDIR
from git_wt.exceptions import HookError
from git_wt.models.hook import HookContext, HookType
from git_wt.utils.logging import get_logger

if TYPE_CHECKING:
    from git_wt.config import Config

logger = get_logger(__name__)


class HookService:
    """Runs the global and repository-specific script for a hook type.

    For each hook type, ``<global_hooks_dir>/<type>`` runs first and
    ``<repo>/.wt/hooks/<type>`` second. Missing scripts are skipped.
    """

    def __init__(self, config: Union["Config", dict], console: Optional[Console] = None):
        self.config = config
        self.global_hooks_dir = config.get("global_hooks_dir")
        self.shell = config.get("hook_shell", "zsh")
        self.timeout = config.get("hook_timeout", 300)
        self.console = console or Console(stderr=True)

    def hook_scripts(self, hook_type: HookType, repo_path: str) -> List[tuple[str, Path]]:
        """Candidate scripts for a hook type as (scope, path) pairs, in run order."""
        scripts = []
        if self.global_hooks_dir:
            scripts.append(("global", Path(self.global_hooks_dir) / hook_type.value))
        scripts.append(("repository-specific", Path(repo_path).joinpath(*REPO_HOOKS_SUBDIR, hook_type.value)))
        return scripts

    def run_hook(self, hook_type: HookType, context: HookContext) -> None:
        """Run all scripts for a hook type.

        Every script runs even if an earlier one fails; failures after the
        first are only logged.

        Raises:
            HookError: for the first script that failed
        """
        first_error: Optional[HookError] = None
        for scope, script in self.hook_scripts(hook_type, context.repo_path):
            try:
                self._run_script(hook_type, scope, script, context)
            except HookError as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.warning(str(e))
        if first_error is not None:
            raise first_error

    def _run_script(self, hook_type: HookType, scope: str, script: Path, context: HookContext) -> None:
        if not script.exists():
            return

        if not os.access(script, os.X_OK):
            self.console.print(f"[yellow]⚠️  Hook script {script} is not executable, skipping[/yellow]")
            logger.info(f"Skipping non-executable hook {script}")
            return

        self.console.print(f"[blue]🔗 Executing {scope} {hook_type.value} hook...[/blue]")
        command = [self.shell, str(script), *context.to_args()]
        logger.debug(f"Running hook: {command}")

        try:
            subprocess.run(command, check=True, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            raise HookError(hook_type.value, str(script), f"exited with code {e.returncode}") from e
        except subprocess.TimeoutExpired as e:
            raise HookError(hook_type.value, str(script), f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise HookError(hook_type.value, str(script), str(e)) from e
