"""Shell integration function emitted by ``wt shell-init``."""

import shlex
from typing import Optional

_COMMAND_PLACEHOLDER = "__WT_COMMAND__"

SHELL_FUNCTION_TEMPLATE = """# wt shell integration
_wt_run_and_cd() {
  # Temp file for directory switching
  local switch_file="${TMPDIR:-/tmp}/wt_switch_$$"
  local output
  output=$(WT_SWITCH_FILE="$switch_file" __WT_COMMAND__ "$@")
  local exit_code=$?
  local new_dir=""

  if [ -f "$switch_file" ]; then
    new_dir=$(cat "$switch_file" 2>/dev/null)
    rm -f "$switch_file"
  else
    case "$output" in
      WT_CD:*) new_dir="${output#WT_CD:}" ;;
      *) [ -n "$output" ] && printf '%s\\n' "$output" ;;
    esac
  fi

  if [ -n "$new_dir" ] && [ -d "$new_dir" ]; then
    cd "$new_dir"
  fi
  return $exit_code
}

wt() {
  if [ $# -eq 0 ] || [ "$1" = "cd" ]; then
    _wt_run_and_cd "$@"
  else
    __WT_COMMAND__ "$@"
  fi
}
"""


def render_shell_init(cli_path: Optional[str] = None) -> str:
    """Build the shell function.

    Args:
        cli_path: Executable to call instead of the ``wt`` found on PATH
    """
    command = shlex.quote(cli_path) if cli_path else "command wt"
    return SHELL_FUNCTION_TEMPLATE.replace(_COMMAND_PLACEHOLDER, command)
