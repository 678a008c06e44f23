"""Yes/no prompts."""

from rich.console import Console

# Escaped so rich prints the hint instead of reading it as a style tag
CONFIRM_HINT = "\\[y/N]"


def confirm(console: Console, message: str) -> bool:
    """Ask a ``[y/N]`` question. Empty input, EOF and anything but y/yes mean no.

    ``message`` is rich markup; escape any user data in it.
    """
    try:
        response = console.input(f"{message} {CONFIRM_HINT} ")
    except EOFError:
        console.print()
        return False
    return response.strip().lower() in ("y", "yes")
