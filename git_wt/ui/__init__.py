"""Interactive selection and prompts for git-wt."""

from .selector import InteractiveSelector
from .prompts import confirm

__all__ = ["InteractiveSelector", "confirm"]
