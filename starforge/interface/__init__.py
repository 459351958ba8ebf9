"""Terminal output for the command-line tools."""

from .display import SystemDisplay

__all__ = ["SystemDisplay"]
