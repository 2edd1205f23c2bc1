"""Models package for data structures used in the application."""

from wiclone.models.clone_result import CloneResult

__all__ = ["CloneResult"]
