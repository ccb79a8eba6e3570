"""Exceptions raised when task input cannot be partitioned."""
from __future__ import annotations

from typing import Optional


class GanttError(ValueError):
    """Base class for task input errors."""


class EmptyInputError(GanttError):
    """Raised when no tasks are supplied."""

    def __init__(self, message: str = "No tasks supplied") -> None:
        super().__init__(message)


class ValidationError(GanttError):
    """Raised for the first malformed task, identified by index and label."""

    def __init__(self, index: int, reason: str, label: Optional[str] = None) -> None:
        self.index = index
        self.reason = reason
        self.label = label
        if label:
            message = f"Invalid task at index {index} ({label!r}): {reason}"
        else:
            message = f"Invalid task at index {index}: {reason}"
        super().__init__(message)
