"""
Error types raised by the scheduling engine.

Everything derives from ValueError so callers that already guard
``run_algorithm`` with ``except ValueError`` keep working.
"""

from __future__ import annotations

from typing import Any, Optional


class SchedulerError(ValueError):
    """Base class for all engine errors."""


class ValidationError(SchedulerError):
    """A single input record is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field and self.value is not None:
            return f"Invalid '{self.field}' (value={self.value!r}): {self.message}"
        if self.field:
            return f"Invalid '{self.field}': {self.message}"
        return self.message


class ConfigError(SchedulerError):
    """The run as a whole cannot start (empty input, bad quantum, unknown algorithm)."""


class GraphError(SchedulerError):
    """The HEFT task graph has a cycle or references an unknown task."""


class InvariantError(SchedulerError):
    """Internal consistency check failed; indicates a bug, not bad input."""
