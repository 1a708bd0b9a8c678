"""Errors raised while building spell records, layouts and card batches."""
from __future__ import annotations

from typing import Optional


class InvalidSpellData(ValueError):
    """A spell record could not be built from the supplied fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class GeometryTooSmall(ValueError):
    """The card geometry cannot hold the regions that are never truncated."""

    def __init__(self, spell_name: str, reason: str):
        super().__init__(f"Card too small for '{spell_name}': {reason}")
        self.spell_name = spell_name
        self.reason = reason


class BatchAborted(RuntimeError):
    """Raised by the batch driver when the abort policy meets a failing record."""

    def __init__(self, failed, completed):
        super().__init__(
            f"Batch aborted at record {failed.index} ({failed.name or 'unnamed'}): {failed.error}"
        )
        self.failed = failed
        self.completed = list(completed)
