"""Solve outcomes.

A solve never leaks partial state: a failed result carries the failure kind and
a message, and no grid.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from .errors import AbortedError, ContradictionError


class SolveStatus(Enum):
    RESOLVED = "resolved"
    CONTRADICTION = "contradiction"
    ABORTED = "aborted"


class SolveResult(BaseModel):
    """Immutable summary of one finished solve."""

    model_config = ConfigDict(frozen=True)

    status: SolveStatus
    seed: int | None = None

    # Only populated when status is RESOLVED
    grid: tuple[tuple[Any, ...], ...] | None = None
    tile_grid: tuple[tuple[int, ...], ...] | None = None

    # Bookkeeping
    iterations: int = 0
    eliminations: int = 0
    attempts: int = 1

    # Failure details
    message: str | None = None
    contradiction_at: tuple[int, int] | None = None
    abort_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == SolveStatus.RESOLVED

    def unwrap(self) -> list[list[Any]]:
        """Return the output grid, or raise the error matching the failure kind."""
        if self.status == SolveStatus.CONTRADICTION:
            raise ContradictionError(self.message or "Solve ended in contradiction", self.contradiction_at)
        if self.status == SolveStatus.ABORTED:
            raise AbortedError(self.message or "Solve aborted", self.abort_reason)
        return [list(row) for row in self.grid or ()]
