"""Trace events emitted by the solver.

A callback registered on the solver receives one event per collapse, per
elimination, and a final one if the solve hits a contradiction. Events are
only built when a callback is registered.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class TraceEventKind(Enum):
    COLLAPSE = "collapse"
    BAN = "ban"
    CONTRADICTION = "contradiction"


@dataclass(frozen=True)
class TraceEvent:
    """One solver decision or elimination at a cell."""
    kind: TraceEventKind
    x: int
    y: int
    tile_id: int | None = None
    iteration: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


TraceCallback = Callable[[TraceEvent], None]
