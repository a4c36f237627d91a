from .types import (
    TileId,
    SymbolId,
    Symbol,
    SymbolGrid,
    CellPosition,
    Direction,
)
from .errors import (
    WFCError,
    ConfigurationError,
    ContradictionError,
    AbortedError,
)
from .outcome import SolveStatus, SolveResult

__all__ = [
    # Types
    "TileId",
    "SymbolId",
    "Symbol",
    "SymbolGrid",
    "CellPosition",
    "Direction",
    # Errors
    "WFCError",
    "ConfigurationError",
    "ContradictionError",
    "AbortedError",
    # Outcomes
    "SolveStatus",
    "SolveResult",
]
