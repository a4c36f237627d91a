"""textwfc - Wave Function Collapse for text grids."""

__version__ = "0.1.0"

from .domain import (
    Direction,
    WFCError,
    ConfigurationError,
    ContradictionError,
    AbortedError,
    SolveStatus,
    SolveResult,
)
from .wfc import (
    TileCatalog,
    AdjacencyRules,
    AdjacencyStrategy,
    build_rules,
    Wave,
    Propagator,
    WFCSolver,
    SolverState,
    TraceEvent,
    TraceEventKind,
    reconstruct,
)
from .config import SolverConfig, load_config
from .generation import generate, generate_from_config

__all__ = [
    "__version__",
    "Direction",
    "WFCError",
    "ConfigurationError",
    "ContradictionError",
    "AbortedError",
    "SolveStatus",
    "SolveResult",
    "TileCatalog",
    "AdjacencyRules",
    "AdjacencyStrategy",
    "build_rules",
    "Wave",
    "Propagator",
    "WFCSolver",
    "SolverState",
    "TraceEvent",
    "TraceEventKind",
    "reconstruct",
    "SolverConfig",
    "load_config",
    "generate",
    "generate_from_config",
]
