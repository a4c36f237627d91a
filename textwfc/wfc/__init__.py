"""Wave Function Collapse over tiles cut from a sample grid."""

from .catalog import SymbolTable, Tile, TileCatalog
from .adjacency import (
    AdjacencyRules,
    AdjacencyStrategy,
    build_rules,
    infer_co_occurrence,
    infer_border_matching,
    infer_declared,
)
from .wave import Wave, apply_boundary_bans
from .propagator import Propagator
from .events import TraceEvent, TraceEventKind, TraceCallback
from .solver import WFCSolver, SolverState
from .reconstruct import reconstruct, tile_grid

__all__ = [
    "SymbolTable",
    "Tile",
    "TileCatalog",
    "AdjacencyRules",
    "AdjacencyStrategy",
    "build_rules",
    "infer_co_occurrence",
    "infer_border_matching",
    "infer_declared",
    "Wave",
    "apply_boundary_bans",
    "Propagator",
    "TraceEvent",
    "TraceEventKind",
    "TraceCallback",
    "WFCSolver",
    "SolverState",
    "reconstruct",
    "tile_grid",
]
