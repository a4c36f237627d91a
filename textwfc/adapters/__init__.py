from .text_io import parse_sample, load_sample, format_grid, write_grid
from .tracer import SolveTracer

__all__ = [
    "parse_sample",
    "load_sample",
    "format_grid",
    "write_grid",
    "SolveTracer",
]
