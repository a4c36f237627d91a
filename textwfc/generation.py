"""
Sample-driven grid generation.

This module provides the main entry point: give it a sample grid and an
output size, get back a SolveResult with a grid that locally resembles the
sample.
"""

import random
from collections.abc import Callable, Iterable

from .config import SolverConfig
from .domain.errors import ConfigurationError
from .domain.outcome import SolveResult, SolveStatus
from .domain.types import SymbolGrid
from .logging_config import get_logger
from .wfc import AdjacencyStrategy, TileCatalog, TraceCallback, WFCSolver, build_rules
from .wfc.adjacency import ForbiddenRule

logger = get_logger(__name__)

# (attempt number starting at 1, seed of that attempt)
AttemptCallback = Callable[[int, int], None]


def generate(
    sample: SymbolGrid,
    output_width: int,
    output_height: int,
    tile_width: int = 1,
    tile_height: int = 1,
    strategy: AdjacencyStrategy | str = AdjacencyStrategy.CO_OCCURRENCE,
    seed: int | None = None,
    permissive_empty_rules: bool = False,
    forbidden: Iterable[ForbiddenRule] = (),
    max_iterations: int | None = None,
    time_budget: float | None = None,
    should_abort: Callable[[], bool] | None = None,
    on_event: TraceCallback | None = None,
    max_retries: int = 1,
    on_attempt: AttemptCallback | None = None,
) -> SolveResult:
    """
    Generate an output grid from a sample using Wave Function Collapse.

    Args:
        sample: Rectangular grid of symbols, sample[row][col]
        output_width: Output width in symbols
        output_height: Output height in symbols
        tile_width: Tile width in symbols
        tile_height: Tile height in symbols
        strategy: How adjacency rules are inferred
        seed: Random seed for reproducibility (None = random)
        permissive_empty_rules: Treat empty rule sets as "no constraint"
        forbidden: Forbidden (symbol, direction, neighbour) triples for the
                   declared strategy
        max_iterations: Abort a solve after this many collapses
        time_budget: Abort a solve after this many seconds
        should_abort: Polled between observe cycles; True aborts
        on_event: Trace callback for collapse/elimination events
        max_retries: Total attempts; contradictions are re-run with a new
                     seed, aborts are not
        on_attempt: Called with (attempt, seed) before each solve starts

    Returns:
        SolveResult of the last attempt

    Raises:
        ConfigurationError: On invalid sample, tile or output dimensions
    """
    if max_retries < 1:
        raise ConfigurationError(f"max_retries must be >= 1, got {max_retries}")

    catalog = TileCatalog(sample, tile_width, tile_height)
    if output_width < 1 or output_height < 1:
        raise ConfigurationError(f"Output dimensions must be positive, got {output_width}x{output_height}")
    if output_width < tile_width or output_height < tile_height:
        raise ConfigurationError(
            f"Output {output_width}x{output_height} is smaller than one tile ({tile_width}x{tile_height})"
        )
    rules = build_rules(catalog, strategy, forbidden)

    # Ceiling division: the last row/column of cells is clipped on output
    grid_width = -(-output_width // tile_width)
    grid_height = -(-output_height // tile_height)

    # Seeds for retries come from one generator so a seeded call stays reproducible
    seeder = random.Random(seed)
    attempt_seed = seed if seed is not None else seeder.randrange(2**32)

    result: SolveResult | None = None
    for attempt in range(1, max_retries + 1):
        if on_attempt is not None:
            on_attempt(attempt, attempt_seed)
        solver = WFCSolver(
            catalog,
            rules,
            grid_width,
            grid_height,
            seed=attempt_seed,
            permissive_empty_rules=permissive_empty_rules,
            output_width=output_width,
            output_height=output_height,
            max_iterations=max_iterations,
            time_budget=time_budget,
            should_abort=should_abort,
            on_event=on_event,
        )
        result = solver.solve().model_copy(update={"attempts": attempt})

        if result.status != SolveStatus.CONTRADICTION:
            return result

        if attempt < max_retries:
            logger.info(f"Contradiction on attempt {attempt}/{max_retries} (seed={attempt_seed}), retrying")
            attempt_seed = seeder.randrange(2**32)

    return result


def generate_from_config(
    sample: SymbolGrid,
    config: SolverConfig,
    on_event: TraceCallback | None = None,
    should_abort: Callable[[], bool] | None = None,
    on_attempt: AttemptCallback | None = None,
) -> SolveResult:
    """
    Generate using a SolverConfig; unset output sizes default to the sample's.
    """
    rows = [list(row) for row in sample]
    if not rows or not rows[0]:
        raise ConfigurationError("Sample is empty")
    output_width = config.output_width if config.output_width is not None else len(rows[0])
    output_height = config.output_height if config.output_height is not None else len(rows)

    return generate(
        rows,
        output_width,
        output_height,
        tile_width=config.tile_width,
        tile_height=config.tile_height,
        strategy=config.strategy,
        seed=config.seed,
        permissive_empty_rules=config.permissive_empty_rules,
        forbidden=config.forbidden,
        max_iterations=config.max_iterations,
        time_budget=config.time_budget,
        should_abort=should_abort,
        on_event=on_event,
        max_retries=config.max_retries,
        on_attempt=on_attempt,
    )
