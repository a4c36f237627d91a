"""
Wave Function Collapse solver.

This is the heart of WFC - the loop that observes (collapses) cells and
propagates constraints until the entire grid is determined.

The algorithm:
1. Ban tiles from the edges their rules never saw, then propagate
2. Observe: find the unobserved cell with lowest entropy
3. Collapse it to one tile (frequency-weighted random choice)
4. Propagate: eliminate neighbour tiles that lost all support
5. Repeat until every cell is resolved or some cell has no options left

There is no backtracking. A contradiction ends the solve; callers wanting
another try run a fresh solver with a different seed.
"""

import random
import time
from collections.abc import Callable, Sequence
from enum import Enum, auto

from ..domain.errors import ConfigurationError, ContradictionError
from ..domain.outcome import SolveResult, SolveStatus
from ..logging_config import get_logger, log_collapse, log_outcome, log_propagation, log_solve
from .adjacency import AdjacencyRules
from .catalog import TileCatalog
from .events import TraceCallback, TraceEvent, TraceEventKind
from .propagator import Propagator
from .reconstruct import reconstruct, tile_grid
from .wave import Wave, apply_boundary_bans

logger = get_logger(__name__)

# Tie-breaking noise added to entropies; far below the gap between ln(n) and ln(n+1)
ENTROPY_JITTER = 1e-6


class SolverState(Enum):
    """The current state of the WFC solver."""
    RUNNING = auto()        # Still solving, more steps needed
    RESOLVED = auto()       # Every cell has exactly one tile
    CONTRADICTION = auto()  # Some cell ran out of tiles
    ABORTED = auto()        # Host budget exhausted between observe cycles


_STATUS_BY_STATE = {
    SolverState.RESOLVED: SolveStatus.RESOLVED,
    SolverState.CONTRADICTION: SolveStatus.CONTRADICTION,
    SolverState.ABORTED: SolveStatus.ABORTED,
}


class WFCSolver:
    """
    The WFC algorithm for one solve.

    Usage:
        solver = WFCSolver(catalog, rules, width=8, height=8, seed=7)
        while solver.step() == SolverState.RUNNING:
            pass

    Or for bulk solving:
        result = solver.solve()  # SolveResult, never raises on failure

    The wave, elimination stack and random generator belong to this instance
    only. A solver is used for a single solve.
    """

    def __init__(
        self,
        catalog: TileCatalog,
        rules: AdjacencyRules,
        width: int,
        height: int,
        seed: int | None = None,
        permissive_empty_rules: bool = False,
        weights: Sequence[float | None] | None = None,
        output_width: int | None = None,
        output_height: int | None = None,
        max_iterations: int | None = None,
        time_budget: float | None = None,
        should_abort: Callable[[], bool] | None = None,
        on_event: TraceCallback | None = None,
    ):
        """
        Initialize the solver.

        Args:
            catalog: Tiles extracted from the sample
            rules: Adjacency rules for the catalog's tiles
            width: Grid width in cells (tiles)
            height: Grid height in cells (tiles)
            seed: Seed for the solver's random generator (None = pick one)
            permissive_empty_rules: Treat empty rule sets as "no constraint"
                during propagation (boundary bans still apply)
            weights: Collapse weight per tile id; defaults to tile frequency.
                     Missing entries count as 1, negative ones are rejected.
            output_width: Output width in symbols (default: width * tile_width)
            output_height: Output height in symbols (default: height * tile_height).
                           Both output sizes must lie between one tile and the
                           area the cells cover.
            max_iterations: Abort after this many collapses
            time_budget: Abort after this many seconds of wall-clock time
            should_abort: Polled between observe cycles; True aborts the solve
            on_event: Receives a TraceEvent for each collapse and elimination
        """
        if rules.tile_count != len(catalog):
            raise ConfigurationError(
                f"Rules cover {rules.tile_count} tiles but the catalog has {len(catalog)}"
            )
        if max_iterations is not None and max_iterations < 0:
            raise ConfigurationError(f"max_iterations must be >= 0, got {max_iterations}")
        if time_budget is not None and time_budget <= 0:
            raise ConfigurationError(f"time_budget must be positive, got {time_budget}")

        self.catalog = catalog
        self.rules = rules
        self.wave = Wave(width, height, len(catalog))
        self.output_width = output_width if output_width is not None else width * catalog.tile_width
        self.output_height = output_height if output_height is not None else height * catalog.tile_height
        if self.output_width < 1 or self.output_height < 1:
            raise ConfigurationError(
                f"Output dimensions must be positive, got {self.output_width}x{self.output_height}"
            )
        if self.output_width < catalog.tile_width or self.output_height < catalog.tile_height:
            raise ConfigurationError(
                f"Output {self.output_width}x{self.output_height} is smaller than one tile "
                f"({catalog.tile_width}x{catalog.tile_height})"
            )
        # Every output symbol must be painted by some cell
        covered_width = width * catalog.tile_width
        covered_height = height * catalog.tile_height
        if self.output_width > covered_width or self.output_height > covered_height:
            raise ConfigurationError(
                f"Output {self.output_width}x{self.output_height} exceeds the {covered_width}x{covered_height} "
                f"covered by a {width}x{height} cell grid"
            )
        if weights is not None and any(w is not None and w < 0 for w in weights):
            raise ConfigurationError("Collapse weights must be non-negative")

        self.seed = seed if seed is not None else random.randrange(2**32)
        self.rng = random.Random(self.seed)

        self.max_iterations = max_iterations
        self.time_budget = time_budget
        self.should_abort = should_abort
        self.on_event = on_event

        self._weights = list(weights) if weights is not None else catalog.frequencies

        self.propagator = Propagator(
            self.wave,
            rules,
            permissive_empty_rules=permissive_empty_rules,
            on_ban=self._on_ban if on_event is not None else None,
        )

        self.state = SolverState.RUNNING
        self.iterations = 0
        self.last_collapsed: tuple[int, int] | None = None
        self.contradiction_at: tuple[int, int] | None = None
        self.failure_message: str | None = None
        self.abort_reason: str | None = None
        self._initialized = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def eliminations(self) -> int:
        """Number of (cell, tile) eliminations so far."""
        return self.propagator.eliminations

    @property
    def done(self) -> bool:
        return self.state != SolverState.RUNNING

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def initialize(self) -> SolverState:
        """
        Apply boundary bans and propagate them.

        Called automatically by the first step(); safe to call more than once.
        """
        if self._initialized:
            return self.state
        self._initialized = True

        log_solve(
            logger, "start", seed=self.seed,
            details=f"grid={self.wave.width}x{self.wave.height} | tiles={len(self.catalog)}",
        )
        try:
            banned = apply_boundary_bans(self.wave, self.rules, self.propagator.ban)
            cascaded = self.propagator.propagate()
        except ContradictionError as e:
            return self._fail(e)

        log_solve(logger, "boundary", details=f"banned={banned} | cascaded={cascaded}")
        return self.state

    def step(self) -> SolverState:
        """
        Perform one observe/collapse/propagate cycle.

        Returns the solver state after this step.
        """
        if not self._initialized:
            self.initialize()
        if self.state != SolverState.RUNNING:
            return self.state

        try:
            cell = self._observe()
            if cell is None:
                self.state = SolverState.RESOLVED
                return self.state

            self._collapse(*cell)

            started = time.perf_counter()
            eliminated = self.propagator.propagate()
            log_propagation(
                logger, self.iterations, eliminated,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
        except ContradictionError as e:
            return self._fail(e)

        return self.state

    def solve(self) -> SolveResult:
        """
        Run the solver until it resolves, contradicts, or a budget runs out.

        Returns:
            SolveResult describing the outcome. Failures are reported in the
            result, not raised.
        """
        started = time.monotonic()
        while self.state == SolverState.RUNNING:
            reason = self._budget_exceeded(started)
            if reason is not None:
                self._abort(reason)
                break
            self.step()
        return self.result()

    def abort(self, reason: str = "aborted by host") -> None:
        """Stop a running solve from outside the loop (takes effect immediately)."""
        if self.state == SolverState.RUNNING:
            self._abort(reason)

    def result(self) -> SolveResult:
        """Package the current (finished) state as a SolveResult."""
        if self.state == SolverState.RUNNING:
            raise RuntimeError("Solve still running; call solve() or step() until done")

        status = _STATUS_BY_STATE[self.state]
        grid = None
        tiles = None
        if self.state == SolverState.RESOLVED:
            output = reconstruct(self.wave, self.catalog, self.output_width, self.output_height)
            grid = tuple(tuple(row) for row in output)
            tiles = tuple(tuple(row) for row in tile_grid(self.wave))

        log_outcome(
            logger, status.value, self.iterations, self.eliminations,
            details=self.failure_message,
        )
        return SolveResult(
            status=status,
            seed=self.seed,
            grid=grid,
            tile_grid=tiles,
            iterations=self.iterations,
            eliminations=self.eliminations,
            message=self.failure_message,
            contradiction_at=self.contradiction_at,
            abort_reason=self.abort_reason,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _observe(self) -> tuple[int, int] | None:
        """
        Find the unobserved cell with minimum entropy.

        Cells with exactly one option are skipped; they are already resolved.
        Returns None when no eligible cell remains.

        Raises:
            ContradictionError: If an unobserved cell has no options
        """
        wave = self.wave
        best: tuple[int, int] | None = None
        min_entropy = float("inf")

        for x, y in wave.cells():
            if wave.is_observed(x, y):
                continue
            count = wave.count(x, y)
            if count == 0:
                raise ContradictionError(f"No tile fits cell ({x}, {y})", cell=(x, y))
            if count == 1:
                continue

            entropy = wave.entropy(x, y, jitter=self.rng.random() * ENTROPY_JITTER)
            if entropy < min_entropy:
                min_entropy = entropy
                best = (x, y)

        return best

    def _weight(self, tile_id: int) -> float:
        if tile_id < len(self._weights) and self._weights[tile_id] is not None:
            return self._weights[tile_id]
        return 1.0

    def _collapse(self, x: int, y: int) -> None:
        """Collapse a cell to one tile using frequency-weighted random choice."""
        options = self.wave.options(x, y)
        weights = [self._weight(t) for t in options]
        if not any(weights):
            # Every remaining option has zero weight: pick uniformly
            weights = None
        chosen = self.rng.choices(options, weights=weights, k=1)[0]

        self.iterations += 1
        self.last_collapsed = (x, y)
        log_collapse(logger, self.iterations, (x, y), chosen, len(options))
        self._emit(TraceEventKind.COLLAPSE, x, y, chosen)

        for tile_id in options:
            if tile_id != chosen:
                self.propagator.ban(x, y, tile_id)
        self.wave.mark_observed(x, y)

    def _budget_exceeded(self, started: float) -> str | None:
        """Reason the host budget is exhausted, or None to keep going."""
        if self.max_iterations is not None and self.iterations >= self.max_iterations:
            return f"iteration budget of {self.max_iterations} reached"
        if self.time_budget is not None and time.monotonic() - started >= self.time_budget:
            return f"time budget of {self.time_budget}s exceeded"
        if self.should_abort is not None and self.should_abort():
            return "aborted by host"
        return None

    def _fail(self, error: ContradictionError) -> SolverState:
        self.state = SolverState.CONTRADICTION
        self.contradiction_at = error.cell
        self.failure_message = str(error)
        self.propagator.clear()
        if error.cell is not None:
            self._emit(TraceEventKind.CONTRADICTION, error.cell[0], error.cell[1])
        logger.info(f"Contradiction after {self.iterations} collapses: {error}")
        return self.state

    def _abort(self, reason: str) -> None:
        self.state = SolverState.ABORTED
        self.abort_reason = reason
        self.failure_message = f"Solve aborted: {reason}"
        logger.info(f"Aborting solve after {self.iterations} collapses: {reason}")

    def _on_ban(self, x: int, y: int, tile_id: int) -> None:
        self._emit(TraceEventKind.BAN, x, y, tile_id)

    def _emit(self, kind: TraceEventKind, x: int, y: int, tile_id: int | None = None) -> None:
        if self.on_event is not None:
            self.on_event(TraceEvent(kind=kind, x=x, y=y, tile_id=tile_id, iteration=self.iterations))
