"""
Wave representation for Wave Function Collapse.

The Wave is the "wave function": a 2D grid of cells where each cell holds the
set of tile ids still possible there. A cell with one possibility is resolved,
a cell with none is a contradiction.

Each cell's set is a Python int used as a bitset (bit t set = tile t still
possible). Bits are only ever cleared during a solve, which is what makes
propagation terminate.
"""

import math
from collections.abc import Callable, Iterator

from ..domain.errors import ConfigurationError
from ..domain.types import Direction
from .adjacency import AdjacencyRules


class Wave:
    """
    Per-cell tile domains plus the observed-flag grid.

    Cells are stored row-major; (x, y) addresses column x, row y.
    """

    def __init__(self, width: int, height: int, tile_count: int):
        """
        Create a wave with every tile possible in every cell.

        Args:
            width: Number of cells horizontally
            height: Number of cells vertically
            tile_count: Number of distinct tiles
        """
        if width < 1 or height < 1:
            raise ConfigurationError(f"Wave dimensions must be positive, got {width}x{height}")
        if tile_count < 1:
            raise ConfigurationError("Wave needs at least one tile")

        self.width = width
        self.height = height
        self.tile_count = tile_count
        self.full_mask = (1 << tile_count) - 1

        self._cells: list[int] = [self.full_mask] * (width * height)
        # Cells explicitly collapsed by the solver, as opposed to cells
        # left with one option by propagation
        self._observed: list[bool] = [False] * (width * height)

    def _index(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbor(self, x: int, y: int, direction: Direction) -> tuple[int, int] | None:
        """Position of the neighbour in the given direction, or None off-grid."""
        nx = x + direction.dx
        ny = y + direction.dy
        if self.in_bounds(nx, ny):
            return nx, ny
        return None

    def mask(self, x: int, y: int) -> int:
        return self._cells[self._index(x, y)]

    def possible(self, x: int, y: int, tile_id: int) -> bool:
        return bool(self._cells[self._index(x, y)] >> tile_id & 1)

    def options(self, x: int, y: int) -> list[int]:
        """Tile ids still possible at a cell, ascending."""
        mask = self._cells[self._index(x, y)]
        return [t for t in range(self.tile_count) if mask >> t & 1]

    def count(self, x: int, y: int) -> int:
        return self._cells[self._index(x, y)].bit_count()

    def entropy(self, x: int, y: int, jitter: float = 0.0) -> float:
        """
        Ranking proxy for how undecided a cell is: ln(count) + jitter.

        Not a physical entropy; only the ordering matters.
        """
        return math.log(self.count(x, y)) + jitter

    def is_contradiction(self, x: int, y: int) -> bool:
        return self._cells[self._index(x, y)] == 0

    def is_resolved(self, x: int, y: int) -> bool:
        return self.count(x, y) == 1

    def is_observed(self, x: int, y: int) -> bool:
        return self._observed[self._index(x, y)]

    def mark_observed(self, x: int, y: int) -> None:
        self._observed[self._index(x, y)] = True

    def ban(self, x: int, y: int, tile_id: int) -> bool:
        """
        Mark a tile impossible at a cell.

        Returns True if the tile was possible (the cell changed),
        False if it had already been eliminated.
        """
        index = self._index(x, y)
        bit = 1 << tile_id
        if not self._cells[index] & bit:
            return False
        self._cells[index] &= ~bit
        return True

    def cells(self) -> Iterator[tuple[int, int]]:
        """Iterate over all cell positions, row-major."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def total_possibilities(self) -> int:
        """Sum of possibility counts over the whole grid."""
        return sum(mask.bit_count() for mask in self._cells)

    def is_fully_resolved(self) -> bool:
        return all(mask.bit_count() == 1 for mask in self._cells)

    def find_contradiction(self) -> tuple[int, int] | None:
        """First cell with no possibilities, or None."""
        for index, mask in enumerate(self._cells):
            if mask == 0:
                return index % self.width, index // self.width
        return None


def edge_cells(wave: Wave, direction: Direction) -> Iterator[tuple[int, int]]:
    """Cells on the grid edge facing the given direction."""
    if direction == Direction.UP:
        return ((x, 0) for x in range(wave.width))
    if direction == Direction.DOWN:
        return ((x, wave.height - 1) for x in range(wave.width))
    if direction == Direction.LEFT:
        return ((0, y) for y in range(wave.height))
    return ((wave.width - 1, y) for y in range(wave.height))


def apply_boundary_bans(
    wave: Wave,
    rules: AdjacencyRules,
    ban: Callable[[int, int, int], object],
) -> int:
    """
    Ban tiles from the grid edges their rule sets never saw.

    A tile whose rule set for direction D is empty is eliminated from every
    cell on the edge facing D. Must run once, before the first propagation.
    The ban callable is usually Propagator.ban so eliminations get queued.

    Returns:
        Number of (cell, tile) pairs handed to ban
    """
    banned = 0
    for direction in Direction:
        empty_tiles = [t for t in range(rules.tile_count) if rules.is_empty(direction, t)]
        if not empty_tiles:
            continue
        for x, y in edge_cells(wave, direction):
            for tile_id in empty_tiles:
                if wave.possible(x, y, tile_id):
                    ban(x, y, tile_id)
                    banned += 1
    return banned
