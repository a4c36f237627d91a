"""
Constraint propagation for Wave Function Collapse.

Every elimination is pushed onto a stack. Draining the stack re-checks the
four neighbours of the cell that changed: a neighbour keeps tile t2 only if
some tile still possible at the changed cell permits t2 on that side.
Anything unsupported is eliminated and pushed in turn, until the grid is
locally arc-consistent.

The stack order only affects speed, never the fixed point reached.
"""

from collections.abc import Callable

from ..domain.errors import ContradictionError
from ..domain.types import Direction
from ..logging_config import get_logger
from .adjacency import AdjacencyRules
from .wave import Wave

logger = get_logger(__name__)

BanCallback = Callable[[int, int, int], None]


def iter_bits(mask: int):
    """Yield the indices of set bits, lowest first."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low


class Propagator:
    """
    Owns the elimination stack for one solve.

    Usage:
        propagator = Propagator(wave, rules)
        propagator.ban(x, y, tile_id)
        propagator.propagate()  # raises ContradictionError if a cell empties
    """

    def __init__(
        self,
        wave: Wave,
        rules: AdjacencyRules,
        permissive_empty_rules: bool = False,
        on_ban: BanCallback | None = None,
    ):
        """
        Args:
            wave: The wave to shrink
            rules: Read-only adjacency table
            permissive_empty_rules: Treat an empty rule set as "no constraint"
                instead of "supports nothing"
            on_ban: Called with (x, y, tile_id) after every elimination
        """
        self.wave = wave
        self.rules = rules
        self.permissive_empty_rules = permissive_empty_rules
        self.on_ban = on_ban
        self.eliminations = 0

        self._stack: list[tuple[int, int, int]] = []
        self._rule_masks: dict[Direction, tuple[int, ...]] = {
            direction: rules.masks(direction) for direction in Direction
        }
        # Per direction, the tiles whose rule set is empty
        self._empty_masks: dict[Direction, int] = {
            direction: sum(1 << t for t in range(rules.tile_count) if rules.is_empty(direction, t))
            for direction in Direction
        }

    @property
    def pending(self) -> int:
        """Number of eliminations waiting to be propagated."""
        return len(self._stack)

    def ban(self, x: int, y: int, tile_id: int) -> bool:
        """
        Eliminate a tile at a cell and queue the elimination.

        Returns False if the tile was already impossible there.

        Raises:
            ContradictionError: If the cell has no possibilities left
        """
        if not self.wave.ban(x, y, tile_id):
            return False
        self.eliminations += 1
        self._stack.append((x, y, tile_id))
        if self.on_ban is not None:
            self.on_ban(x, y, tile_id)
        if self.wave.is_contradiction(x, y):
            raise ContradictionError(f"No tile fits cell ({x}, {y})", cell=(x, y))
        return True

    def support(self, x: int, y: int, direction: Direction) -> int:
        """
        Tiles that the cell's surviving options permit on the given side.

        Union of rules[direction][t3] over every t3 still possible at (x, y).
        """
        cell_mask = self.wave.mask(x, y)
        if self.permissive_empty_rules and cell_mask & self._empty_masks[direction]:
            return self.wave.full_mask
        masks = self._rule_masks[direction]
        supported = 0
        for t3 in iter_bits(cell_mask):
            supported |= masks[t3]
        return supported

    def propagate(self) -> int:
        """
        Drain the stack until no more eliminations are implied.

        Returns:
            Number of eliminations performed while draining

        Raises:
            ContradictionError: If some cell runs out of possibilities
        """
        start = self.eliminations
        wave = self.wave
        while self._stack:
            x, y, _tile_id = self._stack.pop()
            for direction in Direction:
                nx = x + direction.dx
                ny = y + direction.dy
                if not wave.in_bounds(nx, ny):
                    continue

                unsupported = wave.mask(nx, ny) & ~self.support(x, y, direction)
                for t2 in iter_bits(unsupported):
                    self.ban(nx, ny, t2)
        return self.eliminations - start

    def clear(self) -> None:
        """Drop queued eliminations (used after a contradiction)."""
        self._stack.clear()
