"""
Adjacency rules for Wave Function Collapse.

For every direction and tile, the rule table holds the set of tiles allowed
immediately on that side. This is the heart of WFC: purely local constraints
that the propagator turns into global structure.

Rules are stored as bitmasks (one Python int per direction/tile pair) so the
propagator can union and intersect whole tile sets in one operation.

Strategies:
    CO_OCCURRENCE   - only neighbour pairs actually seen in the sample (default)
    BORDER_MATCHING - any pair whose touching borders are identical
    DECLARED        - everything allowed except hand-written forbidden pairs
"""

from collections.abc import Callable, Hashable, Iterable, Sequence
from enum import Enum

from ..domain.errors import ConfigurationError
from ..domain.types import Direction
from ..logging_config import get_logger
from .catalog import TileCatalog

logger = get_logger(__name__)

# (symbol, direction, neighbour symbol): "symbol cannot have neighbour in direction"
ForbiddenRule = tuple[Hashable, Direction | str, Hashable]


class AdjacencyStrategy(Enum):
    """How adjacency rules are inferred from the sample."""

    CO_OCCURRENCE = "co-occurrence"
    BORDER_MATCHING = "border-matching"
    DECLARED = "declared"


class AdjacencyRules:
    """
    Read-only rule table: rules[direction][tile_id] -> permitted neighbour ids.

    The relation need not be symmetric. An empty set for (direction, tile)
    means the sample gives no evidence that the tile can have a neighbour on
    that side; the wave uses it to ban the tile from the matching grid edge.
    """

    def __init__(self, tile_count: int, masks: dict[Direction, Sequence[int]]):
        self.tile_count = tile_count
        self.full_mask = (1 << tile_count) - 1
        self._masks: dict[Direction, tuple[int, ...]] = {}
        for direction in Direction:
            direction_masks = tuple(masks.get(direction, [0] * tile_count))
            if len(direction_masks) != tile_count:
                raise ConfigurationError(
                    f"Rule table for {direction.value} has {len(direction_masks)} entries, expected {tile_count}"
                )
            self._masks[direction] = direction_masks

    @classmethod
    def from_pairs(
        cls,
        tile_count: int,
        pairs: Iterable[tuple[int, Direction, int]],
    ) -> "AdjacencyRules":
        """Build a table from (tile, direction, neighbour) triples."""
        masks = {direction: [0] * tile_count for direction in Direction}
        for tile_id, direction, neighbor_id in pairs:
            masks[direction][tile_id] |= 1 << neighbor_id
        return cls(tile_count, masks)

    def mask(self, direction: Direction, tile_id: int) -> int:
        """Bitmask of tiles permitted on the given side of tile_id."""
        return self._masks[direction][tile_id]

    def masks(self, direction: Direction) -> tuple[int, ...]:
        return self._masks[direction]

    def allowed(self, direction: Direction, tile_id: int) -> set[int]:
        """Permitted neighbour ids as a set."""
        mask = self._masks[direction][tile_id]
        return {t for t in range(self.tile_count) if mask >> t & 1}

    def permits(self, direction: Direction, tile_id: int, neighbor_id: int) -> bool:
        """Whether neighbor_id may sit on the given side of tile_id."""
        return bool(self._masks[direction][tile_id] >> neighbor_id & 1)

    def is_empty(self, direction: Direction, tile_id: int) -> bool:
        return self._masks[direction][tile_id] == 0

    def pair_count(self) -> int:
        """Total number of permitted (tile, direction, neighbour) triples."""
        return sum(mask.bit_count() for masks in self._masks.values() for mask in masks)

    def as_sets(self) -> dict[Direction, list[set[int]]]:
        """Plain-set view of the whole table, mostly for debugging."""
        return {
            direction: [self.allowed(direction, t) for t in range(self.tile_count)]
            for direction in Direction
        }


# =============================================================================
# Strategies
# =============================================================================


def infer_co_occurrence(catalog: TileCatalog) -> AdjacencyRules:
    """
    Permit exactly the neighbour pairs observed in the sample's tile grid.

    Every tile-grid position records the tile found on each in-bounds side,
    so a tile only ever seen on the right edge of the sample ends up with an
    empty RIGHT set.
    """
    grid = catalog.tile_grid
    pairs = []
    for ty in range(catalog.grid_height):
        for tx in range(catalog.grid_width):
            for direction in Direction:
                nx = tx + direction.dx
                ny = ty + direction.dy
                if 0 <= nx < catalog.grid_width and 0 <= ny < catalog.grid_height:
                    pairs.append((grid[ty][tx], direction, grid[ny][nx]))
    return AdjacencyRules.from_pairs(len(catalog), pairs)


def infer_border_matching(catalog: TileCatalog) -> AdjacencyRules:
    """
    Permit a pair when the rows/columns that would touch are identical.

    Vertical neighbours need equal widths and horizontal neighbours equal
    heights; tiles of different sizes never match on that axis. Self pairs
    are checked like any other.
    """
    tiles = catalog.tiles
    pairs = []
    for a in tiles:
        for b in tiles:
            for direction in Direction:
                # The side of b that touches a is the opposite one
                if a.border(direction) == b.border(direction.opposite()):
                    pairs.append((a.id, direction, b.id))
    return AdjacencyRules.from_pairs(len(catalog), pairs)


def infer_declared(catalog: TileCatalog, forbidden: Iterable[ForbiddenRule] = ()) -> AdjacencyRules:
    """
    Permit every pair except the declared forbidden ones.

    Only meaningful for 1x1 tiles, where a tile is a single symbol. Each rule
    reads "symbol cannot have neighbour_symbol in direction".
    """
    if catalog.tile_width != 1 or catalog.tile_height != 1:
        raise ConfigurationError(
            f"Declared rules need 1x1 tiles, got {catalog.tile_width}x{catalog.tile_height}"
        )

    count = len(catalog)
    full = (1 << count) - 1
    masks = {direction: [full] * count for direction in Direction}

    for symbol, direction, neighbor in forbidden:
        try:
            direction = Direction.parse(direction)
        except (ValueError, AttributeError) as e:
            raise ConfigurationError(
                f"Unknown direction {direction!r} in forbidden rule ({symbol!r}, {direction!r}, {neighbor!r})"
            ) from e
        tile_id = catalog.find([[symbol]])
        neighbor_id = catalog.find([[neighbor]])
        if tile_id is None or neighbor_id is None:
            logger.warning(
                f"Ignoring forbidden rule ({symbol!r}, {direction.value}, {neighbor!r}): symbol not in sample"
            )
            continue
        masks[direction][tile_id] &= ~(1 << neighbor_id)

    return AdjacencyRules(count, masks)


_BUILDERS: dict[AdjacencyStrategy, Callable[..., AdjacencyRules]] = {
    AdjacencyStrategy.CO_OCCURRENCE: infer_co_occurrence,
    AdjacencyStrategy.BORDER_MATCHING: infer_border_matching,
}


def build_rules(
    catalog: TileCatalog,
    strategy: AdjacencyStrategy | str = AdjacencyStrategy.CO_OCCURRENCE,
    forbidden: Iterable[ForbiddenRule] = (),
) -> AdjacencyRules:
    """
    Infer the rule table for a catalog with the chosen strategy.

    Args:
        catalog: Tiles extracted from the sample
        strategy: Strategy enum or its string value
        forbidden: Forbidden triples, used by the DECLARED strategy only

    Returns:
        AdjacencyRules ready for the solver
    """
    try:
        strategy = AdjacencyStrategy(strategy)
    except ValueError as e:
        raise ConfigurationError(f"Unknown adjacency strategy: {strategy!r}") from e

    forbidden = tuple(forbidden)
    if strategy == AdjacencyStrategy.DECLARED:
        rules = infer_declared(catalog, forbidden)
    else:
        if forbidden:
            logger.warning(
                f"Ignoring {len(forbidden)} forbidden rule(s): only the declared strategy uses them, "
                f"got {strategy.value}"
            )
        rules = _BUILDERS[strategy](catalog)

    empty_sides = sum(
        1 for direction in Direction for t in range(rules.tile_count) if rules.is_empty(direction, t)
    )
    logger.debug(
        f"Rules built | strategy={strategy.value} | tiles={rules.tile_count} | "
        f"pairs={rules.pair_count()} | empty_sides={empty_sides}"
    )
    return rules
