"""
Tile extraction for Wave Function Collapse.

The sample grid is cut into fixed-size tiles on a non-overlapping grid.
Identical tiles are merged, and each distinct tile remembers how often it
occurred; that count later weights the random choice during collapse.

Edge tiles are truncated when the sample size is not a multiple of the tile
size, so a catalog can hold tiles smaller than tile_width x tile_height.
"""

from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass

from ..domain.errors import ConfigurationError
from ..domain.types import Direction, SymbolGrid
from ..logging_config import get_logger

logger = get_logger(__name__)


class SymbolTable:
    """Interns sample symbols to dense integer ids in first-seen order."""

    def __init__(self):
        self._ids: dict[Hashable, int] = {}
        self._symbols: list[Hashable] = []

    def intern(self, symbol: Hashable) -> int:
        """Return the id for a symbol, assigning the next id if it is new."""
        symbol_id = self._ids.get(symbol)
        if symbol_id is None:
            symbol_id = len(self._symbols)
            self._ids[symbol] = symbol_id
            self._symbols.append(symbol)
        return symbol_id

    def id_of(self, symbol: Hashable) -> int | None:
        """Id of a known symbol, or None if it never appeared."""
        return self._ids.get(symbol)

    def symbol(self, symbol_id: int) -> Hashable:
        return self._symbols[symbol_id]

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._ids

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._symbols)


@dataclass(frozen=True)
class Tile:
    """
    A distinct block of symbols cut from the sample.

    Attributes:
        id: Dense 0-based id, assigned in first-seen (row-major) order
        content: Rows of symbol ids, content[row][col]
        frequency: How many times this exact block occurred in the sample
    """
    id: int
    content: tuple[tuple[int, ...], ...]
    frequency: int = 1

    @property
    def width(self) -> int:
        return len(self.content[0])

    @property
    def height(self) -> int:
        return len(self.content)

    def border(self, direction: Direction) -> tuple[int, ...]:
        """
        The row or column of symbol ids on the given side.

        UP/DOWN give the top/bottom row (left to right),
        LEFT/RIGHT give the left/right column (top to bottom).
        """
        if direction == Direction.UP:
            return self.content[0]
        if direction == Direction.DOWN:
            return self.content[-1]
        if direction == Direction.LEFT:
            return tuple(row[0] for row in self.content)
        return tuple(row[-1] for row in self.content)


class TileCatalog:
    """
    Deduplicated tiles of a sample plus the sample's layout in tile ids.

    Built once per solve and read-only afterwards.
    """

    def __init__(self, sample: SymbolGrid, tile_width: int, tile_height: int):
        """
        Cut the sample into tiles.

        Args:
            sample: Rectangular grid of hashable symbols, indexed sample[row][col]
            tile_width: Tile width in symbols (>= 1)
            tile_height: Tile height in symbols (>= 1)

        Raises:
            ConfigurationError: On non-positive tile sizes or an empty/ragged sample
        """
        if tile_width < 1 or tile_height < 1:
            raise ConfigurationError(
                f"Tile dimensions must be positive, got {tile_width}x{tile_height}"
            )
        rows = [list(row) for row in sample]
        if not rows or not rows[0]:
            raise ConfigurationError("Sample is empty")
        sample_width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != sample_width:
                raise ConfigurationError(
                    f"Sample is not rectangular: row {index} has {len(row)} symbols, expected {sample_width}"
                )

        self.tile_width = tile_width
        self.tile_height = tile_height
        self.sample_width = sample_width
        self.sample_height = len(rows)
        self.symbols = SymbolTable()

        encoded = [[self.symbols.intern(symbol) for symbol in row] for row in rows]

        # Ceiling division: the last column/row of tiles may be truncated
        self.grid_width = -(-self.sample_width // tile_width)
        self.grid_height = -(-self.sample_height // tile_height)

        ids_by_content: dict[tuple[tuple[int, ...], ...], int] = {}
        contents: list[tuple[tuple[int, ...], ...]] = []
        counts: list[int] = []
        tile_grid: list[list[int]] = []

        for ty in range(self.grid_height):
            tile_row: list[int] = []
            y0 = ty * tile_height
            for tx in range(self.grid_width):
                x0 = tx * tile_width
                content = tuple(
                    tuple(encoded[y][x0:x0 + tile_width])
                    for y in range(y0, min(y0 + tile_height, self.sample_height))
                )
                tile_id = ids_by_content.get(content)
                if tile_id is None:
                    tile_id = len(contents)
                    ids_by_content[content] = tile_id
                    contents.append(content)
                    counts.append(0)
                counts[tile_id] += 1
                tile_row.append(tile_id)
            tile_grid.append(tile_row)

        self._tiles: tuple[Tile, ...] = tuple(
            Tile(id=tile_id, content=content, frequency=counts[tile_id])
            for tile_id, content in enumerate(contents)
        )
        self._tile_grid: tuple[tuple[int, ...], ...] = tuple(tuple(row) for row in tile_grid)

        logger.debug(
            f"Catalog built | sample={self.sample_width}x{self.sample_height} | "
            f"tile={tile_width}x{tile_height} | tiles={len(self._tiles)} | symbols={len(self.symbols)}"
        )

    def __len__(self) -> int:
        return len(self._tiles)

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return self._tiles

    def tile(self, tile_id: int) -> Tile:
        return self._tiles[tile_id]

    def frequency(self, tile_id: int) -> int:
        return self._tiles[tile_id].frequency

    @property
    def frequencies(self) -> list[int]:
        """Frequencies indexed by tile id."""
        return [tile.frequency for tile in self._tiles]

    @property
    def tile_grid(self) -> tuple[tuple[int, ...], ...]:
        """The sample re-expressed as tile ids, tile_grid[ty][tx]."""
        return self._tile_grid

    def symbol_of(self, symbol_id: int) -> Hashable:
        return self.symbols.symbol(symbol_id)

    def decode(self, tile_id: int) -> list[list[Hashable]]:
        """Tile content as original symbols (handy for debugging and tests)."""
        return [[self.symbols.symbol(s) for s in row] for row in self._tiles[tile_id].content]

    def find(self, block: Sequence[Sequence[Hashable]]) -> int | None:
        """Id of the tile with exactly this symbol content, or None."""
        encoded = []
        for row in block:
            encoded_row = []
            for symbol in row:
                symbol_id = self.symbols.id_of(symbol)
                if symbol_id is None:
                    return None
                encoded_row.append(symbol_id)
            encoded.append(tuple(encoded_row))
        target = tuple(encoded)
        for tile in self._tiles:
            if tile.content == target:
                return tile.id
        return None
