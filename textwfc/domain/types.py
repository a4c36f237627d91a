"""Foundational types for textwfc.

This module defines the small value types shared by the solver and its adapters:
- Direction: the four neighbour directions with grid offsets
- Type aliases for symbols, tile ids and cell coordinates
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from enum import Enum
from typing import NewType

# Type aliases for domain identifiers
TileId = NewType("TileId", int)
SymbolId = NewType("SymbolId", int)

# Anything hashable can be a symbol; text samples use one-character strings.
Symbol = Hashable
SymbolGrid = Sequence[Sequence[Symbol]]
CellPosition = tuple[int, int]


class Direction(Enum):
    """Neighbour directions for adjacency rules.

    Coordinate system is screen-like: x grows to the right, y grows downward,
    and (0, 0) is the top-left cell.
    """

    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def offset(self) -> tuple[int, int]:
        """Get the (dx, dy) offset for this direction."""
        return _DIRECTION_OFFSETS[self]

    @property
    def dx(self) -> int:
        return _DIRECTION_OFFSETS[self][0]

    @property
    def dy(self) -> int:
        return _DIRECTION_OFFSETS[self][1]

    def opposite(self) -> Direction:
        """Return the opposite direction.

        If tile A permits B to its DOWN side, the same pair read from B's side
        is A to its UP side.
        """
        return _DIRECTION_OPPOSITES[self]

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        """Parse a direction name such as "up" or "LEFT"."""
        if isinstance(value, Direction):
            return value
        return cls(value.strip().lower())


# Lookup tables for Direction properties
_DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}

_DIRECTION_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.RIGHT: Direction.LEFT,
    Direction.LEFT: Direction.RIGHT,
}
