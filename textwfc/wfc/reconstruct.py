"""
Paint a resolved wave back into a symbol grid.

Each cell's tile is copied to pixel offset (x * tile_width, y * tile_height)
and clipped to the output size. A truncated edge tile placed somewhere it
does not fill the whole cell is stretched with its nearest edge symbol.
"""

from collections.abc import Hashable

from ..domain.errors import ContradictionError
from ..logging_config import get_logger
from .catalog import TileCatalog
from .wave import Wave

logger = get_logger(__name__)


def tile_grid(wave: Wave) -> list[list[int]]:
    """
    The chosen tile id per cell, tile_grid[y][x].

    Uses the lowest possible id; a resolved cell has exactly one.

    Raises:
        ContradictionError: If any cell has no possible tile
    """
    result: list[list[int]] = []
    for y in range(wave.height):
        row: list[int] = []
        for x in range(wave.width):
            options = wave.options(x, y)
            if not options:
                raise ContradictionError(f"Cannot reconstruct: cell ({x}, {y}) is empty", cell=(x, y))
            if len(options) > 1:
                logger.warning(f"Cell ({x}, {y}) unresolved with {len(options)} options, painting tile {options[0]}")
            row.append(options[0])
        result.append(row)
    return result


def reconstruct(
    wave: Wave,
    catalog: TileCatalog,
    output_width: int,
    output_height: int,
) -> list[list[Hashable]]:
    """
    Build the output symbol grid from a resolved wave.

    Args:
        wave: A wave with no contradictions
        catalog: The catalog the wave's tile ids refer to
        output_width: Output width in symbols
        output_height: Output height in symbols

    Returns:
        output[row][col] of original sample symbols
    """
    chosen = tile_grid(wave)
    tw = catalog.tile_width
    th = catalog.tile_height

    output: list[list[Hashable]] = [[None] * output_width for _ in range(output_height)]
    for cy, row in enumerate(chosen):
        y0 = cy * th
        if y0 >= output_height:
            break
        for cx, tile_id in enumerate(row):
            x0 = cx * tw
            if x0 >= output_width:
                break
            content = catalog.tile(tile_id).content
            last_row = len(content) - 1
            last_col = len(content[0]) - 1
            for dy in range(min(th, output_height - y0)):
                source_row = content[min(dy, last_row)]
                target_row = output[y0 + dy]
                for dx in range(min(tw, output_width - x0)):
                    target_row[x0 + dx] = catalog.symbol_of(source_row[min(dx, last_col)])
    return output
