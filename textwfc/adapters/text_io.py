"""Plain-text sample and output files.

A sample file is one row per line, one symbol per character.
"""

from collections.abc import Hashable, Sequence
from pathlib import Path

from ..domain.errors import ConfigurationError
from ..logging_config import get_logger

logger = get_logger(__name__)


def parse_sample(text: str) -> list[list[str]]:
    """
    Split text into a grid of one-character symbols.

    Trailing whitespace on each line and trailing blank lines are dropped.
    """
    rows = [line.rstrip() for line in text.splitlines()]
    while rows and not rows[-1]:
        rows.pop()
    if not rows:
        raise ConfigurationError("Sample text is empty")
    return [list(row) for row in rows]


def load_sample(path: Path | str) -> list[list[str]]:
    """Read a sample grid from a text file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Sample file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Sample file is not UTF-8 text: {path}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read sample file {path}: {e}") from e

    grid = parse_sample(text)
    logger.debug(f"Loaded sample {path} | {len(grid[0])}x{len(grid)}")
    return grid


def format_grid(grid: Sequence[Sequence[Hashable]]) -> str:
    """Render a symbol grid as text, one line per row."""
    return "\n".join("".join(str(symbol) for symbol in row) for row in grid)


def write_grid(grid: Sequence[Sequence[Hashable]], path: Path | str) -> Path:
    """Write a symbol grid to a text file, newline-terminated."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_grid(grid) + "\n", encoding="utf-8")
    logger.debug(f"Wrote output grid to {path}")
    return path
