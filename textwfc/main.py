"""textwfc - generate text grids that look like a sample."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .adapters import SolveTracer, format_grid, load_sample, write_grid
from .config import load_config
from .domain.errors import ConfigurationError
from .domain.outcome import SolveStatus
from .generation import generate_from_config
from .logging_config import get_logger, setup_logging
from .wfc import AdjacencyStrategy

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def parse_forbidden(value: str) -> tuple[str, str, str]:
    """Parse a SYMBOL:DIRECTION:NEIGHBOUR triple such as "A:up:B"."""
    parts = value.split(":")
    if len(parts) != 3 or not all(parts):
        raise argparse.ArgumentTypeError(f"expected SYMBOL:DIRECTION:NEIGHBOUR, got {value!r}")
    return parts[0], parts[1], parts[2]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="textwfc",
        description="Generate a text grid that locally resembles a sample (Wave Function Collapse)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  textwfc                                # input.txt -> txt_out.txt, same size
  textwfc sample.txt -o out.txt --width 40 --height 20
  textwfc sample.txt --tile-width 2 --tile-height 2 --strategy border-matching
  textwfc sample.txt --strategy declared --forbid A:up:B --forbid C:left:C
        """,
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=Path("input.txt"),
        help="Sample text file (default: input.txt)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("txt_out.txt"),
        help="Output text file (default: txt_out.txt)",
    )
    parser.add_argument("--width", type=int, help="Output width in symbols (default: sample width)")
    parser.add_argument("--height", type=int, help="Output height in symbols (default: sample height)")
    parser.add_argument("--tile-width", type=int, help="Tile width in symbols (default: 1)")
    parser.add_argument("--tile-height", type=int, help="Tile height in symbols (default: 1)")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in AdjacencyStrategy],
        help="Adjacency inference strategy (default: co-occurrence)",
    )
    parser.add_argument(
        "--permissive",
        action="store_true",
        default=None,
        help="Treat empty rule sets as 'no constraint' during propagation",
    )
    parser.add_argument(
        "--forbid",
        type=parse_forbidden,
        action="append",
        metavar="SYMBOL:DIRECTION:NEIGHBOUR",
        help="Forbidden neighbour rule for the declared strategy (repeatable)",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--max-iterations", type=int, metavar="N", help="Abort after N collapses")
    parser.add_argument("--time-budget", type=float, metavar="SECONDS", help="Abort after SECONDS")
    parser.add_argument("--retries", type=int, metavar="N", help="Total attempts on contradiction")
    parser.add_argument("--config", type=Path, help="YAML config file")
    parser.add_argument("--trace", type=Path, help="Write solver events to this JSONL file")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        help="Directory for debug.log (default: logs/)",
    )
    parser.add_argument("--show", action="store_true", help="Also print the output grid")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging to console")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for textwfc."""
    # Load environment variables first (TEXTWFC_* settings)
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    console_level = logging.DEBUG if args.debug else logging.WARNING
    log_path = setup_logging(args.log_dir, console_level=console_level)

    try:
        config = load_config(
            args.config,
            overrides={
                "output_width": args.width,
                "output_height": args.height,
                "tile_width": args.tile_width,
                "tile_height": args.tile_height,
                "strategy": args.strategy,
                "permissive_empty_rules": args.permissive,
                "forbidden": args.forbid,
                "seed": args.seed,
                "max_iterations": args.max_iterations,
                "time_budget": args.time_budget,
                "max_retries": args.retries,
            },
        )
        sample = load_sample(args.input)

        if args.trace is not None:
            with SolveTracer(args.trace) as tracer:
                result = generate_from_config(
                    sample, config, on_event=tracer, on_attempt=tracer.start_attempt
                )
        else:
            result = generate_from_config(sample, config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    print(f"Finished: {result.ok}")

    if result.status != SolveStatus.RESOLVED:
        print(f"{result.status.value}: {result.message}", file=sys.stderr)
        print(f"Log file: {log_path}", file=sys.stderr)
        return EXIT_FAILED

    grid = result.unwrap()
    write_grid(grid, args.output)
    print(f"Wrote {len(grid[0])}x{len(grid)} grid to {args.output} (seed={result.seed})")
    if args.show:
        print(format_grid(grid))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
