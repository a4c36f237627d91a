"""
Centralized logging configuration for textwfc.

Debug logging goes to a rotating file, warnings and above to the console.
Log file: <log_dir>/debug.log (with rotation)

Usage:
    from textwfc.logging_config import setup_logging
    setup_logging(log_dir)  # Call once at startup

Library modules only call get_logger(__name__); handlers are attached here.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


ROOT_LOGGER_NAME = "textwfc"
LOG_FILE_NAME = "debug.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 5

FILE_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-28s | %(funcName)-22s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

_announced_paths: set[Path] = set()


def _file_handler(log_path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(log_path, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def _console_handler(level: int) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    return handler


def _detach_handlers(logger: logging.Logger) -> None:
    """Close and remove handlers left by an earlier setup_logging call."""
    while logger.handlers:
        handler = logger.handlers[0]
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    log_dir: Path | str,
    log_level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
) -> Path:
    """
    Route every textwfc.* logger to a rotating debug file and stderr.

    Safe to call more than once: each call replaces the previous handlers,
    so a CLI run and a test can both configure logging in one process.

    Args:
        log_dir: Directory for the log file (created if missing)
        log_level: Level for file logging
        console_level: Level for console output

    Returns:
        Path to the log file
    """
    log_path = Path(log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)
    _detach_handlers(package_logger)
    package_logger.addHandler(_file_handler(log_path, log_level))
    package_logger.addHandler(_console_handler(console_level))

    resolved = log_path.resolve()
    if resolved not in _announced_paths:
        _announced_paths.add(resolved)
        package_logger.info(f"LOGGING | file={resolved} | file_level={logging.getLevelName(log_level)}")

    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger configured as child of the textwfc logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# =============================================================================
# Structured Logging Helpers
# =============================================================================


def log_solve(
    logger: logging.Logger,
    phase: str,
    seed: int | None = None,
    details: str | None = None,
) -> None:
    """Log solve lifecycle (start, boundary pass, finish)."""
    seed_str = f" | seed={seed}" if seed is not None else ""
    details_str = f" | {details}" if details else ""
    logger.info(f"SOLVE | {phase}{seed_str}{details_str}")


def log_collapse(
    logger: logging.Logger,
    iteration: int,
    cell: tuple[int, int],
    tile_id: int,
    options: int,
) -> None:
    """Log a single observe/collapse decision."""
    logger.debug(
        f"ITER {iteration:05d} | COLLAPSE | cell=({cell[0]}, {cell[1]}) | "
        f"tile={tile_id} | options={options}"
    )


def log_propagation(
    logger: logging.Logger,
    iteration: int,
    eliminations: int,
    duration_ms: float | None = None,
) -> None:
    """Log the result of draining the propagation stack."""
    duration_str = f" | {duration_ms:.2f}ms" if duration_ms is not None else ""
    logger.debug(f"ITER {iteration:05d} | PROPAGATE | eliminations={eliminations}{duration_str}")


def log_outcome(
    logger: logging.Logger,
    status: str,
    iterations: int,
    eliminations: int,
    details: str | None = None,
) -> None:
    """Log how a solve ended."""
    details_str = f" | {details}" if details else ""
    message = f"OUTCOME | {status} | iterations={iterations} | eliminations={eliminations}{details_str}"
    if status == "resolved":
        logger.info(message)
    else:
        logger.warning(message)
