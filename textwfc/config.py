"""Solver configuration for textwfc.

Settings are merged from, lowest to highest precedence:
1. SolverConfig defaults
2. A YAML file (top-level mapping, or the mapping under a `solver:` key)
3. Environment variables TEXTWFC_<FIELD> (the CLI loads .env first)
4. Explicit overrides, e.g. command-line flags

Example YAML:

    solver:
      tile_width: 2
      tile_height: 2
      strategy: border-matching
      seed: 42
      forbidden:
        - [A, up, B]
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .domain.errors import ConfigurationError
from .domain.types import Direction
from .logging_config import get_logger
from .wfc.adjacency import AdjacencyStrategy

logger = get_logger(__name__)

ENV_PREFIX = "TEXTWFC_"

# Tile size used when nothing else is configured (one symbol per tile)
DEFAULT_TILE_SIZE = 1


class SolverConfig(BaseModel):
    """Everything needed to run one generation besides the sample itself."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tile_width: int = Field(default=DEFAULT_TILE_SIZE, ge=1)
    tile_height: int = Field(default=DEFAULT_TILE_SIZE, ge=1)

    # Output size in symbols; None means "same as the sample"
    output_width: int | None = Field(default=None, ge=1)
    output_height: int | None = Field(default=None, ge=1)

    strategy: AdjacencyStrategy = AdjacencyStrategy.CO_OCCURRENCE
    permissive_empty_rules: bool = False
    # (symbol, direction, neighbour) triples for the declared strategy
    forbidden: tuple[tuple[str, Direction, str], ...] = ()

    seed: int | None = None
    max_iterations: int | None = Field(default=None, ge=0)
    time_budget: float | None = Field(default=None, gt=0)
    max_retries: int = Field(default=1, ge=1)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SolverConfig:
        """Validate a plain mapping, raising ConfigurationError on bad values."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid solver configuration: {e}") from e

    def merged(self, **overrides: Any) -> SolverConfig:
        """Copy with the non-None overrides applied (and re-validated)."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return SolverConfig.from_mapping(data)


def load_yaml_config(path: Path | str) -> dict[str, Any]:
    """Read solver settings from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    if "solver" in data:
        data = data["solver"] or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"`solver` section in {path} must be a mapping")

    logger.debug(f"Loaded config from {path} | keys={sorted(data)}")
    return data


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect TEXTWFC_<FIELD> variables for the scalar config fields."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for name in SolverConfig.model_fields:
        if name == "forbidden":
            continue
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def load_config(
    path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> SolverConfig:
    """
    Build a SolverConfig from file, environment and explicit overrides.

    Args:
        path: Optional YAML file
        overrides: Highest-precedence values; None values are ignored
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated SolverConfig

    Raises:
        ConfigurationError: On unreadable files or invalid values
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(load_yaml_config(path))
    data.update(env_overrides(environ))
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})
    return SolverConfig.from_mapping(data)
