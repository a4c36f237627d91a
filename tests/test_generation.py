"""Tests for textwfc.generation."""

import pytest

from textwfc import generation
from textwfc.config import SolverConfig
from textwfc.domain import ConfigurationError, SolveResult, SolveStatus
from textwfc.wfc import TraceEventKind


class TestGenerate:
    """End-to-end generation."""

    def test_checkerboard_example(self, checkerboard_sample):
        """AB/BA at 1x1 gives a 4x4 checkerboard."""
        result = generation.generate(checkerboard_sample, 4, 4, seed=10)

        assert result.ok
        assert result.attempts == 1
        grid = result.unwrap()
        assert len(grid) == 4
        assert all(len(row) == 4 for row in grid)
        assert {symbol for row in grid for symbol in row} <= {"A", "B"}
        for y in range(4):
            for x in range(3):
                assert grid[y][x] != grid[y][x + 1]
        for y in range(3):
            for x in range(4):
                assert grid[y][x] != grid[y + 1][x]

    def test_output_not_a_multiple_of_tile_size(self):
        sample = [list(row) for row in ("ABAB", "BABA", "ABAB", "BABA")]
        result = generation.generate(sample, 5, 3, tile_width=2, tile_height=2, seed=0)
        grid = result.unwrap()
        assert len(grid) == 3
        assert all(len(row) == 5 for row in grid)
        assert grid[2] == list("ABABA")

    def test_is_reproducible(self, open_sample):
        first = generation.generate(open_sample, 8, 8, seed=99)
        second = generation.generate(open_sample, 8, 8, seed=99)
        assert first.grid == second.grid

    def test_trace_callback(self, checkerboard_sample):
        events = []
        generation.generate(checkerboard_sample, 3, 3, seed=1, on_event=events.append)
        assert [e.kind for e in events].count(TraceEventKind.COLLAPSE) == 1

    @pytest.mark.slow
    def test_large_output(self, stripes_sample):
        result = generation.generate(stripes_sample, 120, 80, seed=7)
        grid = result.unwrap()
        assert len(grid) == 80
        for row in grid:
            assert len(set(row)) == 1

    def test_abort_is_not_retried(self, open_sample):
        result = generation.generate(open_sample, 4, 4, seed=0, max_iterations=1, max_retries=5)
        assert result.status == SolveStatus.ABORTED
        assert result.attempts == 1


class TestRetries:
    """Contradictions are re-run with fresh seeds."""

    def test_contradiction_uses_every_attempt(self, single_row_sample):
        result = generation.generate(single_row_sample, 3, 3, seed=5, max_retries=3)
        assert result.status == SolveStatus.CONTRADICTION
        assert result.attempts == 3

    def test_retry_until_resolved(self, checkerboard_sample, monkeypatch):
        seeds = []

        class FlakySolver:
            def __init__(self, catalog, rules, width, height, seed=None, **kwargs):
                seeds.append(seed)

            def solve(self):
                if len(seeds) < 3:
                    return SolveResult(status=SolveStatus.CONTRADICTION, seed=seeds[-1])
                return SolveResult(status=SolveStatus.RESOLVED, seed=seeds[-1], grid=(("A",),))

        monkeypatch.setattr(generation, "WFCSolver", FlakySolver)
        result = generation.generate(checkerboard_sample, 1, 1, seed=123, max_retries=5)

        assert result.ok
        assert result.attempts == 3
        assert seeds[0] == 123
        assert len(seeds) == 3

    def test_retry_seeds_are_reproducible(self, single_row_sample, monkeypatch):
        def run():
            seeds = []

            class RecordingSolver:
                def __init__(self, catalog, rules, width, height, seed=None, **kwargs):
                    seeds.append(seed)

                def solve(self):
                    return SolveResult(status=SolveStatus.CONTRADICTION, seed=seeds[-1])

            monkeypatch.setattr(generation, "WFCSolver", RecordingSolver)
            generation.generate(single_row_sample, 2, 2, seed=8, max_retries=4)
            return seeds

        assert run() == run()

    def test_on_attempt_sees_each_attempt_and_seed(self, single_row_sample):
        calls = []
        result = generation.generate(
            single_row_sample, 3, 3, seed=5, max_retries=3, on_attempt=lambda a, s: calls.append((a, s))
        )
        assert result.attempts == 3
        assert [attempt for attempt, _ in calls] == [1, 2, 3]
        assert calls[0][1] == 5
        assert result.seed == calls[-1][1]


class TestValidation:
    """Configuration errors raised before any solve."""

    def test_empty_sample(self):
        with pytest.raises(ConfigurationError):
            generation.generate([], 4, 4)

    @pytest.mark.parametrize("width,height", [(0, 4), (4, -1)])
    def test_non_positive_output(self, checkerboard_sample, width, height):
        with pytest.raises(ConfigurationError):
            generation.generate(checkerboard_sample, width, height)

    def test_output_smaller_than_tile(self, open_sample):
        with pytest.raises(ConfigurationError, match="smaller than one tile"):
            generation.generate(open_sample, 1, 4, tile_width=2, tile_height=2)

    def test_bad_tile_size(self, checkerboard_sample):
        with pytest.raises(ConfigurationError):
            generation.generate(checkerboard_sample, 4, 4, tile_width=0)

    def test_bad_retry_count(self, checkerboard_sample):
        with pytest.raises(ConfigurationError):
            generation.generate(checkerboard_sample, 4, 4, max_retries=0)

    def test_unknown_strategy(self, checkerboard_sample):
        with pytest.raises(ConfigurationError):
            generation.generate(checkerboard_sample, 4, 4, strategy="magic")


class TestGenerateFromConfig:

    def test_output_defaults_to_sample_size(self, stripes_sample):
        result = generation.generate_from_config(stripes_sample, SolverConfig(seed=3))
        grid = result.unwrap()
        assert len(grid) == 4
        assert all(len(row) == 4 for row in grid)

    def test_config_values_are_used(self, checkerboard_sample):
        config = SolverConfig(
            output_width=6,
            output_height=2,
            strategy="declared",
            forbidden=[("A", "right", "A"), ("B", "right", "B")],
            seed=4,
        )
        grid = generation.generate_from_config(checkerboard_sample, config).unwrap()
        assert len(grid) == 2
        for row in grid:
            assert all(row[x] != row[x + 1] for x in range(5))

    def test_empty_sample(self):
        with pytest.raises(ConfigurationError):
            generation.generate_from_config([], SolverConfig())
