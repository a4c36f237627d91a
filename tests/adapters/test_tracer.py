"""Tests for textwfc.adapters.tracer module."""

import json
from pathlib import Path
from unittest.mock import Mock

from textwfc.adapters import SolveTracer
from textwfc.wfc import TraceEvent, TraceEventKind


def read_lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestSolveTracerInitialization:
    """Tests for SolveTracer initialization."""

    def test_creates_parent_dir(self, tmp_path: Path):
        """Test the trace file's directory is created."""
        trace_path = tmp_path / "traces" / "run.jsonl"
        tracer = SolveTracer(trace_path)

        assert trace_path.parent.exists()
        assert tracer.trace_path == trace_path

    def test_file_is_opened_lazily(self, tmp_path: Path):
        """Test nothing is written before the first event."""
        trace_path = tmp_path / "run.jsonl"
        SolveTracer(trace_path).close()

        assert not trace_path.exists()

    def test_run_id_is_short(self, tmp_path: Path):
        tracer = SolveTracer(tmp_path / "run.jsonl")
        assert len(tracer.run_id) == 8


class TestCallbackManagement:
    """Tests for callback registration."""

    def test_register_callback(self, tmp_path: Path):
        tracer = SolveTracer(tmp_path / "run.jsonl")
        callback = Mock()

        tracer.register_callback(callback)

        assert callback in tracer._callbacks

    def test_unregister_callback(self, tmp_path: Path):
        tracer = SolveTracer(tmp_path / "run.jsonl")
        callback = Mock()
        tracer.register_callback(callback)

        tracer.unregister_callback(callback)

        assert callback not in tracer._callbacks

    def test_unregister_nonexistent_callback(self, tmp_path: Path):
        tracer = SolveTracer(tmp_path / "run.jsonl")

        # Should not raise
        tracer.unregister_callback(Mock())


class TestRecording:
    """Tests for writing events."""

    def test_writes_jsonl(self, tmp_path: Path):
        """Test each event becomes one JSON line."""
        trace_path = tmp_path / "run.jsonl"
        with SolveTracer(trace_path) as tracer:
            tracer(TraceEvent(kind=TraceEventKind.COLLAPSE, x=1, y=2, tile_id=0, iteration=1))
            tracer(TraceEvent(kind=TraceEventKind.BAN, x=1, y=2, tile_id=1, iteration=1))

        lines = read_lines(trace_path)
        assert len(lines) == 2
        assert lines[0]["event"] == "collapse"
        assert lines[0]["run_id"] == tracer.run_id
        assert (lines[0]["x"], lines[0]["y"], lines[0]["tile_id"]) == (1, 2, 0)
        assert lines[1]["event"] == "ban"
        assert "timestamp" in lines[1]
        assert tracer.event_count == 2

    def test_appends_across_tracers(self, tmp_path: Path):
        trace_path = tmp_path / "run.jsonl"
        for _ in range(2):
            with SolveTracer(trace_path) as tracer:
                tracer.record(TraceEvent(kind=TraceEventKind.CONTRADICTION, x=0, y=0))

        assert len(read_lines(trace_path)) == 2

    def test_new_run_changes_run_id(self, tmp_path: Path):
        trace_path = tmp_path / "run.jsonl"
        with SolveTracer(trace_path) as tracer:
            tracer.record(TraceEvent(kind=TraceEventKind.BAN, x=0, y=0, tile_id=0))
            first = tracer.run_id
            second = tracer.new_run()
            tracer.record(TraceEvent(kind=TraceEventKind.BAN, x=0, y=0, tile_id=1))

        lines = read_lines(trace_path)
        assert lines[0]["run_id"] == first
        assert lines[1]["run_id"] == second

    def test_start_attempt_opens_a_run_per_retry(self, tmp_path: Path):
        trace_path = tmp_path / "run.jsonl"
        with SolveTracer(trace_path) as tracer:
            initial = tracer.run_id
            for attempt, seed in [(1, 10), (2, 20), (3, 30)]:
                tracer.start_attempt(attempt, seed)
                tracer.record(TraceEvent(kind=TraceEventKind.CONTRADICTION, x=0, y=0))

        lines = read_lines(trace_path)
        assert [line["event"] for line in lines] == ["attempt", "contradiction"] * 3
        assert lines[0]["run_id"] == initial
        assert lines[0]["attempt"] == 1
        assert lines[0]["seed"] == 10
        run_ids = [line["run_id"] for line in lines]
        assert run_ids[0] == run_ids[1]
        assert run_ids[2] == run_ids[3]
        assert len(set(run_ids)) == 3

    def test_callbacks_receive_entries(self, tmp_path: Path):
        callback = Mock()
        with SolveTracer(tmp_path / "run.jsonl") as tracer:
            tracer.register_callback(callback)
            tracer.record(TraceEvent(kind=TraceEventKind.COLLAPSE, x=3, y=4, tile_id=2))

        callback.assert_called_once()
        event_type, entry = callback.call_args[0]
        assert event_type == "collapse"
        assert entry["x"] == 3

    def test_failing_callback_does_not_stop_tracing(self, tmp_path: Path):
        trace_path = tmp_path / "run.jsonl"
        good = Mock()
        with SolveTracer(trace_path) as tracer:
            tracer.register_callback(Mock(side_effect=RuntimeError("boom")))
            tracer.register_callback(good)
            tracer.record(TraceEvent(kind=TraceEventKind.BAN, x=0, y=0, tile_id=0))

        good.assert_called_once()
        assert len(read_lines(trace_path)) == 1
