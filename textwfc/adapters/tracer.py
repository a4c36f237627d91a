"""
SolveTracer - writes solver trace events to a JSONL file and fans them out
to callbacks.

This enables:
- Post-mortem inspection of every collapse and elimination of a run
- Live monitoring by registering extra callbacks

Each line looks like:
    {"timestamp": "...", "run_id": "1a2b3c4d", "event": "ban", "x": 3, "y": 0, "tile_id": 1, "iteration": 2}
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, TextIO

from ..logging_config import get_logger
from ..wfc.events import TraceEvent

logger = get_logger(__name__)


class SolveTracer:
    """
    Trace sink for one or more solves.

    Pass the tracer itself as the solver's on_event callback:

        with SolveTracer(path) as tracer:
            generate(sample, 16, 16, on_event=tracer)
    """

    def __init__(self, trace_path: Path | str):
        """
        Initialize tracer.

        Args:
            trace_path: JSONL file to append to (parent directories are created)
        """
        self.trace_path = Path(trace_path)
        self.trace_path.parent.mkdir(parents=True, exist_ok=True)
        self.run_id = self._generate_run_id()
        self.event_count = 0

        self._file: TextIO | None = None
        self._callbacks: list[Callable[[str, dict], None]] = []

    def __enter__(self) -> "SolveTracer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __call__(self, event: TraceEvent) -> None:
        self.record(event)

    def register_callback(self, callback: Callable[[str, dict], None]) -> None:
        """
        Register a callback for real-time streaming.

        Callbacks receive (event_type, entry_dict) for each trace event.
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[str, dict], None]) -> None:
        """Remove a previously registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _generate_run_id(self) -> str:
        """Generate an 8-character run ID."""
        return str(uuid.uuid4())[:8]

    def new_run(self) -> str:
        """Start a new run id and return it."""
        self.run_id = self._generate_run_id()
        return self.run_id

    def start_attempt(self, attempt: int, seed: int) -> None:
        """
        Mark the start of a solve attempt.

        Pass as generate(on_attempt=...): every retry gets its own run id,
        and the first line of each run records the attempt number and seed.
        """
        if attempt > 1:
            self.new_run()
        self._write_event("attempt", {"attempt": attempt, "seed": seed})

    def record(self, event: TraceEvent) -> None:
        """Write one solver event."""
        data = event.to_dict()
        event_type = data.pop("kind")
        self._write_event(event_type, data)

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write event to file and notify callbacks."""
        entry = {
            "timestamp": datetime.now().isoformat(),
            "run_id": self.run_id,
            "event": event_type,
            **data,
        }

        if self._file is None:
            self._file = open(self.trace_path, "a", encoding="utf-8")
        self._file.write(json.dumps(entry) + "\n")
        self.event_count += 1

        for callback in list(self._callbacks):
            try:
                callback(event_type, entry)
            except Exception:
                logger.exception(f"Trace callback failed for {event_type} event")

    def close(self) -> None:
        """Flush and close the trace file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug(f"Trace closed | {self.trace_path} | events={self.event_count}")
