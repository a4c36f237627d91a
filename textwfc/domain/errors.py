"""Error taxonomy for the WFC solver.

None of these are retried inside a solve. Callers wanting resilience re-run
the whole solve with a different seed (see generation.generate).
"""


class WFCError(Exception):
    """Base exception for solver errors."""

    pass


class ConfigurationError(WFCError, ValueError):
    """Invalid solver input: bad tile/output dimensions, empty or ragged sample."""

    pass


class ContradictionError(WFCError):
    """A cell ran out of possible tiles."""

    def __init__(self, message: str, cell: tuple[int, int] | None = None):
        super().__init__(message)
        self.cell = cell


class AbortedError(WFCError):
    """The host stopped the solve between observe cycles."""

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.reason = reason
