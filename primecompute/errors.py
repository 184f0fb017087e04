"""
Exception types raised by the prime engine.

InvalidInput is a ValueError so callers that already catch ValueError
keep working.
"""


class InvalidInput(ValueError):
    """A value outside the domain of an engine operation."""


class WorkerFault(RuntimeError):
    """A chunk task failed; the computation was aborted after pool teardown."""
