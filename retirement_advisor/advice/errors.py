"""
Exceptions raised inside the advice pipeline.

They never escape ``AdviceEngine.generate``: the engine catches them once at
the top and converts them to a critical ``GenerationError`` carrying the
exception's ``kind``.
"""

from __future__ import annotations

from retirement_advisor.models.errors import ContextValue, ErrorKind


class AdviceGenerationFailure(Exception):
    """Base class for domain-fatal failures during advice generation."""

    kind: ErrorKind = ErrorKind.GENERATION_FAILED

    def __init__(self, message: str, **context: ContextValue) -> None:
        super().__init__(message)
        self.context: dict[str, ContextValue] = dict(context)


class EmptySnapshotSeriesError(AdviceGenerationFailure):
    """The projection contains no snapshots."""

    kind = ErrorKind.EMPTY_SNAPSHOT_SERIES


class NonFiniteValueError(AdviceGenerationFailure):
    """A NaN or infinite value reached a scoring computation."""

    kind = ErrorKind.NON_FINITE_VALUE
