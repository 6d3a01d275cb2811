"""
Generation error records.

``GenerationError`` is the structured, serialisable record of something that
went wrong (or nearly wrong) during one advice-generation call. The error
space is closed: every record carries an ``ErrorKind`` and a small context
mapping of primitive values, never an arbitrary object bag.

Severity semantics:
  - ``warning``  — recoverable; recorded, the affected item is still emitted.
  - ``critical`` — the whole call short-circuits to the minimal advice result.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

ContextValue = Union[str, bool, int, float, None]

MAX_CONTEXT_KEYS = 16


class ErrorKind(StrEnum):
    """Closed set of error codes produced by the advice engine."""

    PERSON_TARGETING_INVALID = "person_targeting_invalid"
    EMPTY_SNAPSHOT_SERIES = "empty_snapshot_series"
    NON_FINITE_VALUE = "non_finite_value"
    GENERATION_FAILED = "generation_failed"
    INVALID_RECOMMENDATION = "invalid_recommendation"


class Severity(StrEnum):
    WARNING = "warning"
    CRITICAL = "critical"


class GenerationError(BaseModel):
    """One error or warning raised while generating advice.

    Attributes:
        code: Error kind.
        message: Human-readable description.
        severity: ``warning`` or ``critical``.
        context: Up to ``MAX_CONTEXT_KEYS`` primitive values for diagnosis.
    """

    model_config = ConfigDict(frozen=True)

    code: ErrorKind
    message: str
    severity: Severity
    context: dict[str, ContextValue] = {}

    @field_validator("context")
    @classmethod
    def validate_context_size(cls, v: dict[str, ContextValue]) -> dict[str, ContextValue]:
        if len(v) > MAX_CONTEXT_KEYS:
            raise ValueError(
                f"context may hold at most {MAX_CONTEXT_KEYS} keys, got {len(v)}."
            )
        return v

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL
