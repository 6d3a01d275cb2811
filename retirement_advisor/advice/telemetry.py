"""
Operation telemetry: an owned, explicitly passed timing sink.

Usage::

    sink = TelemetrySink()
    sink.start_operation("debt_advice", states=120)
    ...
    sink.end_operation("debt_advice", data_size=4)
    print(sink.report())

Each ``AdviceEngine`` owns one sink (or is handed one). There is no
process-wide instance. A sink keeps at most ``max_records`` completed records
(``[telemetry]`` in the config), so long-lived engines stay bounded.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from retirement_advisor.config import TelemetryConfig

DEFAULT_MAX_RECORDS = 500


@dataclass(frozen=True)
class OperationMetrics:
    """Timing record for one completed operation.

    Attributes:
        name:        Operation name.
        started_at:  Clock value at start (seconds).
        ended_at:    Clock value at end (seconds).
        data_size:   Number of items produced, if reported.
        metadata:    Keyword metadata given to ``start_operation``.
    """

    name:       str
    started_at: float
    ended_at:   float
    data_size:  Optional[int] = None
    metadata:   dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return (self.ended_at - self.started_at) * 1000.0


class TelemetrySink:
    """Collects ``OperationMetrics`` for named operations.

    Args:
        clock:       Time source in seconds (``time.perf_counter`` by default).
        max_records: Completed records kept; the oldest are dropped first.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.perf_counter,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        if max_records < 1:
            raise ValueError(f"max_records must be >= 1, got {max_records}")
        self._clock = clock
        self._active: dict[str, tuple[float, dict[str, Any]]] = {}
        self._metrics: deque[OperationMetrics] = deque(maxlen=max_records)

    @classmethod
    def from_config(cls, config: "TelemetryConfig") -> "TelemetrySink":
        return cls(max_records=config.max_records)

    def start_operation(self, name: str, **metadata: Any) -> None:
        """Start (or restart) timing ``name``."""
        self._active[name] = (self._clock(), dict(metadata))

    def end_operation(self, name: str, data_size: Optional[int] = None) -> OperationMetrics:
        """Stop timing ``name`` and record the result.

        Raises:
            KeyError: If ``name`` was never started (or already ended).
        """
        if name not in self._active:
            raise KeyError(f'Operation "{name}" was not started')
        started_at, metadata = self._active.pop(name)
        record = OperationMetrics(
            name=name,
            started_at=started_at,
            ended_at=self._clock(),
            data_size=data_size,
            metadata=metadata,
        )
        self._metrics.append(record)
        return record

    def abandon_active(self, keep: tuple[str, ...] = ()) -> None:
        """Forget operations that were started but will never end.

        Args:
            keep: Operation names to leave running.
        """
        for name in list(self._active):
            if name not in keep:
                del self._active[name]

    def metrics(self, name: Optional[str] = None) -> list[OperationMetrics]:
        """Recorded metrics, optionally filtered to one operation name."""
        if name is None:
            return list(self._metrics)
        return [m for m in self._metrics if m.name == name]

    def average_duration_ms(self, name: str) -> float:
        records = self.metrics(name)
        if not records:
            return 0.0
        return sum(m.duration_ms for m in records) / len(records)

    def clear(self) -> None:
        self._metrics.clear()
        self._active.clear()

    def report(self) -> str:
        """Multi-line text summary grouped by operation name."""
        if not self._metrics:
            return "No performance metrics recorded."

        grouped: dict[str, list[OperationMetrics]] = defaultdict(list)
        for record in self._metrics:
            grouped[record.name].append(record)

        lines = ["Performance Report", "=================="]
        for name, records in grouped.items():
            durations = [m.duration_ms for m in records]
            total = sum(durations)
            avg = total / len(records)
            lines += [
                "",
                f"Operation: {name}",
                f"  Executions:   {len(records)}",
                f"  Total Time:   {total:.2f}ms",
                f"  Average Time: {avg:.2f}ms",
                f"  Min Time:     {min(durations):.2f}ms",
                f"  Max Time:     {max(durations):.2f}ms",
            ]
            sized = [m.data_size for m in records if m.data_size is not None]
            if sized:
                avg_size = sum(sized) / len(sized)
                lines.append(f"  Average Data Size: {avg_size:.0f} items")
                if avg_size > 0:
                    lines.append(f"  Time per Item:     {avg / avg_size:.4f}ms")
        return "\n".join(lines)
