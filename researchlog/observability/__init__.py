"""
Observability Layer

RESPONSIBILITY: Accounting of what each publish call did
OUTPUTS: PublishReport per call, aggregated counters across calls

WHAT THIS LAYER MUST NOT DO:
============================
- Modify publish behavior
- Record statement contents (counts only, never values)
- Block publish beyond a short counter update
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict
import threading


@dataclass(frozen=True)
class PublishReport:
    """
    Outcome of one LogUnit.publish call.

    Every buffered statement lands in exactly one bucket.
    """
    written: int = 0
    dropped_private: int = 0
    dropped_revealing: int = 0
    failed: int = 0

    @property
    def considered(self) -> int:
        return self.written + self.dropped_private + self.dropped_revealing + self.failed

    def __add__(self, other: PublishReport) -> PublishReport:
        if not isinstance(other, PublishReport):
            return NotImplemented
        return PublishReport(
            written=self.written + other.written,
            dropped_private=self.dropped_private + other.dropped_private,
            dropped_revealing=self.dropped_revealing + other.dropped_revealing,
            failed=self.failed + other.failed,
        )


class MetricName(Enum):
    PUBLISH_CALLS = "publish_calls_total"
    STATEMENTS_WRITTEN = "statements_written_total"
    DROPPED_PRIVATE = "statements_dropped_private_total"
    DROPPED_REVEALING = "statements_dropped_revealing_total"
    WRITE_FAILURES = "statement_write_failures_total"


class PublishMetrics:
    """
    Counters aggregated over many publish calls.

    Shared between units, so every update is taken under a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[MetricName, int] = {name: 0 for name in MetricName}

    def record(self, report: PublishReport) -> None:
        with self._lock:
            self._counters[MetricName.PUBLISH_CALLS] += 1
            self._counters[MetricName.STATEMENTS_WRITTEN] += report.written
            self._counters[MetricName.DROPPED_PRIVATE] += report.dropped_private
            self._counters[MetricName.DROPPED_REVEALING] += report.dropped_revealing
            self._counters[MetricName.WRITE_FAILURES] += report.failed

    def get(self, name: MetricName) -> int:
        with self._lock:
            return self._counters[name]

    def snapshot(self) -> Dict[str, int]:
        """Counters keyed by metric name (copy)."""
        with self._lock:
            return {name.value: value for name, value in self._counters.items()}

    def reset(self) -> None:
        with self._lock:
            for name in self._counters:
                self._counters[name] = 0
