"""
Wall Clock for Record Capture Times
===================================

Injectable millisecond clock used to stamp every serialized record with
its capture time.

MODES:
- LIVE: reads system time (optionally recording each tick)
- REPLAY: yields a pre-recorded tick sequence, so encoded output is
  byte-identical across runs
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List
import threading
import time


class ClockExhausted(Exception):
    """Raised when replay clock runs out of ticks."""
    pass


@dataclass
class WallClock:
    """
    Clock returning milliseconds since the epoch.

    Safe to share between threads; publish calls on different units
    read the same clock concurrently.
    """
    _ticks: List[int] = field(default_factory=list)
    _current_index: int = 0
    _is_live: bool = True
    _record_ticks: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def now_millis(self) -> int:
        with self._lock:
            if self._is_live:
                current = time.time_ns() // 1_000_000
                if self._record_ticks:
                    self._ticks.append(current)
                    self._current_index = len(self._ticks)
                return current
            if self._current_index >= len(self._ticks):
                raise ClockExhausted(
                    f"Replay clock exhausted at index {self._current_index}. "
                    f"Original execution had {len(self._ticks)} ticks."
                )
            tick = self._ticks[self._current_index]
            self._current_index += 1
            return tick

    def is_live(self) -> bool:
        return self._is_live

    def recorded_ticks(self) -> List[int]:
        """Ticks recorded in live mode (empty unless recording is on)."""
        with self._lock:
            return list(self._ticks)

    @classmethod
    def live(cls, record_ticks: bool = False) -> WallClock:
        return cls(_is_live=True, _record_ticks=record_ticks)

    @classmethod
    def replay(cls, ticks: Iterable[int]) -> WallClock:
        return cls(_ticks=[int(t) for t in ticks], _is_live=False)

    def __repr__(self) -> str:
        mode = "LIVE" if self._is_live else "REPLAY"
        return f"WallClock({mode}, ticks={len(self._ticks)}, index={self._current_index})"


@dataclass(frozen=True)
class FixedClock:
    """Clock frozen at a single instant."""
    millis: int

    def now_millis(self) -> int:
        return self.millis
