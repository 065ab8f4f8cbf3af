"""
Temporal Layer
==============

Time-ordered buffering of log statements.

INVARIANTS:
- Statement order inside a unit is insertion order is time order
- Units are reshaped (split, append) by elapsed time, never by index

Modules:
- clock: capture wall clock used by the encoder
- log_unit: LogUnit buffer, split/append, privacy filtered publish
"""

from .clock import ClockExhausted, FixedClock, WallClock

__all__ = [
    'ClockExhausted',
    'FixedClock',
    'WallClock',
]
