"""
Statement Contracts

A StatementDescriptor is the schema of one kind of logged event. It is
created once per event kind, usually at import time, and shared by every
LogUnit that records that kind.

A LoggedEvent is one entry of a LogUnit buffer: descriptor, tagged
argument values and the caller supplied timestamp.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .values import LogValue


@dataclass(frozen=True)
class StatementDescriptor:
    """
    Immutable schema of a log statement.

    PRIVACY FLAGS:
    ==============
    - is_potentially_private: only published when the caller authorizes
      private data for this publish call
    - is_potentially_revealing: never published from a unit that is part
      of a megaword, whatever the private data authorization says
    """
    name: str
    keys: Tuple[str, ...] = field(default_factory=tuple)
    is_potentially_private: bool = False
    is_potentially_revealing: bool = False

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("StatementDescriptor name must be a non-empty string")
        object.__setattr__(self, 'keys', tuple(self.keys))

    @property
    def arity(self) -> int:
        return len(self.keys)


@dataclass(frozen=True)
class LoggedEvent:
    """One buffered statement: (descriptor, values, timestamp)."""
    descriptor: StatementDescriptor
    values: Tuple[LogValue, ...]
    timestamp: int

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def has_arity_mismatch(self) -> bool:
        return len(self.values) != self.descriptor.arity
