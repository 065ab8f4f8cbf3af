"""
Log Unit
========

A group of log statements related to each other.

A unit buffers every statement made while one composing region was active,
or between committing one region and starting the next. Statements are kept
in insertion order, which is also temporal order.

INVARIANTS:
- Timestamps passed to append_statement are non-decreasing (caller
  contract, NOT checked; split_by_time assumes it)
- may_contain_digit never goes back to False
- Once a unit is split or absorbs another unit it is part of a megaword
  for the rest of its life

PRIVACY FILTER (applied by publish, per statement):
- potentially private statements need include_private_data
- potentially revealing statements are never published from a megaword unit

OWNERSHIP:
A unit has one logical owner at a time. split_by_time hands the returned
unit to the caller; append copies the other unit's statements and leaves
the other unit valid but redundant.
"""

from __future__ import annotations
from bisect import bisect_right
from typing import List, Optional, Tuple
import logging
import threading

from ..contracts.statement import LoggedEvent, StatementDescriptor
from ..contracts.values import LogValue
from ..domain.serialization import StatementEncoder, dumps_record
from ..observability import PublishMetrics, PublishReport
from ..storage import DocumentSink

logger = logging.getLogger(__name__)

_DEFAULT_ENCODER = StatementEncoder()


class LogUnit:
    """
    Mutable, time ordered buffer of logged statements.

    GUARANTEES:
    ===========
    1. Statements keep insertion order through split and append
    2. publish never forwards a statement the privacy filter rejects
    3. One failed write never aborts the rest of a publish call
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._events: List[LoggedEvent] = []
        # Parallel to _events; kept sorted by the caller contract.
        self._times: List[int] = []
        self._word: Optional[str] = None
        self._may_contain_digit = False
        self._is_part_of_megaword = False

    @classmethod
    def _from_parts(
        cls,
        events: List[LoggedEvent],
        times: List[int],
        may_contain_digit: bool,
        is_part_of_megaword: bool
    ) -> LogUnit:
        unit = cls()
        unit._events = events
        unit._times = times
        unit._may_contain_digit = may_contain_digit
        unit._is_part_of_megaword = is_part_of_megaword
        return unit

    # -------------------------------------------------------------------------
    # Buffering
    # -------------------------------------------------------------------------

    def append_statement(self, descriptor: StatementDescriptor, timestamp: int, *values) -> None:
        """
        Add a statement. Successive timestamps must not decrease, or
        split_by_time will not work.
        """
        event = LoggedEvent(
            descriptor=descriptor,
            values=tuple(LogValue.of(v) for v in values),
            timestamp=timestamp,
        )
        with self._lock:
            self._events.append(event)
            self._times.append(timestamp)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    @property
    def events(self) -> Tuple[LoggedEvent, ...]:
        with self._lock:
            return tuple(self._events)

    @property
    def timestamps(self) -> Tuple[int, ...]:
        with self._lock:
            return tuple(self._times)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def set_word(self, word: Optional[str]) -> None:
        with self._lock:
            self._word = word

    def get_word(self) -> Optional[str]:
        with self._lock:
            return self._word

    def has_word(self) -> bool:
        with self._lock:
            return self._word is not None

    def set_may_contain_digit(self) -> None:
        with self._lock:
            self._may_contain_digit = True

    def may_contain_digit(self) -> bool:
        with self._lock:
            return self._may_contain_digit

    @property
    def is_part_of_megaword(self) -> bool:
        with self._lock:
            return self._is_part_of_megaword

    # -------------------------------------------------------------------------
    # Reshaping
    # -------------------------------------------------------------------------

    def split_by_time(self, max_time: int) -> LogUnit:
        """
        Split this unit: statements at or before max_time stay here, later
        ones move into the returned unit.

        When nothing is later than max_time the receiver is left untouched
        and a fresh empty unit is returned.
        """
        with self._lock:
            index = bisect_right(self._times, max_time)
            if index >= len(self._times):
                return LogUnit()

            later = LogUnit._from_parts(
                events=self._events[index:],
                times=self._times[index:],
                may_contain_digit=self._may_contain_digit,
                is_part_of_megaword=True,
            )
            del self._events[index:]
            del self._times[index:]
            self._is_part_of_megaword = True
            return later

    def append(self, other: LogUnit) -> None:
        """
        Merge other's statements onto the end of this unit.

        Other's timestamps must not precede this unit's last timestamp.
        """
        with other._lock:
            other_events = list(other._events)
            other_times = list(other._times)
            other_may_contain_digit = other._may_contain_digit
        with self._lock:
            self._events.extend(other_events)
            self._times.extend(other_times)
            self._word = None
            self._may_contain_digit = self._may_contain_digit or other_may_contain_digit
            self._is_part_of_megaword = True

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def publish(
        self,
        sink: DocumentSink,
        include_private_data: bool,
        encoder: Optional[StatementEncoder] = None,
        metrics: Optional[PublishMetrics] = None
    ) -> PublishReport:
        """
        Write every statement that passes the privacy filter to sink.

        The sink document is only opened once a statement passes the filter.
        Do not hold any other lock while calling this; sink writes may block.
        """
        encoder = encoder if encoder is not None else _DEFAULT_ENCODER
        debug_records = [] if logger.isEnabledFor(logging.DEBUG) else None
        written = dropped_private = dropped_revealing = failed = 0

        with self._lock:
            handle = None
            for event in self._events:
                descriptor = event.descriptor
                if not include_private_data and descriptor.is_potentially_private:
                    dropped_private += 1
                    continue
                if self._is_part_of_megaword and descriptor.is_potentially_revealing:
                    dropped_revealing += 1
                    continue

                if handle is None:
                    opened = sink.begin_document()
                    if opened.is_failure:
                        logger.warning(
                            "Could not open document for %s; skipping statement: %s",
                            descriptor.name, opened.error.message
                        )
                        failed += 1
                        continue
                    handle = opened.value

                record = encoder.encode_event(event)
                result = sink.write_object(handle, record)
                if result.is_failure:
                    logger.warning(
                        "Error writing %s; skipping statement: %s",
                        descriptor.name, result.error.message
                    )
                    failed += 1
                    continue
                written += 1
                if debug_records is not None:
                    debug_records.append(record)

        if debug_records:
            try:
                dump = dumps_record(debug_records, indent=2)
            except (TypeError, ValueError) as e:
                logger.debug("Could not render published records: %s", e)
            else:
                for line in dump.splitlines():
                    logger.debug(line)

        report = PublishReport(
            written=written,
            dropped_private=dropped_private,
            dropped_revealing=dropped_revealing,
            failed=failed,
        )
        if metrics is not None:
            metrics.record(report)
        return report

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"LogUnit(statements={len(self._events)}, word={self._word!r}, "
                f"may_contain_digit={self._may_contain_digit}, "
                f"is_part_of_megaword={self._is_part_of_megaword})"
            )
