"""
Research Log

On-device research logging for a text input engine. Interaction events
are buffered into LogUnits, filtered for privacy at publish time and
written as structured JSON records to a document sink.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Statement descriptors, logged events, tagged argument values
   - Error and Result types

2. TEMPORAL (temporal/)
   - LogUnit: time ordered buffer with split, append and publish
   - WallClock: capture time source for records

3. SERIALIZATION (domain/)
   - StatementEncoder: event -> record, value dispatch by kind
   - decode_record: record -> name, timestamp, values

4. STORAGE (storage/)
   - DocumentSink interface, ResearchLog file sink, in-memory sink
   - MUST NOT: filter or reorder records

5. SETTINGS (settings/)
   - Immutable SettingsValues snapshots rebuilt on every change

6. OBSERVABILITY (observability/)
   - PublishReport per publish call, PublishMetrics counters

CONSTRAINTS ENFORCED:
=====================
- Privacy filter runs before anything reaches a sink
- A failed write degrades the log, never the caller
- Timestamp monotonicity is the caller's contract and is not checked
"""

from .contracts import (
    CompletionInfo, ConfigurationSnapshot, Error, ErrorCode, KeyInfo,
    LoggedEvent, LogValue, MotionAction, MotionSample, MotionTrace, Result,
    StatementDescriptor, SuggestedWordInfo, SuggestedWords, ValueKind,
)
from .domain.serialization import DecodedRecord, StatementEncoder, decode_record
from .observability import PublishMetrics, PublishReport
from .settings import (
    ConfigurationSource, DictConfigurationSource, ResourceDefaults, Settings,
    SettingsValues,
)
from .storage import DocumentHandle, DocumentSink, InMemoryDocumentSink, ResearchLog
from .temporal import FixedClock, WallClock
from .temporal.log_unit import LogUnit

__version__ = "0.1.0"
