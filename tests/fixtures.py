"""
Log Unit Fixtures

Explicit statement descriptors and unit builders shared by the tests.

RULES:
======
1. Descriptors cover every privacy flag combination
2. Builders take explicit timestamps, never random ones
3. Sinks that fail do so deterministically
"""

from __future__ import annotations
from typing import Any, Iterable, List, Mapping

from researchlog.contracts.base import Error, ErrorCode, Result
from researchlog.contracts.statement import StatementDescriptor
from researchlog.contracts.values import (
    CompletionInfo, KeyInfo, MotionAction, MotionSample, MotionTrace,
    SuggestedWordInfo, SuggestedWords,
)
from researchlog.domain.serialization import StatementEncoder
from researchlog.storage import DocumentHandle, InMemoryDocumentSink
from researchlog.temporal.clock import FixedClock
from researchlog.temporal.log_unit import LogUnit


CAPTURE_TIME = 1_700_000_000_000


# =============================================================================
# DESCRIPTORS
# =============================================================================

KEY_PRESS = StatementDescriptor(
    name="KeyPress",
    keys=("code", "x", "y"),
)

COMMIT_TEXT = StatementDescriptor(
    name="CommitText",
    keys=("committedText",),
    is_potentially_private=True,
)

SUGGESTION_PICKED = StatementDescriptor(
    name="SuggestionPicked",
    keys=("index", "suggestion"),
    is_potentially_revealing=True,
)

RAW_INPUT = StatementDescriptor(
    name="RawInput",
    keys=("text",),
    is_potentially_private=True,
    is_potentially_revealing=True,
)

TICK = StatementDescriptor(name="Tick")


def make_encoder() -> StatementEncoder:
    return StatementEncoder(clock=FixedClock(CAPTURE_TIME))


def make_unit(timestamps: Iterable[int], descriptor: StatementDescriptor = TICK) -> LogUnit:
    unit = LogUnit()
    for ts in timestamps:
        unit.append_statement(descriptor, ts)
    return unit


def mixed_unit() -> LogUnit:
    """One statement of each privacy class, at 10, 20, 30, 40."""
    unit = LogUnit()
    unit.append_statement(KEY_PRESS, 10, 97, 12, 340)
    unit.append_statement(COMMIT_TEXT, 20, "hello")
    unit.append_statement(SUGGESTION_PICKED, 30, 1, "help")
    unit.append_statement(RAW_INPUT, 40, "secret")
    return unit


# =============================================================================
# STRUCTURED VALUES
# =============================================================================

def sample_completions() -> List[CompletionInfo]:
    return [
        CompletionInfo(position=0, text="hello", label="Hello", id=7),
        CompletionInfo(position=1, text="help"),
    ]


def sample_keys() -> List[KeyInfo]:
    return [
        KeyInfo(code=113, label="q", x=0, y=0, width=36, height=54),
        KeyInfo(code=-5, label=None, x=288, y=162, width=72, height=54),
    ]


def sample_suggestions() -> SuggestedWords:
    return SuggestedWords(
        words=(SuggestedWordInfo("the", 120, 0), SuggestedWordInfo("then", 80, 1)),
        typed_word_valid=True,
        will_auto_correct=False,
        is_prediction=True,
    )


def sample_motion() -> MotionTrace:
    return MotionTrace(
        action=MotionAction.MOVE,
        down_time=1000,
        event_time=1032,
        pointer_id=1,
        samples=(
            MotionSample(time=1016, x=10.5, y=20.0, pressure=0.8, size=0.1),
            MotionSample(time=1032, x=11.0, y=21.25, pressure=0.75, size=0.1),
        ),
    )


# =============================================================================
# SINKS
# =============================================================================

class FailingSink(InMemoryDocumentSink):
    """Rejects writes of the records whose _ty is in fail_names."""

    def __init__(self, fail_names: Iterable[str]):
        super().__init__()
        self._fail_names = set(fail_names)

    def write_object(self, handle: DocumentHandle, record: Mapping[str, Any]) -> Result:
        if record.get("_ty") in self._fail_names:
            return Result.failure(Error.create(ErrorCode.SINK_WRITE_FAILED, "disk full"))
        return super().write_object(handle, record)


class UnopenableSink(InMemoryDocumentSink):
    def begin_document(self) -> Result:
        return Result.failure(Error.create(ErrorCode.SINK_OPEN_FAILED, "read-only filesystem"))
