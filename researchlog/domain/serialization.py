"""
Statement Serialization
=======================

Turns a LoggedEvent into one structured record and back.

WIRE CONTRACT (field order is fixed):
    _ct  capture wall-clock time, ms since epoch
    _ut  the event's own timestamp
    _ty  the statement name
    ...  one field per declared key, in declaration order

Value encoding switches over ValueKind. Unsupported values are written as
null with a warning; nothing about a value can abort the record.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import json
import logging
import math

from ..contracts.base import Error, ErrorCode, Result
from ..contracts.statement import LoggedEvent, StatementDescriptor
from ..contracts.values import (
    CompletionInfo, ConfigurationSnapshot, KeyInfo, LogValue, MotionAction,
    MotionSample, MotionTrace, SuggestedWordInfo, SuggestedWords, ValueKind,
)
from ..temporal.clock import WallClock

logger = logging.getLogger(__name__)

CURRENT_TIME_KEY = "_ct"
UPTIME_KEY = "_ut"
EVENT_TYPE_KEY = "_ty"
RESERVED_KEYS = (CURRENT_TIME_KEY, UPTIME_KEY, EVENT_TYPE_KEY)


class RecordJSONEncoder(json.JSONEncoder):
    """
    JSON encoder used by sinks when rendering records as text.

    RULES:
    1. Enums use their .value
    2. Dataclasses are dumped field by field
    3. Sets become sorted lists (deterministic output)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        return super().default(obj)


def dumps_record(record: Any, indent: Optional[int] = None) -> str:
    # NaN and Infinity are not JSON; writers reject them with ValueError.
    return json.dumps(
        record, cls=RecordJSONEncoder, ensure_ascii=False, allow_nan=False, indent=indent
    )


# =============================================================================
# ENCODING
# =============================================================================

class StatementEncoder:
    """
    Encodes logged events into insertion-ordered dicts.

    The encoder is stateless apart from its clock and may be shared by any
    number of units and threads.
    """

    def __init__(self, clock=None):
        self._clock = clock if clock is not None else WallClock.live()

    @property
    def clock(self):
        return self._clock

    def encode_event(self, event: LoggedEvent) -> Dict[str, Any]:
        descriptor = event.descriptor
        if event.has_arity_mismatch:
            logger.warning(
                "Key and value list sizes do not match for %s: %d keys, %d values",
                descriptor.name, descriptor.arity, len(event.values)
            )
        record: Dict[str, Any] = {
            CURRENT_TIME_KEY: self._clock.now_millis(),
            UPTIME_KEY: int(event.timestamp),
            EVENT_TYPE_KEY: descriptor.name,
        }
        for key, value in zip(descriptor.keys, event.values):
            record[key] = self.encode_value(value)
        return record

    def encode_value(self, value: LogValue) -> Any:
        kind = value.kind
        if kind is ValueKind.TEXT:
            return str(value.payload)
        if kind is ValueKind.INTEGER:
            return int(value.payload)
        if kind is ValueKind.FLOAT:
            number = float(value.payload)
            if not math.isfinite(number):
                logger.warning("Non-finite number cannot be logged: %r", number)
                return None
            return number
        if kind is ValueKind.BOOLEAN:
            return bool(value.payload)
        if kind is ValueKind.NULL:
            return None
        if kind is ValueKind.COMPLETION_LIST:
            return encode_completions(value.payload)
        if kind is ValueKind.KEY_LAYOUT:
            return encode_keys(value.payload)
        if kind is ValueKind.SUGGESTION_LIST:
            return encode_suggested_words(value.payload)
        if kind is ValueKind.MOTION_TRACE:
            return encode_motion_trace(value.payload)
        if kind is ValueKind.CONFIGURATION_SNAPSHOT:
            return encode_configuration(value.payload)
        if kind is ValueKind.UNSUPPORTED:
            logger.warning("Unrecognized type to be logged: %s", value.payload)
            return None
        raise AssertionError(f"unhandled value kind {kind!r}")


def encode_completions(completions: Sequence[CompletionInfo]) -> List[Dict[str, Any]]:
    return [
        {"position": c.position, "text": c.text, "label": c.label, "id": c.id}
        for c in completions
    ]


def encode_keys(keys: Sequence[KeyInfo]) -> List[Dict[str, Any]]:
    return [
        {
            "code": k.code,
            "label": k.label,
            "x": k.x,
            "y": k.y,
            "width": k.width,
            "height": k.height,
        }
        for k in keys
    ]


def encode_suggested_words(words: SuggestedWords) -> Dict[str, Any]:
    return {
        "typedWordValid": words.typed_word_valid,
        "willAutoCorrect": words.will_auto_correct,
        "isPunctuationSuggestions": words.is_punctuation_suggestions,
        "isObsoleteSuggestions": words.is_obsolete_suggestions,
        "isPrediction": words.is_prediction,
        "suggestedWords": [
            {"word": info.word, "score": info.score, "kind": info.kind}
            for info in words.words
        ],
    }


def encode_motion_trace(trace: MotionTrace) -> Dict[str, Any]:
    return {
        "action": trace.action.value,
        "downTime": trace.down_time,
        "eventTime": trace.event_time,
        "pointerId": trace.pointer_id,
        "samples": [
            {"time": s.time, "x": s.x, "y": s.y, "pressure": s.pressure, "size": s.size}
            for s in trace.samples
        ],
    }


def encode_configuration(snapshot: ConfigurationSnapshot) -> Dict[str, Any]:
    return {key: value for key, value in snapshot.entries}


# =============================================================================
# DECODING
# =============================================================================

@dataclass(frozen=True)
class DecodedRecord:
    """A record read back from a document."""
    name: str
    timestamp: int
    capture_time: int
    keys: Tuple[str, ...]
    values: Tuple[LogValue, ...]

    def as_dict(self) -> Dict[str, LogValue]:
        return dict(zip(self.keys, self.values))


def decode_record(
    record: Mapping[str, Any],
    descriptor: Optional[StatementDescriptor] = None,
    kinds: Optional[Sequence[ValueKind]] = None
) -> Result:
    """
    Rebuild name, timestamp and argument values from a record.

    With a descriptor, only its declared keys are read (in declaration
    order). Without one, every non-reserved field is read in record order.
    `kinds` gives the expected shape per key; otherwise the shape is
    inferred from the JSON structure.
    """
    missing = [k for k in RESERVED_KEYS if k not in record]
    if missing:
        return Result.failure(Error.create(
            ErrorCode.INVALID_RECORD,
            f"Record is missing fields: {', '.join(missing)}"
        ))

    if descriptor is not None:
        declared = descriptor.keys
    else:
        declared = tuple(k for k in record if k not in RESERVED_KEYS)

    if kinds is not None and len(kinds) < len(declared):
        return Result.failure(Error.create(
            ErrorCode.INVALID_RECORD,
            f"Expected {len(declared)} value kinds, got {len(kinds)}"
        ))

    keys = []
    values = []
    for index, key in enumerate(declared):
        # keys without a value were omitted at encoding time
        if key not in record:
            continue
        kind = kinds[index] if kinds is not None else None
        try:
            values.append(decode_value(record[key], kind))
        except (KeyError, TypeError, ValueError) as e:
            return Result.failure(Error.create(
                ErrorCode.INVALID_RECORD,
                f"Cannot decode field {key!r}: {e}"
            ).with_context("field", key))
        keys.append(key)

    return Result.success(DecodedRecord(
        name=str(record[EVENT_TYPE_KEY]),
        timestamp=int(record[UPTIME_KEY]),
        capture_time=int(record[CURRENT_TIME_KEY]),
        keys=tuple(keys),
        values=tuple(values),
    ))


def decode_value(fragment: Any, kind: Optional[ValueKind] = None) -> LogValue:
    if kind is None:
        kind = infer_kind(fragment)

    if fragment is None or kind in (ValueKind.NULL, ValueKind.UNSUPPORTED):
        return LogValue(ValueKind.NULL)
    if kind is ValueKind.TEXT:
        return LogValue(kind, str(fragment))
    if kind is ValueKind.INTEGER:
        return LogValue(kind, int(fragment))
    if kind is ValueKind.FLOAT:
        return LogValue(kind, float(fragment))
    if kind is ValueKind.BOOLEAN:
        return LogValue(kind, bool(fragment))
    if kind is ValueKind.COMPLETION_LIST:
        return LogValue.completion_list(
            CompletionInfo(
                position=int(item["position"]),
                text=item["text"],
                label=item.get("label"),
                id=int(item.get("id", 0)),
            )
            for item in fragment
        )
    if kind is ValueKind.KEY_LAYOUT:
        return LogValue.key_layout(
            KeyInfo(
                code=int(item["code"]),
                label=item.get("label"),
                x=int(item["x"]),
                y=int(item["y"]),
                width=int(item["width"]),
                height=int(item["height"]),
            )
            for item in fragment
        )
    if kind is ValueKind.SUGGESTION_LIST:
        return LogValue(kind, SuggestedWords(
            words=tuple(
                SuggestedWordInfo(word=w["word"], score=int(w["score"]), kind=int(w.get("kind", 0)))
                for w in fragment["suggestedWords"]
            ),
            typed_word_valid=bool(fragment["typedWordValid"]),
            will_auto_correct=bool(fragment["willAutoCorrect"]),
            is_punctuation_suggestions=bool(fragment["isPunctuationSuggestions"]),
            is_obsolete_suggestions=bool(fragment["isObsoleteSuggestions"]),
            is_prediction=bool(fragment["isPrediction"]),
        ))
    if kind is ValueKind.MOTION_TRACE:
        return LogValue(kind, MotionTrace(
            action=MotionAction(fragment["action"]),
            down_time=int(fragment["downTime"]),
            event_time=int(fragment["eventTime"]),
            pointer_id=int(fragment.get("pointerId", 0)),
            samples=tuple(
                MotionSample(
                    time=int(s["time"]),
                    x=float(s["x"]),
                    y=float(s["y"]),
                    pressure=float(s["pressure"]),
                    size=float(s["size"]),
                )
                for s in fragment["samples"]
            ),
        ))
    if kind is ValueKind.CONFIGURATION_SNAPSHOT:
        return LogValue(kind, ConfigurationSnapshot.from_mapping(fragment))
    raise ValueError(f"unknown value kind {kind!r}")


def infer_kind(fragment: Any) -> ValueKind:
    """
    Guess the value kind of a JSON fragment from its structure.

    An empty list carries no shape information and is read as an
    empty completion list; pass an explicit kind to disambiguate.
    """
    if fragment is None:
        return ValueKind.NULL
    if isinstance(fragment, bool):
        return ValueKind.BOOLEAN
    if isinstance(fragment, int):
        return ValueKind.INTEGER
    if isinstance(fragment, float):
        return ValueKind.FLOAT
    if isinstance(fragment, str):
        return ValueKind.TEXT
    if isinstance(fragment, list):
        if fragment and isinstance(fragment[0], Mapping) and "code" in fragment[0]:
            return ValueKind.KEY_LAYOUT
        return ValueKind.COMPLETION_LIST
    if isinstance(fragment, Mapping):
        if "suggestedWords" in fragment:
            return ValueKind.SUGGESTION_LIST
        if "samples" in fragment and "action" in fragment:
            return ValueKind.MOTION_TRACE
        return ValueKind.CONFIGURATION_SNAPSHOT
    raise ValueError(f"cannot infer value kind of {type(fragment).__name__}")
