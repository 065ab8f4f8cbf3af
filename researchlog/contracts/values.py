"""
Argument Value Contracts

Log statement arguments are a closed set of shapes. A raw Python object is
classified exactly once, when it enters a LogUnit, into a LogValue carrying
an explicit ValueKind tag. Everything downstream (encoder, decoder) switches
on the tag and never probes runtime types again.

RECOGNIZED SHAPES:
==================
- primitives: text, integer, float, boolean, null
- completion list: candidates offered by the host application
- key layout: snapshot of keyboard keys and their geometry
- suggestion list: the suggestion strip contents
- motion trace: one touch event and its historical samples
- configuration snapshot: ordered key/value settings dump

Anything else becomes UNSUPPORTED and is serialized as null.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union
import numbers


Primitive = Union[str, int, float, bool, None]


class ValueKind(Enum):
    """Closed set of argument shapes a statement may carry."""
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    COMPLETION_LIST = "completion_list"
    KEY_LAYOUT = "key_layout"
    SUGGESTION_LIST = "suggestion_list"
    MOTION_TRACE = "motion_trace"
    CONFIGURATION_SNAPSHOT = "configuration_snapshot"
    NULL = "null"
    UNSUPPORTED = "unsupported"


# =============================================================================
# STRUCTURED SHAPES
# =============================================================================

@dataclass(frozen=True)
class CompletionInfo:
    """One completion candidate supplied by the editor."""
    position: int
    text: str
    label: Optional[str] = None
    id: int = 0


@dataclass(frozen=True)
class KeyInfo:
    """A single key of the current keyboard layout."""
    code: int
    label: Optional[str]
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class SuggestedWordInfo:
    word: str
    score: int
    kind: int = 0


@dataclass(frozen=True)
class SuggestedWords:
    """
    Contents of the suggestion strip at one point in time.

    The flags mirror what the suggestion engine knew when it produced
    the list, so a researcher can tell autocorrections from predictions.
    """
    words: Tuple[SuggestedWordInfo, ...] = field(default_factory=tuple)
    typed_word_valid: bool = False
    will_auto_correct: bool = False
    is_punctuation_suggestions: bool = False
    is_obsolete_suggestions: bool = False
    is_prediction: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'words', tuple(self.words))


class MotionAction(Enum):
    DOWN = "down"
    UP = "up"
    MOVE = "move"
    CANCEL = "cancel"
    POINTER_DOWN = "pointer_down"
    POINTER_UP = "pointer_up"


@dataclass(frozen=True)
class MotionSample:
    time: int
    x: float
    y: float
    pressure: float = 1.0
    size: float = 0.0


@dataclass(frozen=True)
class MotionTrace:
    """A touch event together with its batched historical samples."""
    action: MotionAction
    down_time: int
    event_time: int
    pointer_id: int = 0
    samples: Tuple[MotionSample, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'samples', tuple(self.samples))


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """
    Ordered key/value dump of configuration at logging time.

    Values are restricted to primitives; anything else is stored
    as its string form.
    """
    entries: Tuple[Tuple[str, Primitive], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(
            self, 'entries',
            tuple((str(k), _as_primitive(v)) for k, v in self.entries)
        )

    @staticmethod
    def from_mapping(mapping: Mapping[str, Any]) -> ConfigurationSnapshot:
        return ConfigurationSnapshot(entries=tuple(mapping.items()))

    def as_dict(self) -> dict:
        return dict(self.entries)


def _as_primitive(value: Any) -> Primitive:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


# =============================================================================
# TAGGED VALUE
# =============================================================================

@dataclass(frozen=True)
class LogValue:
    """
    An argument value tagged with its shape.

    For UNSUPPORTED values the payload is the fully qualified type name of
    the rejected object, never the object itself.
    """
    kind: ValueKind
    payload: Any = None

    @staticmethod
    def of(obj: Any) -> LogValue:
        """Classify a raw object captured by the input layer."""
        if isinstance(obj, LogValue):
            return obj
        if obj is None:
            return LogValue(ValueKind.NULL)
        if isinstance(obj, str):
            return LogValue(ValueKind.TEXT, obj)
        # bool is an int subclass, test it first
        if isinstance(obj, bool):
            return LogValue(ValueKind.BOOLEAN, obj)
        if isinstance(obj, numbers.Integral):
            return LogValue(ValueKind.INTEGER, obj)
        # Decimal is not registered as Real
        if isinstance(obj, (numbers.Real, Decimal)):
            return LogValue(ValueKind.FLOAT, obj)
        if isinstance(obj, SuggestedWords):
            return LogValue(ValueKind.SUGGESTION_LIST, obj)
        if isinstance(obj, MotionTrace):
            return LogValue(ValueKind.MOTION_TRACE, obj)
        if isinstance(obj, ConfigurationSnapshot):
            return LogValue(ValueKind.CONFIGURATION_SNAPSHOT, obj)
        if isinstance(obj, Mapping):
            return LogValue(ValueKind.CONFIGURATION_SNAPSHOT, ConfigurationSnapshot.from_mapping(obj))
        if isinstance(obj, (list, tuple)) and obj:
            if all(isinstance(item, CompletionInfo) for item in obj):
                return LogValue(ValueKind.COMPLETION_LIST, tuple(obj))
            if all(isinstance(item, KeyInfo) for item in obj):
                return LogValue(ValueKind.KEY_LAYOUT, tuple(obj))
        return LogValue.unsupported(obj)

    @staticmethod
    def unsupported(obj: Any) -> LogValue:
        cls = type(obj)
        return LogValue(ValueKind.UNSUPPORTED, f"{cls.__module__}.{cls.__qualname__}")

    @staticmethod
    def completion_list(items) -> LogValue:
        """Tag a (possibly empty) sequence as a completion list."""
        return LogValue(ValueKind.COMPLETION_LIST, tuple(items))

    @staticmethod
    def key_layout(keys) -> LogValue:
        """Tag a (possibly empty) sequence as a key layout."""
        return LogValue(ValueKind.KEY_LAYOUT, tuple(keys))

    @property
    def is_supported(self) -> bool:
        return self.kind is not ValueKind.UNSUPPORTED
