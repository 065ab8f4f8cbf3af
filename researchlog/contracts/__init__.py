"""
Contracts Module

Immutable types shared by the capture, buffering, encoding and storage
layers of the research log. No layer may import implementation details
from another layer; they exchange only these types.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Recoverable failures are explicit Result values
3. Argument values are a closed tagged set (see values.py)
"""

from .base import Error, ErrorCode, Result
from .statement import LoggedEvent, StatementDescriptor
from .values import (
    CompletionInfo, ConfigurationSnapshot, KeyInfo, LogValue, MotionAction,
    MotionSample, MotionTrace, SuggestedWordInfo, SuggestedWords, ValueKind,
)

__all__ = [
    'Error',
    'ErrorCode',
    'Result',
    'LoggedEvent',
    'StatementDescriptor',
    'CompletionInfo',
    'ConfigurationSnapshot',
    'KeyInfo',
    'LogValue',
    'MotionAction',
    'MotionSample',
    'MotionTrace',
    'SuggestedWordInfo',
    'SuggestedWords',
    'ValueKind',
]
