"""
Configuration Source Interface

Read-only key/value lookups with a caller supplied default, plus change
notification. The real store lives outside this package; the in-memory
implementation here backs tests and embedding hosts without one.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging
import threading

logger = logging.getLogger(__name__)

ChangeListener = Callable[["ConfigurationSource", str], None]


class ConfigurationSource:
    """
    Abstract configuration store.

    A stored value of the wrong type raises TypeError from the typed
    getters; readers decide how to recover.
    """

    def get_bool(self, key: str, default: bool) -> bool:
        raise NotImplementedError

    def get_int(self, key: str, default: int) -> int:
        raise NotImplementedError

    def get_float(self, key: str, default: float) -> float:
        raise NotImplementedError

    def get_string(self, key: str, default: Optional[str]) -> Optional[str]:
        raise NotImplementedError

    def contains(self, key: str) -> bool:
        raise NotImplementedError

    def register_listener(self, listener: ChangeListener) -> None:
        raise NotImplementedError

    def unregister_listener(self, listener: ChangeListener) -> None:
        raise NotImplementedError


class DictConfigurationSource(ConfigurationSource):
    """In-memory configuration store that notifies listeners on every change."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._lock = threading.Lock()
        self._values: Dict[str, Any] = dict(values or {})
        self._listeners: List[ChangeListener] = []

    def _get(self, key: str, default: Any, expected: tuple) -> Any:
        with self._lock:
            if key not in self._values:
                return default
            value = self._values[key]
        if not isinstance(value, expected):
            raise TypeError(
                f"Setting {key!r} holds {type(value).__name__}, "
                f"expected {' or '.join(t.__name__ for t in expected)}"
            )
        return value

    def get_bool(self, key: str, default: bool) -> bool:
        return self._get(key, default, (bool,))

    def get_int(self, key: str, default: int) -> int:
        value = self._get(key, default, (int,))
        if isinstance(value, bool):
            raise TypeError(f"Setting {key!r} holds bool, expected int")
        return value

    def get_float(self, key: str, default: float) -> float:
        value = self._get(key, default, (int, float))
        if isinstance(value, bool):
            raise TypeError(f"Setting {key!r} holds bool, expected float")
        return float(value)

    def get_string(self, key: str, default: Optional[str]) -> Optional[str]:
        return self._get(key, default, (str,))

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value
        self._notify(key)

    def remove(self, key: str) -> None:
        with self._lock:
            if key not in self._values:
                return
            del self._values[key]
        self._notify(key)

    def register_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unregister_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, key: str) -> None:
        # Listeners run outside the lock so they may read the source.
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self, key)
            except Exception:
                # Failures stay with the listener; the writer and later listeners proceed.
                logger.exception("Configuration listener %r failed for %s", listener, key)
