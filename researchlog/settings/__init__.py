"""
Settings Layer

RESPONSIBILITY: Turn a configuration source into immutable snapshots
OUTPUTS: SettingsValues, pushed to subscribers on every change

BOUNDARY ENFORCEMENT:
=====================
- No process-wide instance; whoever needs settings is handed a Settings
  object or, better, the current SettingsValues
- Snapshots are never mutated; a change produces a new snapshot
"""

from __future__ import annotations
from typing import Callable, List, Optional
import logging
import threading

from .source import ConfigurationSource, DictConfigurationSource
from .values import ResourceDefaults, SettingsValues

logger = logging.getLogger(__name__)

SettingsSubscriber = Callable[[SettingsValues], None]


class Settings:
    """
    Holds the current SettingsValues for one configuration source.

    Reloads on every change notification and hands the new snapshot to
    each subscriber, in subscription order.
    """

    def __init__(self, source: ConfigurationSource, defaults: Optional[ResourceDefaults] = None):
        self._source = source
        self._defaults = defaults if defaults is not None else ResourceDefaults()
        self._lock = threading.Lock()
        self._reload_lock = threading.RLock()
        self._subscribers: List[SettingsSubscriber] = []
        self._current = SettingsValues.load(source, self._defaults)
        source.register_listener(self._on_configuration_changed)

    @property
    def current(self) -> SettingsValues:
        with self._lock:
            return self._current

    @property
    def defaults(self) -> ResourceDefaults:
        return self._defaults

    def subscribe(self, subscriber: SettingsSubscriber) -> SettingsValues:
        """Register subscriber; returns the snapshot current at that moment."""
        with self._lock:
            self._subscribers.append(subscriber)
            return self._current

    def unsubscribe(self, subscriber: SettingsSubscriber) -> None:
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def reload(self) -> SettingsValues:
        # One reload at a time; an older load never replaces a newer one.
        with self._reload_lock:
            values = SettingsValues.load(self._source, self._defaults)
            with self._lock:
                self._current = values
                subscribers = list(self._subscribers)
            for subscriber in subscribers:
                subscriber(values)
            return values

    def _on_configuration_changed(self, source: ConfigurationSource, key: str) -> None:
        logger.debug("Setting %s changed; reloading", key)
        self.reload()

    def close(self) -> None:
        self._source.unregister_listener(self._on_configuration_changed)
        with self._lock:
            self._subscribers.clear()


__all__ = [
    'ConfigurationSource',
    'DictConfigurationSource',
    'ResourceDefaults',
    'Settings',
    'SettingsValues',
]
