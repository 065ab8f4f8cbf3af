"""
Settings Snapshot

SettingsValues is an immutable, validated snapshot of everything the
research log and its host read from configuration. A new snapshot is
built on every change; holders of an old one are never affected.

Numeric settings use a negative stored value to mean "use the resource
default", as do missing keys.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from pydantic import BaseModel, ConfigDict, Field

from ..contracts.values import ConfigurationSnapshot
from .source import ConfigurationSource

logger = logging.getLogger(__name__)

PREF_AUTO_CAP = "auto_cap"
PREF_VIBRATE_ON = "vibrate_on"
PREF_SOUND_ON = "sound_on"
PREF_GESTURE_INPUT = "gesture_input"
PREF_KEY_LONGPRESS_TIMEOUT = "pref_key_longpress_timeout"
PREF_VIBRATION_DURATION_SETTINGS = "pref_vibration_duration_settings"
PREF_KEYPRESS_SOUND_VOLUME = "pref_keypress_sound_volume"
PREF_KEY_PREVIEW_POPUP_DISMISS_DELAY = "pref_key_preview_popup_dismiss_delay"
PREF_USABILITY_STUDY_MODE = "usability_study_mode"
PREF_RESEARCH_LOGGER_ENABLED = "research_logger_enabled"
PREF_RESEARCH_LOGGER_INCLUDE_PRIVATE_DATA = "research_logger_include_private_data"


@dataclass(frozen=True)
class ResourceDefaults:
    """Fallback values used when a setting is unset or asks for the default."""
    key_longpress_timeout_ms: int = 300
    keypress_vibration_duration_ms: int = 5
    keypress_sound_volume: float = 0.2
    key_preview_popup_dismiss_delay_ms: int = 70
    auto_cap: bool = True
    vibrate_on: bool = True
    sound_on: bool = False
    gesture_input_enabled: bool = True
    usability_study_mode: bool = True
    research_logging_enabled: bool = False
    include_private_data: bool = False


# =============================================================================
# READERS (one per setting)
# =============================================================================

def _invalid(key: str, error: Exception, fallback) -> None:
    logger.warning("Invalid value for setting %s (%s); using %r", key, error, fallback)


def _read_bool(source: ConfigurationSource, key: str, default: bool) -> bool:
    try:
        return source.get_bool(key, default)
    except (TypeError, ValueError) as e:
        _invalid(key, e, default)
        return default


def read_key_longpress_timeout(source: ConfigurationSource, defaults: ResourceDefaults) -> int:
    fallback = defaults.key_longpress_timeout_ms
    try:
        ms = source.get_int(PREF_KEY_LONGPRESS_TIMEOUT, -1)
    except (TypeError, ValueError) as e:
        _invalid(PREF_KEY_LONGPRESS_TIMEOUT, e, fallback)
        return fallback
    return ms if ms >= 0 else fallback


def read_keypress_vibration_duration(source: ConfigurationSource, defaults: ResourceDefaults) -> int:
    fallback = defaults.keypress_vibration_duration_ms
    try:
        ms = source.get_int(PREF_VIBRATION_DURATION_SETTINGS, -1)
    except (TypeError, ValueError) as e:
        _invalid(PREF_VIBRATION_DURATION_SETTINGS, e, fallback)
        return fallback
    return ms if ms >= 0 else fallback


def read_keypress_sound_volume(source: ConfigurationSource, defaults: ResourceDefaults) -> float:
    fallback = defaults.keypress_sound_volume
    try:
        volume = source.get_float(PREF_KEYPRESS_SOUND_VOLUME, -1.0)
    except (TypeError, ValueError) as e:
        _invalid(PREF_KEYPRESS_SOUND_VOLUME, e, fallback)
        return fallback
    return volume if volume >= 0 else fallback


def read_key_preview_popup_dismiss_delay(source: ConfigurationSource, defaults: ResourceDefaults) -> int:
    """Stored as a string by the settings screen."""
    fallback = defaults.key_preview_popup_dismiss_delay_ms
    try:
        return int(source.get_string(PREF_KEY_PREVIEW_POPUP_DISMISS_DELAY, str(fallback)))
    except (TypeError, ValueError) as e:
        _invalid(PREF_KEY_PREVIEW_POPUP_DISMISS_DELAY, e, fallback)
        return fallback


def read_usability_study_mode(source: ConfigurationSource, defaults: ResourceDefaults) -> bool:
    return _read_bool(source, PREF_USABILITY_STUDY_MODE, defaults.usability_study_mode)


def read_include_private_data(source: ConfigurationSource, defaults: ResourceDefaults) -> bool:
    return _read_bool(source, PREF_RESEARCH_LOGGER_INCLUDE_PRIVATE_DATA, defaults.include_private_data)


def read_research_logging_enabled(source: ConfigurationSource, defaults: ResourceDefaults) -> bool:
    return _read_bool(source, PREF_RESEARCH_LOGGER_ENABLED, defaults.research_logging_enabled)


# =============================================================================
# SNAPSHOT
# =============================================================================

class SettingsValues(BaseModel):
    """Immutable settings snapshot handed to dependent components."""
    model_config = ConfigDict(frozen=True)

    auto_cap: bool
    vibrate_on: bool
    sound_on: bool
    gesture_input_enabled: bool
    key_longpress_timeout_ms: int = Field(ge=0)
    keypress_vibration_duration_ms: int = Field(ge=0)
    keypress_sound_volume: float = Field(ge=0.0)
    key_preview_popup_dismiss_delay_ms: int = Field(ge=0)
    usability_study_mode: bool
    research_logging_enabled: bool
    include_private_data: bool

    @classmethod
    def load(cls, source: ConfigurationSource, defaults: ResourceDefaults) -> SettingsValues:
        return cls(
            auto_cap=_read_bool(source, PREF_AUTO_CAP, defaults.auto_cap),
            vibrate_on=_read_bool(source, PREF_VIBRATE_ON, defaults.vibrate_on),
            sound_on=_read_bool(source, PREF_SOUND_ON, defaults.sound_on),
            gesture_input_enabled=_read_bool(source, PREF_GESTURE_INPUT, defaults.gesture_input_enabled),
            key_longpress_timeout_ms=read_key_longpress_timeout(source, defaults),
            keypress_vibration_duration_ms=read_keypress_vibration_duration(source, defaults),
            keypress_sound_volume=read_keypress_sound_volume(source, defaults),
            key_preview_popup_dismiss_delay_ms=max(0, read_key_preview_popup_dismiss_delay(source, defaults)),
            usability_study_mode=read_usability_study_mode(source, defaults),
            research_logging_enabled=read_research_logging_enabled(source, defaults),
            include_private_data=read_include_private_data(source, defaults),
        )

    def to_configuration_snapshot(self) -> ConfigurationSnapshot:
        """Snapshot as a loggable value (field declaration order)."""
        return ConfigurationSnapshot.from_mapping(self.model_dump())
