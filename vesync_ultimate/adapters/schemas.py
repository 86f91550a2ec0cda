"""Boundary schemas for device status payloads.

Each schema validates the raw payload with voluptuous, maps the fields it
knows onto :class:`~vesync_ultimate.state.DeviceState` names and collects
every other top-level key into the ``extras`` bucket.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from ..const import NO_LEVEL_SENTINEL
from ..state import PowerStatus, TimerState

Converter = Callable[[Any], Any]

_MISSING = object()

_ENVELOPE_KEYS = frozenset({"code", "msg", "traceId", "module", "stacktrace"})

_INT = vol.Any(None, int)
_NUMBER = vol.Any(None, int, float)
_STR = vol.Any(None, str)
_BOOL = vol.Any(None, bool, vol.In([0, 1]))
_SWITCH = vol.Any(None, vol.In([0, 1]))
_ON_OFF = vol.Any(None, vol.In(["on", "off"]))


def _identity(value: Any) -> Any:
    return value


def _as_int(value: Any) -> int:
    return int(value)


def _as_bool(value: Any) -> bool:
    return bool(value)


def _on_off_bool(value: Any) -> bool:
    return value == "on"


def _power_from_bool(value: Any) -> PowerStatus:
    return PowerStatus.ON if value else PowerStatus.OFF


def _power_from_status(value: Any) -> PowerStatus:
    return PowerStatus.ON if value == "on" else PowerStatus.OFF


def _level(value: Any) -> int:
    numeric = int(value)
    return 0 if numeric == NO_LEVEL_SENTINEL else numeric


def _filter_life(value: Any) -> int:
    if isinstance(value, Mapping):
        return int(value.get("percent") or 0)
    return int(value)


def _timer(value: Any) -> TimerState | None:
    remaining = int(value)
    if remaining <= 0:
        return None
    return TimerState(remaining_seconds=remaining)


def _work_mode(value: Any) -> str:
    return "auto" if value == "autoPro" else str(value)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Map a payload path onto a state field."""

    path: tuple[str, ...]
    field: str
    convert: Converter = _identity


def _spec(path: str, field: str, convert: Converter = _identity) -> FieldSpec:
    return FieldSpec(tuple(path.split(".")), field, convert)


@dataclass(frozen=True)
class ResponseSchema:
    """Validated mapping from a status payload to state changes."""

    name: str
    validator: vol.Schema
    fields: tuple[FieldSpec, ...]

    def parse(self, payload: Mapping[str, Any] | None) -> dict[str, Any]:
        """Return state changes for ``payload``.

        Raises :class:`voluptuous.Invalid` when the payload is missing or does
        not match the schema.
        """

        if payload is None:
            raise vol.Invalid(f"{self.name}: status payload missing")
        validated = self.validator(dict(payload))
        changes: dict[str, Any] = {}
        for spec in self.fields:
            value = _dig(validated, spec.path)
            if value is _MISSING or value is None:
                continue
            changes[spec.field] = spec.convert(value)
        known = {spec.path[0] for spec in self.fields} | _ENVELOPE_KEYS
        changes["extras"] = {
            key: value for key, value in validated.items() if key not in known
        }
        return changes


def _dig(payload: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = payload
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _nested(schema: dict[Any, Any]) -> vol.Any:
    return vol.Any(None, vol.Schema(schema, extra=vol.ALLOW_EXTRA))


LEGACY_PURIFIER = ResponseSchema(
    name="legacy purifier",
    validator=vol.Schema(
        {
            vol.Required("deviceStatus"): vol.In(["on", "off"]),
            vol.Optional("mode"): _STR,
            vol.Optional("level"): _INT,
            vol.Optional("filterLife"): vol.Any(
                None, int, vol.Schema({"percent": int}, extra=vol.ALLOW_EXTRA)
            ),
            vol.Optional("screenStatus"): _ON_OFF,
            vol.Optional("childLock"): _ON_OFF,
            vol.Optional("airQuality"): _STR,
            vol.Optional("activeTime"): _INT,
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("deviceStatus", "power", _power_from_status),
        _spec("mode", "mode"),
        _spec("level", "level", _level),
        _spec("filterLife", "filter_life", _filter_life),
        _spec("screenStatus", "display_on", _on_off_bool),
        _spec("childLock", "child_lock_on", _on_off_bool),
        _spec("airQuality", "air_quality_label"),
        _spec("activeTime", "active_time", _as_int),
    ),
)

BYPASS_V1_PURIFIER = ResponseSchema(
    name="bypass v1 purifier",
    validator=vol.Schema(
        {
            vol.Required("enabled"): bool,
            vol.Optional("mode"): _STR,
            vol.Optional("level"): _INT,
            vol.Optional("filter_life"): _INT,
            vol.Optional("display"): _BOOL,
            vol.Optional("child_lock"): _BOOL,
            vol.Optional("air_quality"): _INT,
            vol.Optional("air_quality_value"): _INT,
            vol.Optional("night_light"): vol.Any(None, vol.In(["on", "off", "dim"])),
            vol.Optional("configuration"): _nested(
                {
                    vol.Optional("auto_preference"): _nested(
                        {vol.Optional("type"): _STR, vol.Optional("room_size"): _INT}
                    )
                }
            ),
            vol.Optional("extension"): _nested({vol.Optional("timer_remain"): _INT}),
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("enabled", "power", _power_from_bool),
        _spec("mode", "mode"),
        _spec("level", "level", _level),
        _spec("filter_life", "filter_life", _as_int),
        _spec("display", "display_on", _as_bool),
        _spec("child_lock", "child_lock_on", _as_bool),
        _spec("air_quality", "air_quality", _as_int),
        _spec("air_quality_value", "air_quality_value", _as_int),
        _spec("night_light", "night_light"),
        _spec("configuration.auto_preference.type", "auto_preference"),
        _spec("configuration.auto_preference.room_size", "room_size", _as_int),
        _spec("extension.timer_remain", "timer", _timer),
    ),
)

BYPASS_V1_HUMIDIFIER = ResponseSchema(
    name="bypass v1 humidifier",
    validator=vol.Schema(
        {
            vol.Required("enabled"): bool,
            vol.Optional("mode"): _STR,
            vol.Optional("humidity"): _INT,
            vol.Optional("mist_virtual_level"): _INT,
            vol.Optional("warm_enabled"): _BOOL,
            vol.Optional("warm_level"): _INT,
            vol.Optional("water_lacks"): _BOOL,
            vol.Optional("water_tank_lifted"): _BOOL,
            vol.Optional("display"): _BOOL,
            vol.Optional("indicator_light_switch"): _BOOL,
            vol.Optional("automatic_stop_reach_target"): _BOOL,
            vol.Optional("night_light_brightness"): _INT,
            vol.Optional("configuration"): _nested(
                {
                    vol.Optional("auto_target_humidity"): _INT,
                    vol.Optional("automatic_stop"): _BOOL,
                }
            ),
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("enabled", "power", _power_from_bool),
        _spec("mode", "mode"),
        _spec("humidity", "humidity", _as_int),
        _spec("mist_virtual_level", "level", _level),
        _spec("warm_enabled", "warm_enabled", _as_bool),
        _spec("warm_level", "warm_level", _as_int),
        _spec("water_lacks", "water_lacks", _as_bool),
        _spec("water_tank_lifted", "water_tank_lifted", _as_bool),
        _spec("display", "display_on", _as_bool),
        _spec("indicator_light_switch", "display_on", _as_bool),
        _spec("automatic_stop_reach_target", "automatic_stop_reached", _as_bool),
        _spec("night_light_brightness", "night_light_brightness", _as_int),
        _spec("configuration.auto_target_humidity", "target_humidity", _as_int),
        _spec("configuration.automatic_stop", "automatic_stop", _as_bool),
    ),
)

BYPASS_V2_PURIFIER = ResponseSchema(
    name="bypass v2 purifier",
    validator=vol.Schema(
        {
            vol.Required("powerSwitch"): vol.In([0, 1]),
            vol.Optional("workMode"): _STR,
            vol.Optional("fanSpeedLevel"): _INT,
            vol.Optional("manualSpeedLevel"): _INT,
            vol.Optional("PM25"): _INT,
            vol.Optional("AQLevel"): _INT,
            vol.Optional("PM1"): _INT,
            vol.Optional("PM10"): _INT,
            vol.Optional("AQPercent"): _INT,
            vol.Optional("filter_life"): _INT,
            vol.Optional("filterLifePercent"): _INT,
            vol.Optional("childLockSwitch"): _SWITCH,
            vol.Optional("screenSwitch"): _SWITCH,
            vol.Optional("lightDetectionSwitch"): _SWITCH,
            vol.Optional("environmentLightState"): _SWITCH,
            vol.Optional("autoPreference"): _nested(
                {
                    vol.Optional("autoPreferenceType"): _STR,
                    vol.Optional("roomSize"): _INT,
                }
            ),
            vol.Optional("timerRemain"): _INT,
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("powerSwitch", "power", _power_from_bool),
        _spec("workMode", "mode"),
        _spec("fanSpeedLevel", "level", _level),
        _spec("manualSpeedLevel", "manual_level", _level),
        _spec("PM25", "air_quality_value", _as_int),
        _spec("AQLevel", "air_quality", _as_int),
        _spec("PM1", "pm1", _as_int),
        _spec("PM10", "pm10", _as_int),
        _spec("AQPercent", "aq_percent", _as_int),
        _spec("filter_life", "filter_life", _as_int),
        _spec("filterLifePercent", "filter_life", _as_int),
        _spec("childLockSwitch", "child_lock_on", _as_bool),
        _spec("screenSwitch", "display_on", _as_bool),
        _spec("lightDetectionSwitch", "light_detection", _as_bool),
        _spec("environmentLightState", "environment_light", _as_bool),
        _spec("autoPreference.autoPreferenceType", "auto_preference"),
        _spec("autoPreference.roomSize", "room_size", _as_int),
        _spec("timerRemain", "timer", _timer),
    ),
)

BYPASS_V2_TOWER_FAN = ResponseSchema(
    name="bypass v2 tower fan",
    validator=vol.Schema(
        {
            vol.Required("powerSwitch"): vol.In([0, 1]),
            vol.Optional("workMode"): _STR,
            vol.Optional("fanSpeedLevel"): _INT,
            vol.Optional("manualSpeedLevel"): _INT,
            vol.Optional("screenSwitch"): _SWITCH,
            vol.Optional("oscillationSwitch"): _SWITCH,
            vol.Optional("muteSwitch"): _SWITCH,
            vol.Optional("timerRemain"): _INT,
            vol.Optional("temperature"): _NUMBER,
            vol.Optional("humidity"): _INT,
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("powerSwitch", "power", _power_from_bool),
        _spec("workMode", "mode"),
        _spec("fanSpeedLevel", "level", _level),
        _spec("manualSpeedLevel", "manual_level", _level),
        _spec("screenSwitch", "display_on", _as_bool),
        _spec("oscillationSwitch", "oscillation", _as_bool),
        _spec("muteSwitch", "mute", _as_bool),
        _spec("timerRemain", "timer", _timer),
        _spec("temperature", "temperature"),
        _spec("humidity", "humidity", _as_int),
    ),
)

BYPASS_V2_HUMIDIFIER = ResponseSchema(
    name="bypass v2 humidifier",
    validator=vol.Schema(
        {
            vol.Required("powerSwitch"): vol.In([0, 1]),
            vol.Optional("workMode"): _STR,
            vol.Optional("humidity"): _INT,
            vol.Optional("targetHumidity"): _INT,
            vol.Optional("virtualLevel"): _INT,
            vol.Optional("waterLacksState"): _SWITCH,
            vol.Optional("waterTankLifted"): _SWITCH,
            vol.Optional("screenSwitch"): _SWITCH,
            vol.Optional("nightLightBrightness"): _INT,
            vol.Optional("autoStopSwitch"): _SWITCH,
            vol.Optional("autoStopState"): _SWITCH,
            vol.Optional("temperature"): _NUMBER,
            vol.Optional("filterLifePercent"): _INT,
            vol.Optional("dryingMode"): _nested(
                {vol.Optional("autoDryingSwitch"): _SWITCH}
            ),
            vol.Optional("timerRemain"): _INT,
        },
        extra=vol.ALLOW_EXTRA,
    ),
    fields=(
        _spec("powerSwitch", "power", _power_from_bool),
        _spec("workMode", "mode", _work_mode),
        _spec("humidity", "humidity", _as_int),
        _spec("targetHumidity", "target_humidity", _as_int),
        _spec("virtualLevel", "level", _level),
        _spec("waterLacksState", "water_lacks", _as_bool),
        _spec("waterTankLifted", "water_tank_lifted", _as_bool),
        _spec("screenSwitch", "display_on", _as_bool),
        _spec("nightLightBrightness", "night_light_brightness", _as_int),
        _spec("autoStopSwitch", "automatic_stop", _as_bool),
        _spec("autoStopState", "automatic_stop_reached", _as_bool),
        _spec("temperature", "temperature"),
        _spec("filterLifePercent", "filter_life", _as_int),
        _spec("dryingMode.autoDryingSwitch", "drying", _as_bool),
        _spec("timerRemain", "timer", _timer),
    ),
)


def timer_id(payload: Mapping[str, Any] | None) -> int | None:
    """Return the timer id echoed by a timer creation response."""

    if not isinstance(payload, Mapping):
        return None
    value = payload.get("id")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
