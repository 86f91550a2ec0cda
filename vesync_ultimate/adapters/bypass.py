"""Builders for the ``bypassV2`` endpoint used by current devices.

Two payload dialects travel through the same endpoint: the snake_case one of
the Core purifiers and Classic/LUH humidifiers (bypass-v1) and the camelCase
one of the Vital, EverestAir, tower fan, OasisMist 1000S and Superior 6000S
lines (bypass-v2). The Vital line reuses the bypass-v2 builders but accepts
non-zero inner codes on a fixed set of writes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..auth import bypass_headers
from ..capabilities import DeviceFamily, Quirk, Variant
from ..const import BYPASS_V2_PATH, DEFAULT_ROOM_SIZE
from ..errors import FeatureUnsupported
from ..state import PowerStatus, TimerState
from .base import (
    Builder,
    BuildContext,
    Operation,
    Request,
    Step,
    VariantTable,
    on_off,
    switch,
)
from .schemas import (
    BYPASS_V1_HUMIDIFIER,
    BYPASS_V1_PURIFIER,
    BYPASS_V2_HUMIDIFIER,
    BYPASS_V2_PURIFIER,
    BYPASS_V2_TOWER_FAN,
    timer_id,
)

_STATUS_METHODS = {
    DeviceFamily.PURIFIER: "getPurifierStatus",
    DeviceFamily.HUMIDIFIER: "getHumidifierStatus",
    DeviceFamily.TOWER_FAN: "getTowerFanStatus",
}

_MODE_METHODS = {
    DeviceFamily.PURIFIER: "setPurifierMode",
    DeviceFamily.HUMIDIFIER: "setHumidityMode",
    DeviceFamily.TOWER_FAN: "setTowerFanMode",
}

_V1_SCHEMAS = {
    DeviceFamily.PURIFIER: BYPASS_V1_PURIFIER,
    DeviceFamily.HUMIDIFIER: BYPASS_V1_HUMIDIFIER,
}

_V2_SCHEMAS = {
    DeviceFamily.PURIFIER: BYPASS_V2_PURIFIER,
    DeviceFamily.HUMIDIFIER: BYPASS_V2_HUMIDIFIER,
    DeviceFamily.TOWER_FAN: BYPASS_V2_TOWER_FAN,
}


def _request(ctx: BuildContext, step: Step) -> Request:
    body = ctx.session.request_body("bypassV2")
    body.update(
        {
            "cid": ctx.identity.cid,
            "configModule": ctx.identity.config_module,
            "payload": {
                "method": step.method,
                "source": "APP",
                "data": dict(step.data),
            },
        }
    )
    return Request(
        path=BYPASS_V2_PATH,
        method="post",
        body=body,
        headers=bypass_headers(),
    )


def _family_lookup(
    table: Mapping[DeviceFamily, Any], ctx: BuildContext, feature: str
) -> Any:
    try:
        return table[ctx.profile.family]
    except KeyError as exc:
        raise FeatureUnsupported(ctx.identity.device_type, feature) from exc


def _power_changes(on: bool) -> dict[str, Any]:
    return {"power": PowerStatus.ON if on else PowerStatus.OFF}


def _timer_step(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    seconds = int(args["hours"] * 3600)

    def _parse(payload: Mapping[str, Any] | None) -> dict[str, Any]:
        return {
            "timer": TimerState(
                remaining_seconds=seconds, action="off", timer_id=timer_id(payload)
            )
        }

    return Step(
        method="addTimer",
        data={"action": "off", "total": seconds},
        parse=_parse,
    )


def _timer_clear_step(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    timer = ctx.state.timer
    data = {"id": timer.timer_id} if timer and timer.timer_id is not None else {}
    return Step(method="deleteTimer", data=data, changes={"timer": None})


# bypass-v1 ---------------------------------------------------------------


def _v1_details(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    schema = _family_lookup(_V1_SCHEMAS, ctx, "status reads")
    return Step(method=_STATUS_METHODS[ctx.profile.family], parse=schema.parse)


def _v1_power(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setSwitch",
        data={"enabled": on, "id": 0},
        changes=_power_changes(on),
    )


def _v1_level(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    level = args["level"]
    if ctx.profile.family is DeviceFamily.HUMIDIFIER:
        if ctx.profile.has_quirk(Quirk.MIST_LEVEL_METHOD):
            return Step(
                method="setMistLevel",
                data={"level": level},
                changes={"level": level},
            )
        return Step(
            method="setVirtualLevel",
            data={"id": 0, "level": level, "type": "mist"},
            changes={"level": level},
        )
    changes: dict[str, Any] = {"level": level, "manual_level": level}
    if "manual" in ctx.profile.modes:
        changes["mode"] = "manual"
    return Step(
        method="setLevel",
        data={"id": 0, "level": level, "mode": "manual", "type": "wind"},
        changes=changes,
    )


def _v1_mode(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    mode = args["mode"]
    method = _family_lookup(_MODE_METHODS, ctx, "modes")
    return Step(method=method, data={"mode": mode}, changes={"mode": mode})


def _v1_display(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    if ctx.profile.has_quirk(Quirk.INDICATOR_LIGHT_DISPLAY):
        return Step(
            method="setIndicatorLightSwitch",
            data={"enabled": on, "id": 0},
            changes={"display_on": on},
        )
    return Step(method="setDisplay", data={"state": on}, changes={"display_on": on})


def _v1_child_lock(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setChildLock", data={"state": on}, changes={"child_lock_on": on}
    )


def _v1_night_light(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    if ctx.profile.family is DeviceFamily.HUMIDIFIER:
        brightness = args["brightness"]
        return Step(
            method="setNightLightBrightness",
            data={"night_light_brightness": brightness},
            changes={"night_light_brightness": brightness},
        )
    mode = args["mode"]
    return Step(
        method="setNightLight",
        data={"night_light": mode},
        changes={"night_light": mode},
    )


def _v1_target_humidity(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    target = args["humidity"]
    return Step(
        method="setTargetHumidity",
        data={"target_humidity": target},
        changes={"target_humidity": target},
    )


def _v1_warm_level(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    level = args["level"]
    return Step(
        method="setLevel",
        data={"id": 0, "level": level, "type": "warm"},
        changes={"warm_level": level, "warm_enabled": True},
    )


def _v1_automatic_stop(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    enabled = args["enabled"]
    return Step(
        method="setAutomaticStop",
        data={"enabled": enabled},
        changes={"automatic_stop": enabled},
    )


# bypass-v2 ---------------------------------------------------------------


def _derived_mode_changes(ctx: BuildContext, mode: str) -> dict[str, Any]:
    """Return the visible level implied by entering ``mode``."""

    if ctx.profile.family is DeviceFamily.HUMIDIFIER:
        return {}
    if mode == "sleep":
        return {"level": 0}
    if mode == "turbo":
        return {"level": ctx.profile.max_level}
    if mode in ("manual", "normal") and ctx.state.manual_level in ctx.profile.levels:
        return {"level": ctx.state.manual_level}
    return {}


def _v2_details(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    schema = _family_lookup(_V2_SCHEMAS, ctx, "status reads")
    return Step(method=_STATUS_METHODS[ctx.profile.family], parse=schema.parse)


def _v2_power(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setSwitch",
        data={"powerSwitch": switch(on), "switchIdx": 0},
        changes=_power_changes(on),
    )


def _v2_level(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    level = args["level"]
    if ctx.profile.family is DeviceFamily.HUMIDIFIER:
        return Step(
            method="setVirtualLevel",
            data={"levelIdx": 0, "virtualLevel": level, "levelType": "mist"},
            changes={"level": level},
        )
    changes: dict[str, Any] = {"level": level, "manual_level": level}
    if "manual" in ctx.profile.modes:
        changes["mode"] = "manual"
    return Step(
        method="setLevel",
        data={"levelIdx": 0, "levelType": "wind", "manualSpeedLevel": level},
        changes=changes,
    )


def _v2_mode(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    mode = args["mode"]
    method = _family_lookup(_MODE_METHODS, ctx, "modes")
    wire_mode = mode
    if mode == "auto" and ctx.profile.has_quirk(Quirk.AUTO_PRO_MODE):
        wire_mode = "autoPro"
    changes = {"mode": mode, **_derived_mode_changes(ctx, mode)}
    return Step(method=method, data={"workMode": wire_mode}, changes=changes)


def _v2_display(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setDisplay",
        data={"screenSwitch": switch(on)},
        changes={"display_on": on},
    )


def _v2_child_lock(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setChildLock",
        data={"childLockSwitch": switch(on)},
        changes={"child_lock_on": on},
    )


def _v2_night_light(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    brightness = args["brightness"]
    data: dict[str, Any] = {"nightLightSwitch": switch(brightness > 0)}
    if brightness > 0:
        data["nightLightBrightness"] = brightness
    return Step(
        method="setNightLight",
        data=data,
        changes={
            "night_light_brightness": brightness,
            "night_light": on_off(brightness > 0),
        },
    )


def _v2_auto_preference(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    preference = args["preference"]
    room_size = args.get("room_size") or ctx.state.room_size or DEFAULT_ROOM_SIZE
    return Step(
        method="setAutoPreference",
        data={"autoPreference": preference, "roomSize": room_size},
        changes={"auto_preference": preference, "room_size": room_size},
    )


def _v2_light_detection(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setLightDetection",
        data={"lightDetectionSwitch": switch(on)},
        changes={"light_detection": on},
    )


def _v2_oscillation(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="setSwitch",
        data={"oscillationSwitch": switch(on), "switchIdx": 0},
        changes={"oscillation": on},
    )


def _v2_target_humidity(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    target = args["humidity"]
    return Step(
        method="setTargetHumidity",
        data={"targetHumidity": target},
        changes={"target_humidity": target},
    )


def _v2_automatic_stop(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    enabled = args["enabled"]
    return Step(
        method="setAutoStopSwitch",
        data={"autoStopSwitch": switch(enabled)},
        changes={"automatic_stop": enabled},
    )


def _v2_drying(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    enabled = args["enabled"]
    return Step(
        method="setDryingMode",
        data={"autoDryingSwitch": switch(enabled)},
        changes={"drying": enabled},
    )


_V1_BUILDERS: dict[Operation, Builder] = {
    Operation.DETAILS: _v1_details,
    Operation.POWER: _v1_power,
    Operation.LEVEL: _v1_level,
    Operation.MODE: _v1_mode,
    Operation.DISPLAY: _v1_display,
    Operation.CHILD_LOCK: _v1_child_lock,
    Operation.TIMER_SET: _timer_step,
    Operation.TIMER_CLEAR: _timer_clear_step,
    Operation.NIGHT_LIGHT: _v1_night_light,
    Operation.TARGET_HUMIDITY: _v1_target_humidity,
    Operation.WARM_LEVEL: _v1_warm_level,
    Operation.AUTOMATIC_STOP: _v1_automatic_stop,
}

_V2_BUILDERS: dict[Operation, Builder] = {
    Operation.DETAILS: _v2_details,
    Operation.POWER: _v2_power,
    Operation.LEVEL: _v2_level,
    Operation.MODE: _v2_mode,
    Operation.DISPLAY: _v2_display,
    Operation.CHILD_LOCK: _v2_child_lock,
    Operation.TIMER_SET: _timer_step,
    Operation.TIMER_CLEAR: _timer_clear_step,
    Operation.NIGHT_LIGHT: _v2_night_light,
    Operation.AUTO_PREFERENCE: _v2_auto_preference,
    Operation.LIGHT_DETECTION: _v2_light_detection,
    Operation.OSCILLATION: _v2_oscillation,
    Operation.TARGET_HUMIDITY: _v2_target_humidity,
    Operation.AUTOMATIC_STOP: _v2_automatic_stop,
    Operation.DRYING: _v2_drying,
}

# Writes the Vital line acknowledges before its status read catches up.
# New operations stay strict unless listed here.
VITAL_TOLERANT_OPERATIONS = frozenset(
    {
        Operation.POWER,
        Operation.MODE,
        Operation.LEVEL,
        Operation.AUTO_PREFERENCE,
        Operation.LIGHT_DETECTION,
    }
)

BYPASS_V1_TABLE = VariantTable(
    variant=Variant.BYPASS_V1, builders=_V1_BUILDERS, envelope=_request
)

BYPASS_V2_TABLE = VariantTable(
    variant=Variant.BYPASS_V2, builders=_V2_BUILDERS, envelope=_request
)

VITAL_TABLE = VariantTable(
    variant=Variant.VITAL_QUIRK,
    builders=_V2_BUILDERS,
    envelope=_request,
    tolerant=VITAL_TOLERANT_OPERATIONS,
)
