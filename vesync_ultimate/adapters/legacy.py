"""Builders for the flat ``/131airPurifier`` endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..capabilities import Variant
from ..const import DEFAULT_LANGUAGE, LEGACY_PATH_PREFIX
from ..state import PowerStatus, TimerState
from .base import BuildContext, Operation, Request, Step, VariantTable, on_off
from .schemas import LEGACY_PURIFIER


def _request(ctx: BuildContext, step: Step) -> Request:
    session = ctx.session
    if step.body_kind is not None:
        body = session.request_body(step.body_kind)
    else:
        body = {
            "acceptLanguage": DEFAULT_LANGUAGE,
            "accountID": session.account_id,
            "timeZone": session.time_zone,
            "token": session.token,
        }
    body["uuid"] = ctx.identity.uuid
    body.update(step.data)
    return Request(
        path=f"{LEGACY_PATH_PREFIX}/{step.method}",
        method=step.http_method,
        body=body,
        headers=session.request_headers(),
    )


def _details(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    return Step(
        method="deviceDetail",
        http_method="post",
        body_kind="devicedetail",
        parse=LEGACY_PURIFIER.parse,
    )


def _power(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="deviceStatus",
        data={"status": on_off(on)},
        changes={"power": PowerStatus.ON if on else PowerStatus.OFF},
    )


def _level(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    level = args["level"]
    return Step(
        method="updateSpeed",
        data={"level": level},
        changes={"level": level, "manual_level": level},
    )


def _mode(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    mode = args["mode"]
    data: dict[str, Any] = {"mode": mode}
    changes: dict[str, Any] = {"mode": mode}
    if mode == "manual":
        level = ctx.state.level or ctx.state.manual_level or 1
        data["level"] = level
        changes["level"] = level
    return Step(method="updateMode", data=data, changes=changes)


def _display(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="updateScreen",
        data={"status": on_off(on)},
        changes={"display_on": on},
    )


def _child_lock(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    on = args["on"]
    return Step(
        method="updateChildLock",
        data={"status": on_off(on)},
        changes={"child_lock_on": on},
    )


def _timer_set(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    hours = args["hours"]
    return Step(
        method="updateTimer",
        data={"action": "off", "duration": hours},
        changes={"timer": TimerState(remaining_seconds=int(hours * 3600))},
    )


def _timer_clear(ctx: BuildContext, args: Mapping[str, Any]) -> Step:
    return Step(method="cancelTimer", changes={"timer": None})


LEGACY_TABLE = VariantTable(
    variant=Variant.LEGACY_FLAT,
    builders={
        Operation.DETAILS: _details,
        Operation.POWER: _power,
        Operation.LEVEL: _level,
        Operation.MODE: _mode,
        Operation.DISPLAY: _display,
        Operation.CHILD_LOCK: _child_lock,
        Operation.TIMER_SET: _timer_set,
        Operation.TIMER_CLEAR: _timer_clear,
    },
    envelope=_request,
)
