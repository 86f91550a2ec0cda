"""Types shared by the variant protocol adapters."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..auth import Session
from ..capabilities import CapabilityProfile, Variant
from ..envelope import OperationKind, status_payload
from ..state import DeviceState

ResultParser = Callable[[Mapping[str, Any] | None], dict[str, Any]]


class Operation(str, Enum):
    """Logical operations a device can be asked to perform."""

    DETAILS = "details"
    POWER = "power"
    MODE = "mode"
    LEVEL = "level"
    DISPLAY = "display"
    CHILD_LOCK = "child_lock"
    TIMER_SET = "timer_set"
    TIMER_CLEAR = "timer_clear"
    NIGHT_LIGHT = "night_light"
    AUTO_PREFERENCE = "auto_preference"
    LIGHT_DETECTION = "light_detection"
    OSCILLATION = "oscillation"
    TARGET_HUMIDITY = "target_humidity"
    WARM_LEVEL = "warm_level"
    AUTOMATIC_STOP = "automatic_stop"
    DRYING = "drying"


@dataclass(frozen=True, slots=True)
class DeviceIdentity:
    """Identifiers addressing one physical device."""

    device_type: str
    cid: str
    uuid: str = ""
    config_module: str = ""


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Inputs available to an operation builder."""

    identity: DeviceIdentity
    profile: CapabilityProfile
    state: DeviceState
    session: Session


@dataclass(frozen=True, slots=True)
class Step:
    """Variant specific request fragment and the state it produces.

    ``changes`` are applied once the response classifies as successful;
    ``parse`` contributes further changes read from the response payload.
    """

    method: str
    data: dict[str, Any] = field(default_factory=dict)
    changes: dict[str, Any] = field(default_factory=dict)
    http_method: str = "put"
    body_kind: str | None = None
    parse: ResultParser | None = None


Builder = Callable[[BuildContext, Mapping[str, Any]], Step]


@dataclass(frozen=True, slots=True)
class Request:
    """Fully assembled transport request."""

    path: str
    method: str
    body: dict[str, Any]
    headers: dict[str, str]


@dataclass(frozen=True, slots=True)
class Command:
    """A request paired with the knowledge needed to interpret its answer."""

    operation: Operation
    variant: Variant
    request: Request
    step: Step
    kind: OperationKind
    tolerate_inner_code: bool = False
    reconcile: bool = False

    def parse(self, body: Any) -> dict[str, Any]:
        """Return the state changes produced by a successful ``body``."""

        changes = dict(self.step.changes)
        if self.step.parse is not None:
            changes.update(self.step.parse(status_payload(body, self.variant)))
        return changes


@dataclass(frozen=True)
class VariantTable:
    """Dispatch table describing one envelope variant."""

    variant: Variant
    builders: Mapping[Operation, Builder]
    envelope: Callable[[BuildContext, Step], Request]
    tolerant: frozenset[Operation] = frozenset()


def switch(value: bool) -> int:
    """Return the integer switch value used by newer firmware."""

    return 1 if value else 0


def on_off(value: bool) -> str:
    """Return the on/off string used by older firmware."""

    return "on" if value else "off"
