"""Per-device state snapshot with atomic updates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any


class PowerStatus(str, Enum):
    """Power state reported by the device."""

    ON = "on"
    OFF = "off"


class Connectivity(str, Enum):
    """Cloud connection status of the device."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True, slots=True)
class TimerState:
    """Countdown timer tracked for a device."""

    remaining_seconds: int
    action: str = "off"
    timer_id: int | None = None


@dataclass(slots=True)
class DeviceState:
    """Mutable snapshot of everything known about one device.

    Fields start at safe defaults and are only changed through
    :meth:`apply`, which validates every name before touching any value.
    """

    power: PowerStatus = PowerStatus.OFF
    mode: str = ""
    level: int = 0
    display_on: bool = False
    child_lock_on: bool = False
    connectivity: Connectivity = Connectivity.OFFLINE
    timer: TimerState | None = None
    manual_level: int = 0
    air_quality: int = 0
    air_quality_label: str = ""
    air_quality_value: int = 0
    pm1: int = 0
    pm10: int = 0
    aq_percent: int = 0
    filter_life: int = 0
    night_light: str = "off"
    night_light_brightness: int = 0
    humidity: int = 0
    target_humidity: int = 0
    warm_enabled: bool = False
    warm_level: int = 0
    water_lacks: bool = False
    water_tank_lifted: bool = False
    automatic_stop: bool = False
    automatic_stop_reached: bool = False
    drying: bool = False
    oscillation: bool = False
    mute: bool = False
    temperature: float = 0
    light_detection: bool = False
    environment_light: bool = False
    auto_preference: str = ""
    room_size: int = 0
    active_time: int = 0
    extras: dict[str, Any] = field(default_factory=dict)

    def apply(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Apply ``changes`` as one step and return the replaced values."""

        unknown = set(changes) - FIELD_NAMES
        if unknown:
            raise KeyError(f"Unknown state fields: {', '.join(sorted(unknown))}")
        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            if name == "extras":
                value = dict(value)
            setattr(self, name, value)
        return previous

    def get(self, name: str) -> Any:
        """Return the value stored for ``name``."""

        if name not in FIELD_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only copy of every field."""

        values = {name: getattr(self, name) for name in FIELD_NAMES}
        values["extras"] = MappingProxyType(dict(self.extras))
        return MappingProxyType(values)

    @property
    def is_on(self) -> bool:
        """Return True when the device reports power on."""

        return self.power is PowerStatus.ON


FIELD_NAMES = frozenset(item.name for item in fields(DeviceState))
