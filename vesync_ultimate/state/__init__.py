"""State management helpers for VeSync devices."""

from .device_state import (
    FIELD_NAMES,
    Connectivity,
    DeviceState,
    PowerStatus,
    TimerState,
)

__all__ = [
    "FIELD_NAMES",
    "Connectivity",
    "DeviceState",
    "PowerStatus",
    "TimerState",
]
