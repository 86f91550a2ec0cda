"""Device type implementations for the VeSync Ultimate client."""

from .base import FIELD_FEATURES, VeSyncBaseDevice
from .humidifier import VeSyncHumidifier
from .purifier import VeSyncPurifier
from .tower_fan import VeSyncTowerFan

__all__ = [
    "FIELD_FEATURES",
    "VeSyncBaseDevice",
    "VeSyncHumidifier",
    "VeSyncPurifier",
    "VeSyncTowerFan",
]
