"""Capability aware client for VeSync purifiers, humidifiers and fans."""

from __future__ import annotations

from .api import VeSyncAPIClient
from .capabilities import (
    CapabilityProfile,
    DeviceFamily,
    FeatureTag,
    Quirk,
    Variant,
    lookup,
)
from .config import CONFIG_SCHEMA, ClientConfig
from .coordinator import DeviceMetadata, VeSyncCoordinator
from .device_types import (
    VeSyncBaseDevice,
    VeSyncHumidifier,
    VeSyncPurifier,
    VeSyncTowerFan,
)
from .envelope import OperationKind, Outcome, classify
from .errors import (
    CapabilityViolation,
    FeatureUnsupported,
    InvalidArgument,
    UnsupportedMode,
    VeSyncAuthError,
    VeSyncError,
    VeSyncSessionError,
)
from .reconcile import ReconciliationScheduler

__version__ = "0.1.0"

__all__ = [
    "CONFIG_SCHEMA",
    "CapabilityProfile",
    "CapabilityViolation",
    "ClientConfig",
    "DeviceFamily",
    "DeviceMetadata",
    "FeatureTag",
    "FeatureUnsupported",
    "InvalidArgument",
    "OperationKind",
    "Outcome",
    "Quirk",
    "ReconciliationScheduler",
    "UnsupportedMode",
    "Variant",
    "VeSyncAPIClient",
    "VeSyncAuthError",
    "VeSyncBaseDevice",
    "VeSyncCoordinator",
    "VeSyncError",
    "VeSyncHumidifier",
    "VeSyncPurifier",
    "VeSyncSessionError",
    "VeSyncTowerFan",
    "classify",
    "lookup",
]
