"""Domain-specific errors for the VeSync Ultimate client."""

from __future__ import annotations

from collections.abc import Iterable


class VeSyncError(Exception):
    """Base error for the VeSync Ultimate client."""


class CapabilityViolation(VeSyncError, ValueError):
    """Raised when a caller requests something the device profile lacks."""


class FeatureUnsupported(CapabilityViolation):
    """Raised when an operation is gated by a feature the device lacks."""

    def __init__(self, device_type: str, feature: str) -> None:
        super().__init__(f"{device_type} does not support {feature}")
        self.device_type = device_type
        self.feature = feature


class UnsupportedMode(CapabilityViolation):
    """Raised when a mode is not in the device's mode list."""

    def __init__(self, device_type: str, mode: str, allowed: Iterable[str]) -> None:
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid mode {mode!r} for {device_type}; "
            f"expected one of {', '.join(self.allowed) or 'none'}"
        )
        self.device_type = device_type
        self.mode = mode


class InvalidArgument(CapabilityViolation):
    """Raised when an argument value is outside its accepted range."""


class VeSyncAuthError(VeSyncError):
    """Raised when the vendor rejects a login attempt."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class VeSyncSessionError(VeSyncError):
    """Raised when an operation requires a session that does not exist."""
