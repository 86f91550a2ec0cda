"""Variant protocol adapters for VeSync devices."""

from .base import Command, DeviceIdentity, Operation, Request, Step
from .protocol import VARIANT_TABLES, ProtocolAdapter

__all__ = [
    "Command",
    "DeviceIdentity",
    "Operation",
    "ProtocolAdapter",
    "Request",
    "Step",
    "VARIANT_TABLES",
]
