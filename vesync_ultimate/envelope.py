"""Classify VeSync responses according to the owning envelope variant."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .capabilities import Variant
from .const import CODE_FEATURE_NOT_SUPPORTED, CODE_NOT_SUPPORTED_IN_MODE, CODE_SUCCESS

_LOGGER = logging.getLogger(__name__)

_HTTP_OK = 200
_RETRIABLE_STATUSES = frozenset({408, 429})


class OperationKind(str, Enum):
    """Whether a call reads status or changes the device."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of classifying one response."""

    success: bool
    vendor_error_code: int | None = None
    retriable: bool = False
    tolerated: bool = False

    @property
    def feature_unsupported(self) -> bool:
        """Return True when the vendor reported the feature as unsupported."""

        return self.vendor_error_code == CODE_FEATURE_NOT_SUPPORTED

    @property
    def mode_restricted(self) -> bool:
        """Return True when the command is refused in the current mode."""

        return self.vendor_error_code == CODE_NOT_SUPPORTED_IN_MODE


def _code(container: Mapping[str, Any]) -> int | None:
    value = container.get("code")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _transport_failure(status: int, body: Any) -> Outcome:
    code = _code(body) if isinstance(body, Mapping) else None
    retriable = status >= 500 or status in _RETRIABLE_STATUSES
    return Outcome(success=False, vendor_error_code=code, retriable=retriable)


def inner_result(body: Any) -> Mapping[str, Any] | None:
    """Return the inner ``result`` layer of a bypass envelope."""

    if not isinstance(body, Mapping):
        return None
    result = body.get("result")
    return result if isinstance(result, Mapping) else None


def status_payload(body: Any, variant: Variant) -> Mapping[str, Any] | None:
    """Return the device status payload carried by ``body``."""

    if not isinstance(body, Mapping):
        return None
    if variant is Variant.LEGACY_FLAT:
        nested = body.get("result")
        return nested if isinstance(nested, Mapping) else body
    result = inner_result(body)
    if result is None:
        return None
    payload = result.get("result")
    return payload if isinstance(payload, Mapping) else None


def _classify_legacy(body: Any) -> Outcome:
    if body is None:
        return Outcome(success=True)
    if not isinstance(body, Mapping):
        return Outcome(success=False)
    if "code" not in body:
        # The oldest endpoints answer without a body code.
        return Outcome(success=True)
    code = _code(body)
    if code == CODE_SUCCESS:
        return Outcome(success=True)
    return Outcome(success=False, vendor_error_code=code)


def _classify_bypass(
    body: Any,
    variant: Variant,
    kind: OperationKind,
    tolerate_inner_code: bool,
) -> Outcome:
    if not isinstance(body, Mapping):
        return Outcome(success=False)
    outer = _code(body)
    if outer != CODE_SUCCESS:
        return Outcome(success=False, vendor_error_code=outer)
    result = inner_result(body)
    if result is None:
        return Outcome(success=False)
    inner = _code(result)
    if inner == CODE_SUCCESS:
        return Outcome(success=True)
    if variant is Variant.VITAL_QUIRK:
        if kind is OperationKind.READ and status_payload(body, variant):
            _LOGGER.debug("Ignoring stale inner code %s on status read", inner)
            return Outcome(success=True, vendor_error_code=inner, tolerated=True)
        if kind is OperationKind.WRITE and tolerate_inner_code:
            _LOGGER.debug("Accepting inner code %s on tolerant write", inner)
            return Outcome(success=True, vendor_error_code=inner, tolerated=True)
    return Outcome(success=False, vendor_error_code=inner)


def classify(
    status: int,
    body: Any,
    variant: Variant,
    *,
    kind: OperationKind = OperationKind.READ,
    tolerate_inner_code: bool = False,
) -> Outcome:
    """Classify a transport response for ``variant``.

    ``tolerate_inner_code`` only has an effect on vital-quirk writes; every
    other variant requires each envelope layer to report success.
    """

    if status != _HTTP_OK:
        return _transport_failure(status, body)
    if variant is Variant.LEGACY_FLAT:
        return _classify_legacy(body)
    return _classify_bypass(body, variant, kind, tolerate_inner_code)
