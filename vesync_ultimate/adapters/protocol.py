"""Variant dispatch for device protocol adapters."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from ..auth import Session
from ..capabilities import CapabilityProfile, Variant, redirects_auto_to_manual
from ..envelope import OperationKind
from ..errors import FeatureUnsupported
from ..state import DeviceState
from .base import BuildContext, Command, DeviceIdentity, Operation, VariantTable
from .bypass import BYPASS_V1_TABLE, BYPASS_V2_TABLE, VITAL_TABLE
from .legacy import LEGACY_TABLE

_LOGGER = logging.getLogger(__name__)

VARIANT_TABLES: Mapping[Variant, VariantTable] = MappingProxyType(
    {
        Variant.LEGACY_FLAT: LEGACY_TABLE,
        Variant.BYPASS_V1: BYPASS_V1_TABLE,
        Variant.BYPASS_V2: BYPASS_V2_TABLE,
        Variant.VITAL_QUIRK: VITAL_TABLE,
    }
)


class ProtocolAdapter:
    """Build requests for one device using its variant's dispatch table."""

    def __init__(self, identity: DeviceIdentity, profile: CapabilityProfile) -> None:
        """Select the dispatch table for ``profile.variant``."""

        self.identity = identity
        self.profile = profile
        self._table = VARIANT_TABLES[profile.variant]

    @property
    def variant(self) -> Variant:
        """Return the envelope variant handled by this adapter."""

        return self._table.variant

    def supports(self, operation: Operation) -> bool:
        """Return True when the variant can express ``operation``."""

        return operation in self._table.builders

    def resolve_mode(self, mode: str) -> str:
        """Return the mode actually sent for a requested ``mode``.

        The Core200S family has no auto mode; the vendor app sends manual
        instead, and so do we. No other device is redirected.
        """

        if mode == "auto" and redirects_auto_to_manual(self.identity.device_type):
            _LOGGER.debug(
                "%s has no auto mode; using manual", self.identity.device_type
            )
            return "manual"
        return mode

    @property
    def level_requires_manual(self) -> bool:
        """Return True when levels can only be changed in manual mode."""

        return self.variant is Variant.LEGACY_FLAT

    def is_tolerant(self, operation: Operation) -> bool:
        """Return True when ``operation`` accepts non-zero inner codes."""

        return operation in self._table.tolerant

    def build(
        self,
        operation: Operation,
        *,
        state: DeviceState,
        session: Session,
        **args: Any,
    ) -> Command:
        """Return the command for ``operation`` with ``args``."""

        builder = self._table.builders.get(operation)
        if builder is None:
            raise FeatureUnsupported(self.identity.device_type, operation.value)
        ctx = BuildContext(
            identity=self.identity,
            profile=self.profile,
            state=state,
            session=session,
        )
        step = builder(ctx, args)
        kind = (
            OperationKind.READ if operation is Operation.DETAILS else OperationKind.WRITE
        )
        tolerant = self.is_tolerant(operation)
        return Command(
            operation=operation,
            variant=self.variant,
            request=self._table.envelope(ctx, step),
            step=step,
            kind=kind,
            tolerate_inner_code=tolerant,
            reconcile=tolerant,
        )
