"""Device state machine shared by every VeSync product family."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

import voluptuous as vol

from ..adapters import Command, DeviceIdentity, Operation, ProtocolAdapter
from ..auth import Session
from ..capabilities import CapabilityProfile, FeatureTag, Variant, lookup
from ..envelope import Outcome, classify
from ..errors import FeatureUnsupported, InvalidArgument, UnsupportedMode
from ..reconcile import ReconciliationScheduler
from ..state import Connectivity, DeviceState, PowerStatus, TimerState

if TYPE_CHECKING:
    from ..coordinator import DeviceMetadata

_LOGGER = logging.getLogger(__name__)

# Fields only meaningful when the profile carries the matching feature.
FIELD_FEATURES: Mapping[str, FeatureTag] = MappingProxyType(
    {
        "display_on": FeatureTag.DISPLAY,
        "child_lock_on": FeatureTag.CHILD_LOCK,
        "timer": FeatureTag.TIMER,
        "night_light": FeatureTag.NIGHT_LIGHT,
        "night_light_brightness": FeatureTag.NIGHT_LIGHT,
        "air_quality": FeatureTag.AIR_QUALITY,
        "air_quality_label": FeatureTag.AIR_QUALITY,
        "air_quality_value": FeatureTag.AIR_QUALITY,
        "pm1": FeatureTag.AIR_QUALITY,
        "pm10": FeatureTag.AIR_QUALITY,
        "aq_percent": FeatureTag.AIR_QUALITY,
        "auto_preference": FeatureTag.AUTO_PREFERENCE,
        "room_size": FeatureTag.AUTO_PREFERENCE,
        "light_detection": FeatureTag.LIGHT_DETECTION,
        "environment_light": FeatureTag.LIGHT_DETECTION,
        "oscillation": FeatureTag.OSCILLATION,
        "target_humidity": FeatureTag.HUMIDITY,
        "warm_enabled": FeatureTag.WARM_MIST,
        "warm_level": FeatureTag.WARM_MIST,
        "automatic_stop": FeatureTag.AUTOMATIC_STOP,
        "automatic_stop_reached": FeatureTag.AUTOMATIC_STOP,
        "drying": FeatureTag.DRYING,
        "filter_life": FeatureTag.FILTER_LIFE,
    }
)


class Transport(Protocol):
    """Anything able to perform one vendor HTTP call."""

    def async_call(
        self,
        path: str,
        method: str,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Awaitable[tuple[Any, int]]:
        """Return the decoded body and HTTP status of one request."""


class VeSyncBaseDevice:
    """One cloud connected device and the state last known about it.

    Every command goes through the same pipeline: the profile gates it, the
    protocol adapter builds it, the envelope classifier judges the answer and
    only a successful outcome changes :attr:`state`.
    """

    def __init__(
        self,
        metadata: DeviceMetadata,
        *,
        transport: Transport,
        session_getter: Callable[[], Session],
        scheduler: ReconciliationScheduler | None = None,
        profile: CapabilityProfile | None = None,
    ) -> None:
        """Bind the device described by ``metadata`` to its collaborators."""

        self.metadata = metadata
        self.profile = profile or lookup(metadata.device_type)
        self._transport = transport
        self._session_getter = session_getter
        self._scheduler = scheduler
        self._adapter = ProtocolAdapter(
            DeviceIdentity(
                device_type=metadata.device_type,
                cid=metadata.cid,
                uuid=metadata.uuid,
                config_module=metadata.config_module,
            ),
            self.profile,
        )
        self._state = DeviceState()
        self._state.apply(
            {
                "connectivity": metadata.connectivity,
                "power": metadata.power,
            }
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(device_type={self.device_type!r}, "
            f"cid={self.cid!r}, variant={self.variant.value!r})"
        )

    # Identity ------------------------------------------------------------

    @property
    def device_id(self) -> str:
        """Return the identifier used to key this device."""

        return self.metadata.device_id

    @property
    def device_type(self) -> str:
        return self.metadata.device_type

    @property
    def device_name(self) -> str:
        return self.metadata.device_name

    @property
    def cid(self) -> str:
        return self.metadata.cid

    @property
    def variant(self) -> Variant:
        """Return the envelope variant this device speaks."""

        return self._adapter.variant

    def update_metadata(self, metadata: DeviceMetadata) -> None:
        """Take over naming and connection data from a fresh device listing."""

        self.metadata = metadata
        self._state.apply({"connectivity": metadata.connectivity})

    # Gating --------------------------------------------------------------

    def has_feature(self, tag: FeatureTag) -> bool:
        """Return True when the profile carries ``tag``."""

        return self.profile.has_feature(tag)

    def _require_feature(self, tag: FeatureTag) -> None:
        if not self.profile.has_feature(tag):
            raise FeatureUnsupported(self.device_type, tag.value)

    def get_field(self, name: str) -> Any:
        """Return ``name`` from the state, raising when its feature is absent."""

        tag = FIELD_FEATURES.get(name)
        if tag is not None:
            self._require_feature(tag)
        return self._state.get(name)

    def _read(self, name: str, default: Any) -> Any:
        tag = FIELD_FEATURES.get(name)
        if tag is not None and not self.profile.has_feature(tag):
            return default
        return self._state.get(name)

    # State ---------------------------------------------------------------

    @property
    def state(self) -> Mapping[str, Any]:
        """Return a read-only snapshot of the device state."""

        return self._state.snapshot()

    @property
    def power(self) -> PowerStatus:
        return self._state.power

    @property
    def is_on(self) -> bool:
        return self._state.is_on

    @property
    def mode(self) -> str:
        return self._state.mode

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def connectivity(self) -> Connectivity:
        return self._state.connectivity

    @property
    def is_online(self) -> bool:
        return self._state.connectivity is Connectivity.ONLINE

    @property
    def display_on(self) -> bool:
        return bool(self._read("display_on", False))

    @property
    def child_lock_on(self) -> bool:
        """Return the child lock state; raises without the child lock feature."""

        return bool(self.get_field("child_lock_on"))

    @property
    def timer(self) -> TimerState | None:
        return self._read("timer", None)

    @property
    def filter_life(self) -> int:
        return int(self._read("filter_life", 0))

    @property
    def extras(self) -> Mapping[str, Any]:
        """Return vendor fields without a typed home."""

        return MappingProxyType(dict(self._state.extras))

    def apply_optimistic_update(
        self, operation: Operation, outcome: Outcome, changes: Mapping[str, Any]
    ) -> bool:
        """Apply ``changes`` for ``operation`` when ``outcome`` succeeded.

        Reported levels and modes outside the profile are not stored; the raw
        values are kept in ``extras`` instead. Returns True when the state was
        changed.
        """

        if not outcome.success:
            _LOGGER.debug(
                "Not applying %s to %s after failed call", operation.value, self
            )
            return False
        self._state.apply(self._normalise(changes))
        return True

    def _normalise(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        normalised = dict(changes)
        extras: dict[str, Any] | None = None
        level = normalised.get("level")
        if level and level not in self.profile.levels:
            _LOGGER.warning(
                "%s reported level %s outside %s",
                self.device_name,
                level,
                self.profile.levels,
            )
            extras = dict(normalised.get("extras", self._state.extras))
            extras["reported_level"] = level
            normalised["level"] = 0
        mode = normalised.get("mode")
        if mode and mode not in self.profile.modes:
            _LOGGER.warning(
                "%s reported mode %r outside %s",
                self.device_name,
                mode,
                self.profile.modes,
            )
            if extras is None:
                extras = dict(normalised.get("extras", self._state.extras))
            extras["reported_mode"] = mode
            normalised["mode"] = ""
        if extras is not None:
            normalised["extras"] = extras
        return normalised

    # Pipeline ------------------------------------------------------------

    async def _async_send(
        self, operation: Operation, **args: Any
    ) -> tuple[Command, Outcome, Any]:
        command = self._adapter.build(
            operation,
            state=self._state,
            session=self._session_getter(),
            **args,
        )
        request = command.request
        body, status = await self._transport.async_call(
            request.path, request.method, request.body, request.headers
        )
        outcome = classify(
            status,
            body,
            command.variant,
            kind=command.kind,
            tolerate_inner_code=command.tolerate_inner_code,
        )
        return command, outcome, body

    async def _async_execute(
        self,
        operation: Operation,
        extra_changes: Mapping[str, Any] | None = None,
        **args: Any,
    ) -> bool:
        command, outcome, body = await self._async_send(operation, **args)
        if not outcome.success:
            self._log_rejection(operation, outcome)
            return False
        try:
            changes = command.parse(body)
        except vol.Invalid as err:
            _LOGGER.warning(
                "Discarding malformed %s response from %s: %s",
                operation.value,
                self.device_name,
                err,
            )
            return False
        if extra_changes:
            changes.update(extra_changes)
        self.apply_optimistic_update(operation, outcome, changes)
        if command.reconcile and self._scheduler is not None:
            self._scheduler.schedule_refresh(self)
        return True

    def _log_rejection(self, operation: Operation, outcome: Outcome) -> None:
        if outcome.feature_unsupported:
            _LOGGER.warning(
                "%s reports %s as unsupported", self.device_name, operation.value
            )
        elif outcome.mode_restricted:
            _LOGGER.warning(
                "%s refused %s in mode %r",
                self.device_name,
                operation.value,
                self._state.mode,
            )
        else:
            _LOGGER.error(
                "%s failed for %s (code %s, retriable %s)",
                operation.value,
                self.device_name,
                outcome.vendor_error_code,
                outcome.retriable,
            )

    # Operations ----------------------------------------------------------

    async def async_get_details(self) -> bool:
        """Read the full device status; a failed read changes nothing."""

        return await self._async_execute(
            Operation.DETAILS, {"connectivity": Connectivity.ONLINE}
        )

    async def async_toggle_power(self, on: bool) -> bool:
        return await self._async_execute(Operation.POWER, on=on)

    async def async_turn_on(self) -> bool:
        """Switch the device on."""

        return await self.async_toggle_power(True)

    async def async_turn_off(self) -> bool:
        """Switch the device off."""

        return await self.async_toggle_power(False)

    async def async_change_level(self, level: int) -> bool:
        """Set the manual fan or mist level.

        Levels outside the profile are rejected without a request.
        """

        if level not in self.profile.levels:
            _LOGGER.error(
                "Level %s is not valid for %s; expected one of %s",
                level,
                self.device_type,
                self.profile.levels,
            )
            return False
        if self._adapter.level_requires_manual and self._state.mode != "manual":
            _LOGGER.error(
                "%s must be in manual mode to change level", self.device_name
            )
            return False
        return await self._async_execute(Operation.LEVEL, level=level)

    async def async_set_mode(self, mode: str) -> bool:
        """Switch to ``mode``; raises :class:`UnsupportedMode` for unknown modes."""

        resolved = self._adapter.resolve_mode(mode)
        if resolved not in self.profile.modes:
            raise UnsupportedMode(self.device_type, mode, self.profile.modes)
        return await self._async_execute(Operation.MODE, mode=resolved)

    async def async_set_display(self, on: bool) -> bool:
        self._require_feature(FeatureTag.DISPLAY)
        return await self._async_execute(Operation.DISPLAY, on=on)

    async def async_set_child_lock(self, on: bool) -> bool:
        self._require_feature(FeatureTag.CHILD_LOCK)
        return await self._async_execute(Operation.CHILD_LOCK, on=on)

    async def async_set_timer(self, hours: float) -> bool:
        """Turn the device off after ``hours``."""

        self._require_feature(FeatureTag.TIMER)
        if hours <= 0:
            raise InvalidArgument(f"Timer duration must be positive, got {hours}")
        if not self._state.is_on:
            _LOGGER.warning("%s must be on to set a timer", self.device_name)
            return False
        return await self._async_execute(Operation.TIMER_SET, hours=hours)

    async def async_clear_timer(self) -> bool:
        """Cancel the running timer; clearing twice is a no-op."""

        self._require_feature(FeatureTag.TIMER)
        if self._state.timer is None:
            _LOGGER.debug("%s has no timer to clear", self.device_name)
            return True
        command, outcome, body = await self._async_send(Operation.TIMER_CLEAR)
        if outcome.feature_unsupported:
            # The device no longer knows the timer, so it is gone already.
            outcome = Outcome(
                success=True, vendor_error_code=outcome.vendor_error_code
            )
        if not outcome.success:
            self._log_rejection(Operation.TIMER_CLEAR, outcome)
            return False
        return self.apply_optimistic_update(
            Operation.TIMER_CLEAR, outcome, command.step.changes
        )
