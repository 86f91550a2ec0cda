"""Air purifier device support."""

from __future__ import annotations

from ..adapters import Operation
from ..capabilities import FeatureTag
from ..errors import InvalidArgument
from .base import VeSyncBaseDevice

# Brightness sent by firmware that only knows a night light dimmer.
_NIGHT_LIGHT_BRIGHTNESS = {"on": 100, "dim": 50, "off": 0}


class VeSyncPurifier(VeSyncBaseDevice):
    """Core, Vital, EverestAir and LV series air purifiers."""

    @property
    def manual_level(self) -> int:
        """Return the level restored when returning to manual mode."""

        return self._state.manual_level

    @property
    def air_quality(self) -> int:
        return int(self._read("air_quality", 0))

    @property
    def air_quality_label(self) -> str:
        return str(self._read("air_quality_label", ""))

    @property
    def air_quality_value(self) -> int:
        """Return the PM2.5 reading in µg/m³."""

        return int(self._read("air_quality_value", 0))

    @property
    def pm1(self) -> int:
        return int(self._read("pm1", 0))

    @property
    def pm10(self) -> int:
        return int(self._read("pm10", 0))

    @property
    def night_light(self) -> str:
        return str(self._read("night_light", "off"))

    @property
    def auto_preference(self) -> str:
        return str(self._read("auto_preference", ""))

    @property
    def room_size(self) -> int:
        return int(self._read("room_size", 0))

    @property
    def light_detection(self) -> bool:
        return bool(self._read("light_detection", False))

    @property
    def environment_light(self) -> bool:
        """Return True when the light sensor currently sees light."""

        return bool(self._read("environment_light", False))

    async def async_set_night_light(self, mode: str) -> bool:
        """Set the night light to one of the profile's night light modes."""

        self._require_feature(FeatureTag.NIGHT_LIGHT)
        allowed = self.profile.night_light_modes or tuple(_NIGHT_LIGHT_BRIGHTNESS)
        if mode not in allowed:
            raise InvalidArgument(
                f"Night light mode {mode!r} is not one of {', '.join(allowed)}"
            )
        return await self._async_execute(
            Operation.NIGHT_LIGHT,
            mode=mode,
            brightness=_NIGHT_LIGHT_BRIGHTNESS.get(mode, 0),
        )

    async def async_set_auto_preference(
        self, preference: str, room_size: int | None = None
    ) -> bool:
        """Choose how aggressively auto mode runs the fan."""

        self._require_feature(FeatureTag.AUTO_PREFERENCE)
        if preference not in self.profile.auto_preferences:
            raise InvalidArgument(
                f"Auto preference {preference!r} is not one of "
                f"{', '.join(self.profile.auto_preferences)}"
            )
        if room_size is not None and room_size <= 0:
            raise InvalidArgument(f"Room size must be positive, got {room_size}")
        return await self._async_execute(
            Operation.AUTO_PREFERENCE, preference=preference, room_size=room_size
        )

    async def async_set_light_detection(self, on: bool) -> bool:
        self._require_feature(FeatureTag.LIGHT_DETECTION)
        return await self._async_execute(Operation.LIGHT_DETECTION, on=on)
