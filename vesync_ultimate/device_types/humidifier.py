"""Humidifier device support."""

from __future__ import annotations

from ..adapters import Operation
from ..capabilities import FeatureTag
from ..const import (
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    TARGET_HUMIDITY_MAX,
    TARGET_HUMIDITY_MIN,
)
from ..errors import InvalidArgument
from .base import VeSyncBaseDevice


class VeSyncHumidifier(VeSyncBaseDevice):
    """Classic, Dual, LV600S, OasisMist and Superior humidifiers."""

    @property
    def humidity(self) -> int:
        """Return the measured relative humidity."""

        return self._state.humidity

    @property
    def target_humidity(self) -> int:
        return int(self._read("target_humidity", 0))

    @property
    def mist_level(self) -> int:
        return self._state.level

    @property
    def warm_enabled(self) -> bool:
        return bool(self._read("warm_enabled", False))

    @property
    def warm_level(self) -> int:
        return int(self._read("warm_level", 0))

    @property
    def water_lacks(self) -> bool:
        return self._state.water_lacks

    @property
    def water_tank_lifted(self) -> bool:
        return self._state.water_tank_lifted

    @property
    def automatic_stop(self) -> bool:
        return bool(self._read("automatic_stop", False))

    @property
    def automatic_stop_reached(self) -> bool:
        """Return True once the target humidity stopped the mist."""

        return bool(self._read("automatic_stop_reached", False))

    @property
    def drying(self) -> bool:
        return bool(self._read("drying", False))

    @property
    def night_light_brightness(self) -> int:
        return int(self._read("night_light_brightness", 0))

    @property
    def temperature(self) -> float:
        return self._state.temperature

    async def async_set_mist_level(self, level: int) -> bool:
        """Set the mist level; levels outside the profile are rejected."""

        self._require_feature(FeatureTag.MIST)
        return await self.async_change_level(level)

    async def async_set_humidity(self, humidity: int) -> bool:
        """Set the target humidity used by auto and humidity modes."""

        self._require_feature(FeatureTag.HUMIDITY)
        if not TARGET_HUMIDITY_MIN <= humidity <= TARGET_HUMIDITY_MAX:
            raise InvalidArgument(
                f"Humidity must be between {TARGET_HUMIDITY_MIN} and "
                f"{TARGET_HUMIDITY_MAX}, got {humidity}"
            )
        return await self._async_execute(Operation.TARGET_HUMIDITY, humidity=humidity)

    async def async_set_warm_level(self, level: int) -> bool:
        """Set the warm mist level."""

        self._require_feature(FeatureTag.WARM_MIST)
        if level not in self.profile.warm_levels:
            raise InvalidArgument(
                f"Warm level {level} is not one of {self.profile.warm_levels}"
            )
        return await self._async_execute(Operation.WARM_LEVEL, level=level)

    async def async_set_automatic_stop(self, enabled: bool) -> bool:
        self._require_feature(FeatureTag.AUTOMATIC_STOP)
        return await self._async_execute(Operation.AUTOMATIC_STOP, enabled=enabled)

    async def async_set_drying(self, enabled: bool) -> bool:
        self._require_feature(FeatureTag.DRYING)
        return await self._async_execute(Operation.DRYING, enabled=enabled)

    async def async_set_night_light_brightness(self, brightness: int) -> bool:
        self._require_feature(FeatureTag.NIGHT_LIGHT)
        if not BRIGHTNESS_MIN <= brightness <= BRIGHTNESS_MAX:
            raise InvalidArgument(
                f"Brightness must be between {BRIGHTNESS_MIN} and "
                f"{BRIGHTNESS_MAX}, got {brightness}"
            )
        return await self._async_execute(Operation.NIGHT_LIGHT, brightness=brightness)
