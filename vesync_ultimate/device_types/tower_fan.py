"""Tower fan device support."""

from __future__ import annotations

from ..adapters import Operation
from ..capabilities import FeatureTag
from .base import VeSyncBaseDevice


class VeSyncTowerFan(VeSyncBaseDevice):
    """LTF series tower fans."""

    @property
    def oscillation(self) -> bool:
        return bool(self._read("oscillation", False))

    @property
    def mute(self) -> bool:
        return self._state.mute

    @property
    def temperature(self) -> float:
        """Return the temperature reported by the fan's sensor."""

        return self._state.temperature

    @property
    def humidity(self) -> int:
        return self._state.humidity

    async def async_set_oscillation(self, on: bool) -> bool:
        """Start or stop the fan swinging."""

        self._require_feature(FeatureTag.OSCILLATION)
        return await self._async_execute(Operation.OSCILLATION, on=on)
