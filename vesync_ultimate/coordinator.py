"""Fleet coordinator for the VeSync Ultimate client."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .api import VeSyncAPIClient
from .capabilities import DeviceFamily, lookup
from .config import ClientConfig
from .const import DEFAULT_UPDATE_INTERVAL
from .device_types import (
    VeSyncBaseDevice,
    VeSyncHumidifier,
    VeSyncPurifier,
    VeSyncTowerFan,
)
from .reconcile import ReconciliationScheduler
from .state import Connectivity, PowerStatus

_LOGGER = logging.getLogger(__name__)

_FAMILY_FACTORIES: Mapping[DeviceFamily, type[VeSyncBaseDevice]] = {
    DeviceFamily.PURIFIER: VeSyncPurifier,
    DeviceFamily.HUMIDIFIER: VeSyncHumidifier,
    DeviceFamily.TOWER_FAN: VeSyncTowerFan,
}


def _resolve_payload_value(
    payload: Mapping[str, Any],
    *keys: str,
    default: Any = None,
    required: bool = False,
) -> Any:
    """Return the first non-``None`` value for ``keys`` in ``payload``."""

    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    if required:
        raise KeyError(keys[0])
    return default


@dataclass(slots=True)
class DeviceMetadata:
    """Structured representation of one device list entry."""

    device_id: str
    device_type: str
    device_name: str
    cid: str
    uuid: str
    mac_id: str
    config_module: str
    device_status: str
    connection_status: str
    device_region: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DeviceMetadata:
        """Normalise a camelCase or snake_case device list entry.

        Raises ``KeyError`` when the entry has no device type or no usable
        identifier.
        """

        device_type = str(
            _resolve_payload_value(payload, "device_type", "deviceType", required=True)
        )
        cid = str(_resolve_payload_value(payload, "cid", default=""))
        mac_id = str(_resolve_payload_value(payload, "mac_id", "macID", default=""))
        uuid = str(_resolve_payload_value(payload, "uuid", default=""))
        device_id = cid or mac_id or uuid
        if not device_id:
            raise KeyError("cid")
        return cls(
            device_id=device_id,
            device_type=device_type,
            device_name=str(
                _resolve_payload_value(
                    payload, "device_name", "deviceName", default=device_type
                )
            ),
            cid=cid or device_id,
            uuid=uuid,
            mac_id=mac_id,
            config_module=str(
                _resolve_payload_value(
                    payload, "config_module", "configModule", default=""
                )
            ),
            device_status=str(
                _resolve_payload_value(
                    payload, "device_status", "deviceStatus", default="off"
                )
            ),
            connection_status=str(
                _resolve_payload_value(
                    payload, "connection_status", "connectionStatus", default="offline"
                )
            ),
            device_region=str(
                _resolve_payload_value(
                    payload, "device_region", "deviceRegion", default=""
                )
            ),
        )

    @property
    def connectivity(self) -> Connectivity:
        """Return the connection status reported by the listing."""

        if self.connection_status.lower() == "online":
            return Connectivity.ONLINE
        return Connectivity.OFFLINE

    @property
    def power(self) -> PowerStatus:
        if self.device_status.lower() == "on":
            return PowerStatus.ON
        return PowerStatus.OFF


class VeSyncCoordinator:
    """Own device instances and orchestrate fleet refreshes."""

    def __init__(
        self,
        api_client: VeSyncAPIClient,
        *,
        scheduler: ReconciliationScheduler | None = None,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
    ) -> None:
        """Initialise the coordinator around a logged in ``api_client``."""

        self._api_client = api_client
        self._scheduler = scheduler or ReconciliationScheduler()
        self._update_interval = update_interval
        self._last_update: float | None = None

        self.devices: dict[str, VeSyncBaseDevice] = {}
        self.device_metadata: dict[str, DeviceMetadata] = {}

    @classmethod
    def from_config(cls, config: ClientConfig) -> VeSyncCoordinator:
        """Build a coordinator, API client and scheduler from ``config``."""

        return cls(
            VeSyncAPIClient(config),
            scheduler=ReconciliationScheduler(delay=config.reconcile_delay),
            update_interval=config.update_interval,
        )

    @property
    def api_client(self) -> VeSyncAPIClient:
        return self._api_client

    @property
    def scheduler(self) -> ReconciliationScheduler:
        return self._scheduler

    def get_device(self, device_id: str) -> VeSyncBaseDevice:
        """Return the device registered under ``device_id``."""

        return self.devices[device_id]

    async def async_discover_devices(self) -> None:
        """Fetch the device list and reconcile the device instances with it.

        New devices are created, known devices take over the fresh listing
        data and devices missing from the listing are removed. An empty
        listing leaves the known devices in place.
        """

        payloads = await self._api_client.async_get_devices()
        if not payloads:
            _LOGGER.warning("Device listing was empty; keeping known devices")
            return
        listed: set[str] = set()
        for payload in payloads:
            try:
                metadata = DeviceMetadata.from_dict(payload)
            except KeyError as err:
                _LOGGER.warning("Skipping device list entry without %s", err)
                continue
            listed.add(metadata.device_id)
            self._register(metadata)

        for device_id in set(self.devices) - listed:
            device = self.devices.pop(device_id)
            self.device_metadata.pop(device_id, None)
            _LOGGER.info("Removed %s (%s)", device.device_name, device_id)

    def _register(self, metadata: DeviceMetadata) -> None:
        existing = self.devices.get(metadata.device_id)
        if existing is not None:
            existing.update_metadata(metadata)
            self.device_metadata[metadata.device_id] = metadata
            return
        factory = self._resolve_factory(metadata)
        if factory is None:
            _LOGGER.debug(
                "Ignoring unsupported device type %s", metadata.device_type
            )
            return
        device = factory(
            metadata,
            transport=self._api_client.rest_client,
            session_getter=self._api_client.require_session,
            scheduler=self._scheduler,
        )
        self.devices[metadata.device_id] = device
        self.device_metadata[metadata.device_id] = metadata
        _LOGGER.debug("Discovered %r", device)

    @staticmethod
    def _resolve_factory(metadata: DeviceMetadata) -> type[VeSyncBaseDevice] | None:
        """Determine the device class for ``metadata`` from its profile family."""

        return _FAMILY_FACTORIES.get(lookup(metadata.device_type).family)

    async def async_update(self, *, force: bool = False) -> dict[str, bool]:
        """Refresh every device's details in parallel.

        Calls closer together than the update interval are skipped unless
        ``force`` is set. Returns whether each device refreshed successfully.
        """

        now = time.monotonic()
        if (
            not force
            and self._last_update is not None
            and now - self._last_update < self._update_interval
        ):
            _LOGGER.debug("Skipping fleet refresh inside the update interval")
            return {}
        self._last_update = now

        device_ids = list(self.devices)
        results = await asyncio.gather(
            *(self.devices[device_id].async_get_details() for device_id in device_ids),
            return_exceptions=True,
        )
        refreshed: dict[str, bool] = {}
        for device_id, result in zip(device_ids, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                _LOGGER.error("Refreshing %s failed: %s", device_id, result)
                refreshed[device_id] = False
            else:
                refreshed[device_id] = bool(result)
        return refreshed

    async def async_shutdown(self) -> None:
        """Cancel pending reconciliation and close the API client."""

        self._scheduler.cancel_all()
        await self._scheduler.async_wait_idle()
        await self._api_client.async_close()
