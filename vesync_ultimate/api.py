"""Account level API facade for the VeSync cloud.

`VeSyncAPIClient` owns the HTTP client and wires the REST transport and the
session manager together. Devices receive the transport and a session getter
from here; the client itself only handles login and the fleet listing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .auth import Session, VeSyncAuthManager
from .capabilities import Variant
from .config import ClientConfig
from .const import DEVICE_LIST_PATH
from .envelope import classify
from .rest_client import VeSyncRestClient

_LOGGER = logging.getLogger(__name__)


class VeSyncAPIClient:
    """Facade for the account operations used by the coordinator."""

    def __init__(
        self, config: ClientConfig, *, http_client: httpx.AsyncClient | None = None
    ) -> None:
        """Create the facade; an HTTP client is created lazily when not given."""

        self._config = config
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self.rest_client = VeSyncRestClient(
            lambda: self._http_client, base_url=config.api_base_url
        )
        self.auth = VeSyncAuthManager(self.rest_client)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def http_client(self) -> httpx.AsyncClient | None:
        """Expose the underlying HTTP client when available."""

        return self._http_client

    @property
    def session(self) -> Session | None:
        return self.auth.session

    def require_session(self) -> Session:
        """Return the active session; raises when not logged in."""

        return self.auth.require_session()

    def _ensure_client(self) -> None:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.request_timeout)
            self._owns_http_client = True

    async def async_login(self) -> Session:
        """Log in with the configured credentials."""

        self._ensure_client()
        session = await self.auth.async_login(
            self._config.username,
            self._config.password,
            time_zone=self._config.time_zone,
            attempts=self._config.login_attempts,
        )
        _LOGGER.debug("Logged in to VeSync account %s", session.account_id)
        return session

    async def async_get_devices(self) -> list[dict[str, Any]]:
        """Return the raw device list entries of the account.

        A rejected or malformed listing is logged and reported as empty.
        """

        session = self.require_session()
        self._ensure_client()
        payload, status = await self.rest_client.async_call(
            DEVICE_LIST_PATH,
            "post",
            session.request_body("devicelist"),
            session.request_headers(),
        )
        outcome = classify(status, payload, Variant.LEGACY_FLAT)
        if not outcome.success:
            _LOGGER.error(
                "Device listing failed (HTTP %s, code %s)",
                status,
                outcome.vendor_error_code,
            )
            return []
        result = payload.get("result") if isinstance(payload, Mapping) else None
        entries = result.get("list") if isinstance(result, Mapping) else None
        if not isinstance(entries, list):
            _LOGGER.warning("Device listing did not contain a device list")
            return []
        return [dict(entry) for entry in entries if isinstance(entry, Mapping)]

    async def async_close(self) -> None:
        """Close the HTTP client when this facade created it."""

        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
        self._http_client = None
