"""Configuration schema for the VeSync Ultimate client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    API_BASE_URL,
    API_TIMEOUT,
    DEFAULT_LOGIN_ATTEMPTS,
    DEFAULT_RECONCILE_DELAY,
    DEFAULT_TIME_ZONE,
    DEFAULT_UPDATE_INTERVAL,
)

CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_TIME_ZONE = "time_zone"
CONF_API_BASE_URL = "api_base_url"
CONF_REQUEST_TIMEOUT = "request_timeout"
CONF_RECONCILE_DELAY = "reconcile_delay"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_LOGIN_ATTEMPTS = "login_attempts"

_NON_EMPTY_STR = vol.All(str, vol.Strip, vol.Length(min=1))
_SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_USERNAME): _NON_EMPTY_STR,
        vol.Required(CONF_PASSWORD): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_TIME_ZONE, default=DEFAULT_TIME_ZONE): _NON_EMPTY_STR,
        vol.Optional(CONF_API_BASE_URL, default=API_BASE_URL): vol.All(
            str, vol.Url()
        ),
        vol.Optional(CONF_REQUEST_TIMEOUT, default=API_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_RECONCILE_DELAY, default=DEFAULT_RECONCILE_DELAY): _SECONDS,
        vol.Optional(CONF_UPDATE_INTERVAL, default=DEFAULT_UPDATE_INTERVAL): _SECONDS,
        vol.Optional(CONF_LOGIN_ATTEMPTS, default=DEFAULT_LOGIN_ATTEMPTS): vol.All(
            int, vol.Range(min=1, max=10)
        ),
    }
)


@dataclass(frozen=True)
class ClientConfig:
    """Validated client settings."""

    username: str
    password: str
    time_zone: str = DEFAULT_TIME_ZONE
    api_base_url: str = API_BASE_URL
    request_timeout: float = API_TIMEOUT
    reconcile_delay: float = DEFAULT_RECONCILE_DELAY
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    login_attempts: int = DEFAULT_LOGIN_ATTEMPTS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientConfig:
        """Validate ``data`` against the schema and build the config."""

        validated = CONFIG_SCHEMA(dict(data))
        return cls(**validated)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(username={self.username!r}, time_zone={self.time_zone!r}, "
            f"api_base_url={self.api_base_url!r})"
        )
