"""Tests for the account API facade."""

from __future__ import annotations

import json

import httpx
import pytest

from vesync_ultimate.api import VeSyncAPIClient
from vesync_ultimate.config import ClientConfig
from vesync_ultimate.errors import VeSyncSessionError

from conftest import device_payload

CONFIG = ClientConfig(username="user@example.com", password="password")

LOGIN_OK = {"code": 0, "result": {"accountID": "987", "token": "tk-1"}}


class VendorCloud:
    """MockTransport handler emulating the login and listing endpoints."""

    def __init__(self, listing: dict[str, object]) -> None:
        """Store the device listing body to serve."""

        self.listing = listing
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        """Answer ``request`` by path."""

        self.requests.append(request)
        if request.url.path == "/cloud/v1/user/login":
            return httpx.Response(200, json=LOGIN_OK)
        if request.url.path == "/cloud/v2/deviceManaged/devices":
            return httpx.Response(200, json=self.listing)
        return httpx.Response(404)


@pytest.mark.asyncio
async def test_login_and_list_devices() -> None:
    """The listing is fetched with the session credentials."""

    cloud = VendorCloud(
        {
            "code": 0,
            "result": {
                "list": [device_payload("Core300S"), "garbage"],
                "total": 1,
            },
        }
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(cloud))
    api = VeSyncAPIClient(CONFIG, http_client=http_client)

    await api.async_login()
    devices = await api.async_get_devices()
    await http_client.aclose()

    assert [device["deviceType"] for device in devices] == ["Core300S"]
    listing_request = cloud.requests[1]
    body = json.loads(listing_request.content)
    assert body["method"] == "devices"
    assert body["token"] == "tk-1"
    assert body["accountID"] == "987"
    assert listing_request.headers["tk"] == "tk-1"


@pytest.mark.asyncio
async def test_rejected_listing_is_empty() -> None:
    """A vendor rejection of the listing yields no devices."""

    cloud = VendorCloud({"code": -11001000, "msg": "token expired"})
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(cloud))
    api = VeSyncAPIClient(CONFIG, http_client=http_client)

    await api.async_login()
    assert await api.async_get_devices() == []
    await http_client.aclose()


@pytest.mark.asyncio
async def test_listing_requires_login() -> None:
    """Listing devices before logging in raises."""

    api = VeSyncAPIClient(CONFIG)

    with pytest.raises(VeSyncSessionError):
        await api.async_get_devices()
    assert api.http_client is None


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open() -> None:
    """Only HTTP clients created by the facade are closed."""

    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )
    api = VeSyncAPIClient(CONFIG, http_client=http_client)

    await api.async_close()

    assert api.http_client is None
    assert not http_client.is_closed
    await http_client.aclose()
