"""Pytest configuration and shared doubles for the VeSync Ultimate tests."""

from __future__ import annotations

import asyncio
import inspect
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from vesync_ultimate.auth import Session
from vesync_ultimate.capabilities import CapabilityProfile, DeviceFamily, lookup
from vesync_ultimate.coordinator import DeviceMetadata
from vesync_ultimate.device_types import (
    VeSyncBaseDevice,
    VeSyncHumidifier,
    VeSyncPurifier,
    VeSyncTowerFan,
)
from vesync_ultimate.reconcile import ReconciliationScheduler

_FAMILY_CLASSES: dict[DeviceFamily, type[VeSyncBaseDevice]] = {
    DeviceFamily.PURIFIER: VeSyncPurifier,
    DeviceFamily.HUMIDIFIER: VeSyncHumidifier,
    DeviceFamily.TOWER_FAN: VeSyncTowerFan,
}


def pytest_configure(config: pytest.Config) -> None:
    """Register markers used throughout the test suite."""

    config.addinivalue_line(
        "markers", "asyncio: mark coroutine tests to execute via asyncio loop"
    )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute coroutine tests within a dedicated event loop."""

    test_function = pyfuncitem.obj
    if not asyncio.iscoroutinefunction(test_function):
        return None

    parameters = inspect.signature(test_function).parameters
    funcargs = {
        name: value
        for name, value in pyfuncitem.funcargs.items()
        if name in parameters
    }
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_function(**funcargs))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True


def bypass_response(
    result: Mapping[str, Any] | None = None,
    *,
    code: int = 0,
    inner_code: int = 0,
    status: int = 200,
) -> tuple[dict[str, Any], int]:
    """Return a bypassV2 style ``(body, status)`` pair."""

    return (
        {
            "code": code,
            "msg": "request success",
            "traceId": "1700000000000",
            "result": {
                "code": inner_code,
                "traceId": "1700000000000",
                "result": dict(result or {}),
            },
        },
        status,
    )


def legacy_response(
    body: Mapping[str, Any] | None = None, *, status: int = 200
) -> tuple[dict[str, Any], int]:
    """Return a flat legacy ``(body, status)`` pair."""

    return (dict(body) if body is not None else {"code": 0, "msg": None}), status


@dataclass
class RecordedCall:
    """One call received by :class:`FakeTransport`."""

    path: str
    method: str
    body: dict[str, Any]
    headers: dict[str, str]

    @property
    def payload(self) -> dict[str, Any]:
        """Return the bypass payload carried by the body."""

        return self.body["payload"]


@dataclass
class FakeTransport:
    """Transport double recording calls and replaying queued responses.

    Queued entries are ``(body, status)`` pairs or exceptions to raise. A
    ``responder`` callable, when set, answers every call instead of the queue.
    """

    responses: deque[Any] = field(default_factory=deque)
    responder: Callable[[RecordedCall], Any] | None = None
    calls: list[RecordedCall] = field(default_factory=list)

    def queue(self, *responses: Any) -> None:
        """Append ``responses`` to the replay queue."""

        self.responses.extend(responses)

    async def async_call(
        self,
        path: str,
        method: str,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[Any, int]:
        """Record the call and return the next scripted response."""

        call = RecordedCall(path, method, dict(body or {}), dict(headers or {}))
        self.calls.append(call)
        if self.responder is not None:
            response = self.responder(call)
        elif self.responses:
            response = self.responses.popleft()
        else:
            raise AssertionError(f"Unexpected call to {path}")
        if isinstance(response, BaseException):
            raise response
        return response


def device_payload(device_type: str, **overrides: Any) -> dict[str, Any]:
    """Return a device list entry for ``device_type``."""

    payload = {
        "deviceType": device_type,
        "deviceName": f"{device_type} test",
        "cid": f"cid-{device_type}",
        "uuid": f"uuid-{device_type}",
        "macID": "aa:bb:cc:dd:ee:ff",
        "configModule": f"WiFi_{device_type}",
        "deviceStatus": "on",
        "connectionStatus": "online",
        "deviceRegion": "US",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def session() -> Session:
    """Return a logged in session."""

    return Session(account_id="123456", token="token-abc", time_zone="Europe/Berlin")


@pytest.fixture
def make_device(
    session: Session,
) -> Callable[..., tuple[VeSyncBaseDevice, FakeTransport]]:
    """Return a factory building a device bound to a fresh fake transport."""

    def _factory(
        device_type: str,
        *,
        scheduler: ReconciliationScheduler | None = None,
        profile: CapabilityProfile | None = None,
        **overrides: Any,
    ) -> tuple[Any, FakeTransport]:
        transport = FakeTransport()
        metadata = DeviceMetadata.from_dict(device_payload(device_type, **overrides))
        family = (profile or lookup(device_type)).family
        device_cls = _FAMILY_CLASSES.get(family, VeSyncBaseDevice)
        device = device_cls(
            metadata,
            transport=transport,
            session_getter=lambda: session,
            scheduler=scheduler,
            profile=profile,
        )
        return device, transport

    return _factory
