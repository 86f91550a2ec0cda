"""Tests for the device state machine and the per-family devices."""

from __future__ import annotations

import logging

import httpx
import pytest

from vesync_ultimate.capabilities import (
    CapabilityProfile,
    DeviceFamily,
    FeatureTag,
    Variant,
)
from vesync_ultimate.errors import FeatureUnsupported, InvalidArgument, UnsupportedMode
from vesync_ultimate.reconcile import ReconciliationScheduler
from vesync_ultimate.state import Connectivity, PowerStatus

from conftest import bypass_response, legacy_response

CORE_300S_STATUS = {
    "enabled": True,
    "mode": "manual",
    "level": 2,
    "filter_life": 80,
    "display": True,
    "child_lock": False,
    "air_quality": 1,
    "air_quality_value": 5,
    "extension": {"timer_remain": 0},
    "device_error_code": 0,
}

VITAL_STATUS = {
    "powerSwitch": 1,
    "workMode": "manual",
    "fanSpeedLevel": 3,
    "manualSpeedLevel": 3,
    "screenSwitch": 1,
    "childLockSwitch": 0,
    "PM25": 4,
    "AQLevel": 1,
    "filterLifePercent": 95,
}


@pytest.mark.asyncio
async def test_change_level_outside_profile_returns_false(make_device) -> None:
    """A level outside the profile is rejected without a request."""

    device, transport = make_device("Core200S")

    assert await device.async_change_level(5) is False
    assert transport.calls == []
    assert device.level == 0


@pytest.mark.asyncio
async def test_unknown_mode_raises_before_request(make_device) -> None:
    """Modes outside the profile raise UnsupportedMode."""

    device, transport = make_device("Core200S")

    with pytest.raises(UnsupportedMode) as excinfo:
        await device.async_set_mode("turbo")

    assert excinfo.value.allowed == ("manual", "sleep")
    assert transport.calls == []


@pytest.mark.asyncio
async def test_core200s_auto_is_sent_as_manual(make_device) -> None:
    """Asking a Core200S for auto switches it to manual."""

    device, transport = make_device("Core200S")
    transport.queue(bypass_response())

    assert await device.async_set_mode("auto") is True

    assert transport.calls[0].payload["data"] == {"mode": "manual"}
    assert device.mode == "manual"


@pytest.mark.asyncio
async def test_details_round_trip(make_device) -> None:
    """A detail read fills the state and keeps unknown keys as extras."""

    device, transport = make_device("Core300S", connectionStatus="offline")
    transport.queue(bypass_response(CORE_300S_STATUS))

    assert device.connectivity is Connectivity.OFFLINE
    assert await device.async_get_details() is True

    call = transport.calls[0]
    assert call.payload == {"method": "getPurifierStatus", "source": "APP", "data": {}}
    assert device.power is PowerStatus.ON
    assert device.mode == "manual"
    assert device.level == 2
    assert device.filter_life == 80
    assert device.display_on is True
    assert device.air_quality_value == 5
    assert device.timer is None
    assert device.connectivity is Connectivity.ONLINE
    assert device.extras == {"device_error_code": 0}


@pytest.mark.asyncio
async def test_failed_details_change_nothing(make_device) -> None:
    """A failed read leaves every field untouched, connectivity included."""

    device, transport = make_device("Core300S")
    transport.queue(bypass_response(CORE_300S_STATUS))
    await device.async_get_details()
    before = dict(device.state)
    transport.queue((None, 503), bypass_response(code=-11300030))

    assert await device.async_get_details() is False
    assert await device.async_get_details() is False

    assert dict(device.state) == before
    assert device.connectivity is Connectivity.ONLINE


@pytest.mark.asyncio
async def test_malformed_details_are_discarded(make_device, caplog) -> None:
    """A payload failing its schema is treated as a failed read."""

    device, transport = make_device("Core300S", deviceStatus="off")
    transport.queue(bypass_response({"enabled": "yes", "level": 3}))

    with caplog.at_level(logging.WARNING):
        assert await device.async_get_details() is False

    assert device.level == 0
    assert device.power is PowerStatus.OFF
    assert "malformed" in caplog.text


@pytest.mark.asyncio
async def test_transport_faults_propagate(make_device) -> None:
    """Transport errors reach the caller and change nothing."""

    device, transport = make_device("Core300S", deviceStatus="off")
    transport.queue(httpx.ConnectError("connection refused"))

    with pytest.raises(httpx.ConnectError):
        await device.async_turn_on()

    assert device.power is PowerStatus.OFF


@pytest.mark.asyncio
async def test_reported_level_outside_profile_is_kept_in_extras(
    make_device, caplog
) -> None:
    """Out of profile readings never reach the typed fields."""

    device, transport = make_device("Core200S")
    status = dict(CORE_300S_STATUS, level=4, mode="auto")
    transport.queue(bypass_response(status))

    with caplog.at_level(logging.WARNING):
        assert await device.async_get_details() is True

    assert device.level == 0
    assert device.mode == ""
    assert device.extras["reported_level"] == 4
    assert device.extras["reported_mode"] == "auto"
    assert "outside" in caplog.text


@pytest.mark.asyncio
async def test_vital_sleep_zeroes_level(make_device) -> None:
    """Entering sleep drops the visible level to zero."""

    device, transport = make_device("LAP-V102S-WUS")
    transport.queue(bypass_response(VITAL_STATUS), bypass_response())
    await device.async_get_details()

    assert device.level == 3
    assert await device.async_set_mode("sleep") is True

    assert transport.calls[1].payload["data"] == {"workMode": "sleep"}
    assert device.mode == "sleep"
    assert device.level == 0
    assert device.manual_level == 3


@pytest.mark.asyncio
async def test_vital_read_tolerates_inner_code(make_device) -> None:
    """Vital status reads with a stale inner code still update state."""

    device, transport = make_device("LAP-V201S-WUS")
    transport.queue(bypass_response(VITAL_STATUS, inner_code=-1))

    assert await device.async_get_details() is True
    assert device.level == 3
    assert device.air_quality == 1


@pytest.mark.asyncio
async def test_vital_strict_display_write_rejects_inner_code(make_device) -> None:
    """Display writes on the Vital line still require a clean inner code."""

    device, transport = make_device("LAP-V201S-WUS")
    transport.queue(bypass_response(inner_code=-1))

    assert await device.async_set_display(True) is False
    assert device.display_on is False


@pytest.mark.asyncio
async def test_vital_tolerant_write_schedules_reconciliation(make_device) -> None:
    """Tolerated writes are applied and followed by a detail refresh."""

    scheduler = ReconciliationScheduler(delay=0)
    device, transport = make_device(
        "LAP-V201S-WUS", scheduler=scheduler, deviceStatus="off"
    )
    transport.queue(
        bypass_response(inner_code=-1),
        bypass_response(dict(VITAL_STATUS, fanSpeedLevel=4, manualSpeedLevel=4)),
    )

    assert await device.async_turn_on() is True
    assert device.power is PowerStatus.ON
    assert scheduler.pending == 1

    await scheduler.async_wait_idle()

    assert len(transport.calls) == 2
    assert transport.calls[1].payload["method"] == "getPurifierStatus"
    assert device.level == 4


@pytest.mark.asyncio
async def test_strict_write_does_not_reconcile(make_device) -> None:
    """Writes on strict variants never schedule a refresh."""

    scheduler = ReconciliationScheduler(delay=0)
    device, transport = make_device("Core300S", scheduler=scheduler)
    transport.queue(bypass_response())

    assert await device.async_change_level(3) is True

    assert scheduler.pending == 0
    assert device.level == 3
    assert device.mode == "manual"


@pytest.mark.asyncio
async def test_child_lock_without_feature_raises(make_device) -> None:
    """Tower fans have no child lock; the call fails before any request."""

    device, transport = make_device("LTF-F422S-WUS")

    with pytest.raises(FeatureUnsupported) as excinfo:
        await device.async_set_child_lock(True)

    assert excinfo.value.feature == FeatureTag.CHILD_LOCK.value
    assert transport.calls == []
    assert device.state["child_lock_on"] is False
    with pytest.raises(FeatureUnsupported):
        device.child_lock_on


@pytest.mark.asyncio
async def test_set_and_clear_timer(make_device) -> None:
    """Timers are tracked with their id and cleared idempotently."""

    device, transport = make_device("Core300S")
    transport.queue(bypass_response({"id": 42}), bypass_response())

    assert await device.async_set_timer(2) is True
    assert device.timer.remaining_seconds == 7200
    assert device.timer.timer_id == 42

    assert await device.async_clear_timer() is True
    assert transport.calls[1].payload["data"] == {"id": 42}
    assert device.timer is None

    assert await device.async_clear_timer() is True
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_clear_timer_unknown_to_device_counts_as_cleared(make_device) -> None:
    """A timer the device no longer knows is treated as cleared."""

    device, transport = make_device("Core300S")
    transport.queue(bypass_response({"id": 1}), bypass_response(inner_code=11000000))
    await device.async_set_timer(1)

    assert await device.async_clear_timer() is True
    assert device.timer is None


@pytest.mark.asyncio
async def test_timer_arguments_are_checked(make_device) -> None:
    """Non-positive durations raise and an off device is not timed."""

    device, transport = make_device("Core300S", deviceStatus="off")

    with pytest.raises(InvalidArgument):
        await device.async_set_timer(0)
    assert await device.async_set_timer(1) is False
    assert transport.calls == []


@pytest.mark.asyncio
async def test_mode_restricted_write_changes_nothing(make_device, caplog) -> None:
    """Vendor refusals in the current mode are logged and reported as False."""

    device, transport = make_device("Core300S")
    transport.queue(bypass_response(inner_code=11018000))

    with caplog.at_level(logging.WARNING):
        assert await device.async_change_level(2) is False

    assert device.level == 0
    assert "refused" in caplog.text


@pytest.mark.asyncio
async def test_feature_unsupported_code_is_downgraded(make_device, caplog) -> None:
    """The vendor's unsupported sentinel becomes a warning and False."""

    device, transport = make_device("Core300S")
    transport.queue(bypass_response(inner_code=11000000))

    with caplog.at_level(logging.WARNING):
        assert await device.async_set_display(False) is False

    assert "unsupported" in caplog.text


@pytest.mark.asyncio
async def test_legacy_level_requires_manual_mode(make_device) -> None:
    """Legacy purifiers only change level in manual mode."""

    device, transport = make_device("LV-PUR131S")

    assert await device.async_change_level(2) is False
    assert transport.calls == []

    transport.queue(
        legacy_response({"code": 0, "deviceStatus": "on", "mode": "manual", "level": 1}),
        legacy_response(),
    )
    await device.async_get_details()

    assert await device.async_change_level(2) is True
    assert transport.calls[1].path == "/131airPurifier/v1/device/updateSpeed"
    assert transport.calls[1].body["level"] == 2
    assert device.level == 2


@pytest.mark.asyncio
async def test_purifier_night_light(make_device) -> None:
    """Core200S night light takes one of its named modes."""

    device, transport = make_device("Core200S")
    transport.queue(bypass_response())

    assert await device.async_set_night_light("dim") is True
    assert transport.calls[0].payload["data"] == {"night_light": "dim"}
    assert device.night_light == "dim"

    with pytest.raises(InvalidArgument):
        await device.async_set_night_light("blink")


@pytest.mark.asyncio
async def test_night_light_accessors_respect_features(make_device) -> None:
    """Tolerant accessors default while strict lookups raise."""

    device, _ = make_device("Core300S")

    assert device.night_light == "off"
    with pytest.raises(FeatureUnsupported):
        device.get_field("night_light")
    with pytest.raises(FeatureUnsupported):
        await device.async_set_night_light("on")


@pytest.mark.asyncio
async def test_vital_auto_preference(make_device) -> None:
    """Auto preferences are checked against the profile."""

    device, transport = make_device("LAP-V102S-WUS")
    transport.queue(bypass_response())

    assert await device.async_set_auto_preference("quiet") is True
    assert transport.calls[0].payload["data"] == {
        "autoPreference": "quiet",
        "roomSize": 600,
    }
    assert device.auto_preference == "quiet"

    with pytest.raises(InvalidArgument):
        await device.async_set_auto_preference("turbo")


@pytest.mark.asyncio
async def test_light_detection_needs_vital_200s(make_device) -> None:
    """Light detection is limited to profiles that carry it."""

    vital_100, _ = make_device("LAP-V102S-WUS")
    vital_200, transport = make_device("LAP-V201S-WUS")
    transport.queue(bypass_response())

    with pytest.raises(FeatureUnsupported):
        await vital_100.async_set_light_detection(True)
    assert await vital_200.async_set_light_detection(True) is True
    assert vital_200.light_detection is True


@pytest.mark.asyncio
async def test_humidifier_target_humidity(make_device) -> None:
    """Target humidity must stay within 30 and 80 percent."""

    device, transport = make_device("Classic300S")
    transport.queue(bypass_response())

    with pytest.raises(InvalidArgument):
        await device.async_set_humidity(90)
    assert await device.async_set_humidity(50) is True

    assert transport.calls[0].payload == {
        "method": "setTargetHumidity",
        "source": "APP",
        "data": {"target_humidity": 50},
    }
    assert device.target_humidity == 50


@pytest.mark.asyncio
async def test_humidifier_warm_level(make_device) -> None:
    """Warm mist levels come from the profile."""

    device, transport = make_device("LUH-A602S-WUS")
    transport.queue(bypass_response())

    assert await device.async_set_warm_level(2) is True
    assert transport.calls[0].payload["data"] == {"id": 0, "level": 2, "type": "warm"}
    assert device.warm_enabled is True
    assert device.warm_level == 2

    with pytest.raises(InvalidArgument):
        await device.async_set_warm_level(5)
    with pytest.raises(InvalidArgument):
        await device.async_set_warm_level(0)
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_humidifier_mist_level_and_details(make_device) -> None:
    """Mist levels use the virtual level call and details fill the readings."""

    device, transport = make_device("Classic300S")
    transport.queue(
        bypass_response(
            {
                "enabled": True,
                "mode": "manual",
                "humidity": 41,
                "mist_virtual_level": 3,
                "water_lacks": False,
                "configuration": {"auto_target_humidity": 55},
            }
        ),
        bypass_response(),
    )
    await device.async_get_details()

    assert device.humidity == 41
    assert device.target_humidity == 55
    assert device.mist_level == 3

    assert await device.async_set_mist_level(6) is True
    assert transport.calls[1].payload["data"] == {"id": 0, "level": 6, "type": "mist"}
    assert device.mist_level == 6


@pytest.mark.asyncio
async def test_superior_drying_and_brightness_checks(make_device) -> None:
    """Drying is a Superior 6000S feature; brightness needs a night light."""

    superior, transport = make_device("LEH-S601S-WUS")
    classic, _ = make_device("Classic300S")
    transport.queue(bypass_response())

    assert await superior.async_set_drying(True) is True
    assert transport.calls[0].payload["data"] == {"autoDryingSwitch": 1}
    assert superior.drying is True
    with pytest.raises(FeatureUnsupported):
        await superior.async_set_night_light_brightness(50)
    with pytest.raises(InvalidArgument):
        await classic.async_set_night_light_brightness(150)


@pytest.mark.asyncio
async def test_tower_fan_oscillation(make_device) -> None:
    """Tower fans toggle oscillation through setSwitch."""

    device, transport = make_device("LTF-F422S-WUS")
    transport.queue(bypass_response())

    assert await device.async_set_oscillation(True) is True
    assert transport.calls[0].payload["data"] == {
        "oscillationSwitch": 1,
        "switchIdx": 0,
    }
    assert device.oscillation is True


@pytest.mark.asyncio
async def test_tower_fan_modes(make_device) -> None:
    """Tower fans switch between normal and advanced sleep only."""

    device, transport = make_device("LTF-F422S-WUS")
    transport.queue(bypass_response())

    assert await device.async_set_mode("advancedSleep") is True
    assert transport.calls[0].payload["method"] == "setTowerFanMode"
    assert transport.calls[0].payload["data"] == {"workMode": "advancedSleep"}
    assert device.mode == "advancedSleep"

    for mode in ("turbo", "auto"):
        with pytest.raises(UnsupportedMode):
            await device.async_set_mode(mode)
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_bypass_v2_purifier_level_and_mode_rules(make_device) -> None:
    """Levels and modes follow the profile; sleep hides the level."""

    profile = CapabilityProfile(
        variant=Variant.BYPASS_V2,
        family=DeviceFamily.PURIFIER,
        levels=(1, 2, 3, 4),
        modes=("auto", "manual", "sleep"),
    )
    device, transport = make_device("LAP-EL551S-WUS", profile=profile)
    transport.queue(
        bypass_response(
            {
                "powerSwitch": 1,
                "workMode": "manual",
                "fanSpeedLevel": 2,
                "manualSpeedLevel": 2,
            }
        ),
        bypass_response(),
    )
    assert await device.async_get_details() is True
    assert (device.mode, device.level) == ("manual", 2)
    before = dict(device.state)

    assert await device.async_change_level(5) is False
    assert dict(device.state) == before
    with pytest.raises(UnsupportedMode):
        await device.async_set_mode("turbo")
    assert len(transport.calls) == 1

    assert await device.async_set_mode("sleep") is True
    assert transport.calls[1].payload["data"] == {"workMode": "sleep"}
    assert device.mode == "sleep"
    assert device.level == 0


@pytest.mark.asyncio
async def test_superior_humidity_mode(make_device) -> None:
    """The Superior 6000S reports and accepts the humidity mode."""

    device, transport = make_device("LEH-S601S-WUS")
    transport.queue(
        bypass_response({"powerSwitch": 1, "workMode": "humidity", "virtualLevel": 4}),
        bypass_response(),
    )

    assert await device.async_get_details() is True
    assert device.mode == "humidity"
    assert "reported_mode" not in device.extras

    assert await device.async_set_mode("humidity") is True
    assert transport.calls[1].payload["method"] == "setHumidityMode"
    assert transport.calls[1].payload["data"] == {"workMode": "humidity"}
    with pytest.raises(FeatureUnsupported):
        await device.async_set_automatic_stop(True)
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_classic200s_mist_levels_and_sleep(make_device) -> None:
    """The Classic200S has three mist levels and a sleep mode."""

    device, transport = make_device("Classic200S")
    transport.queue(bypass_response())

    assert await device.async_change_level(7) is False
    assert transport.calls == []

    assert await device.async_set_mode("sleep") is True
    assert transport.calls[0].payload["method"] == "setHumidityMode"
    assert transport.calls[0].payload["data"] == {"mode": "sleep"}
    assert device.mode == "sleep"
