"""
Tests for DeviceRegistry
"""
import pytest
from pydantic import ValidationError

from conftest import ALICE, BOB, make_location
from depin.core.addressing import derive_device_key
from depin.core.errors import (DeviceInactive, DeviceNotFound, DuplicateDevice,
                               InvalidDeviceId, NotInitialized, Unauthorized)
from depin.models.device import Device
from depin.models.telemetry import DeviceType


def test_register_device(initialized, registry, network, clock):
    device = registry.register_device(ALICE, "router-7", DeviceType.ROUTER, make_location())

    assert device.key == derive_device_key(ALICE, "router-7")
    assert device.owner == ALICE
    assert device.device_type == "Router"
    assert device.is_active is True
    assert device.total_uptime == 0
    assert device.total_rewards_earned == 0
    assert device.last_activity == clock.now()
    assert device.location == make_location()
    assert network.get_state().total_devices == 1


def test_register_accepts_plain_device_type_value(initialized, registry):
    device = registry.register_device(ALICE, "hs-1", "Hotspot", make_location())
    assert device.device_type == DeviceType.HOTSPOT.value


def test_register_before_initialize(registry, db):
    with pytest.raises(NotInitialized):
        registry.register_device(ALICE, "phone-1", DeviceType.SMARTPHONE, make_location())
    assert db.query(Device).count() == 0


def test_scenario_d_duplicate_registration(initialized, registry, network, db):
    registry.register_device(ALICE, "phone-1", DeviceType.SMARTPHONE, make_location())

    with pytest.raises(DuplicateDevice):
        registry.register_device(ALICE, "phone-1", DeviceType.IOT_DEVICE, make_location(1.0, 2.0, 3.0))

    assert network.get_state().total_devices == 1
    assert db.query(Device).count() == 1


def test_same_device_id_for_different_owners(initialized, registry, network):
    a = registry.register_device(ALICE, "phone-1", DeviceType.SMARTPHONE, make_location())
    b = registry.register_device(BOB, "phone-1", DeviceType.SMARTPHONE, make_location())

    assert a.key != b.key
    assert network.get_state().total_devices == 2


def test_total_devices_counts_every_registration(initialized, registry, network):
    for i in range(5):
        registry.register_device(ALICE, f"iot-{i}", DeviceType.IOT_DEVICE, make_location())
    registry.toggle_device_status(ALICE, derive_device_key(ALICE, "iot-0"))

    # Deactivation never decrements the counter
    assert network.get_state().total_devices == 5


@pytest.mark.parametrize("device_id", ["", "x" * 33, "é" * 17])
def test_invalid_device_id(initialized, registry, network, device_id):
    with pytest.raises(InvalidDeviceId):
        registry.register_device(ALICE, device_id, DeviceType.SMARTPHONE, make_location())
    assert network.get_state().total_devices == 0


def test_device_id_at_byte_limit(initialized, registry):
    device = registry.register_device(ALICE, "x" * 32, DeviceType.SMARTPHONE, make_location())
    assert device.device_id == "x" * 32


def test_update_location(alice_device, registry, clock):
    clock.advance(30)
    new_location = make_location(48.85, 2.35, 10.0)

    device = registry.update_location(ALICE, alice_device.key, new_location)

    assert device.location == new_location
    assert device.last_activity == clock.now()


def test_update_location_by_non_owner(alice_device, registry):
    with pytest.raises(Unauthorized):
        registry.update_location(BOB, alice_device.key, make_location(0.0, 0.0, 1.0))
    assert registry.get_device(alice_device.key).location == make_location()


def test_update_location_of_inactive_device(alice_device, registry):
    registry.toggle_device_status(ALICE, alice_device.key)

    with pytest.raises(DeviceInactive):
        registry.update_location(ALICE, alice_device.key, make_location(0.0, 0.0, 1.0))


def test_update_location_checks_owner_before_active_flag(alice_device, registry):
    registry.toggle_device_status(ALICE, alice_device.key)

    with pytest.raises(Unauthorized):
        registry.update_location(BOB, alice_device.key, make_location(0.0, 0.0, 1.0))


def test_toggle_twice_restores_status(alice_device, registry, clock):
    registered_at = alice_device.last_activity

    clock.advance(10)
    first = registry.toggle_device_status(ALICE, alice_device.key)
    assert first.is_active is False
    assert first.last_activity == registered_at + 10

    clock.advance(10)
    second = registry.toggle_device_status(ALICE, alice_device.key)
    assert second.is_active is True
    assert second.last_activity == registered_at + 20


def test_toggle_by_non_owner(alice_device, registry):
    with pytest.raises(Unauthorized):
        registry.toggle_device_status(BOB, alice_device.key)
    assert registry.get_device(alice_device.key).is_active is True


def test_unknown_device(initialized, registry):
    with pytest.raises(DeviceNotFound):
        registry.toggle_device_status(ALICE, "0" * 64)


def test_find_and_list_devices(initialized, registry):
    registry.register_device(ALICE, "phone-1", DeviceType.SMARTPHONE, make_location())
    registry.register_device(ALICE, "phone-2", DeviceType.SMARTPHONE, make_location())
    bob_device = registry.register_device(BOB, "router-1", DeviceType.ROUTER, make_location())
    registry.toggle_device_status(BOB, bob_device.key)

    assert registry.find_device(ALICE, "phone-2").device_id == "phone-2"
    assert registry.find_device(ALICE, "missing") is None
    assert [d.device_id for d in registry.list_devices(owner=ALICE)] == ["phone-1", "phone-2"]
    assert [d.device_id for d in registry.list_devices(active=False)] == ["router-1"]
    assert len(registry.list_devices(limit=2)) == 2


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_location_rejected(bad):
    with pytest.raises(ValidationError):
        make_location(latitude=bad)
    with pytest.raises(ValidationError):
        make_location(accuracy=bad)
