"""
Device registry: registration and lifecycle of devices
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from depin.core.access import AccessController, Operation
from depin.core.addressing import derive_device_key
from depin.core.clock import Clock
from depin.core.config import Settings, get_settings
from depin.core.database import atomic, is_unique_violation
from depin.core.errors import (DeviceInactive, DeviceNotFound, DuplicateDevice,
                               InvalidDeviceId)
from depin.core.logging_config import LoggingConfig
from depin.core.metrics import devices_registered_total
from depin.core.operations import ledger_operation
from depin.models.device import Device
from depin.models.network_state import NetworkState
from depin.models.telemetry import DeviceType, LocationData
from depin.services.network_state_manager import NetworkStateManager

logger = LoggingConfig.get_logger(__name__)


class DeviceRegistry:
    """Owns device records: register, update location, toggle active"""

    def __init__(
        self,
        db: Session,
        clock: Clock,
        access: Optional[AccessController] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.clock = clock
        self.access = access or AccessController()
        self.settings = settings or get_settings()
        self.network = NetworkStateManager(db, access=self.access)

    def get_device(self, device_key: str, for_update: bool = False) -> Device:
        """
        Get a device by key

        Raises:
            DeviceNotFound: If no device has this key
        """
        device = self.db.get(Device, device_key, with_for_update=for_update)
        if device is None:
            raise DeviceNotFound(f"Device {device_key} not found", device_key=device_key)
        return device

    def find_device(self, owner: str, device_id: str) -> Optional[Device]:
        """Get the device registered by owner under device_id, if any"""
        return self.db.get(Device, derive_device_key(owner, device_id))

    def list_devices(
        self,
        owner: Optional[str] = None,
        active: Optional[bool] = None,
        limit: int = 100,
    ) -> List[Device]:
        """
        List devices

        Args:
            owner: Only devices of this owner
            active: Only active (True) or inactive (False) devices
            limit: Maximum number of devices
        """
        query = self.db.query(Device)
        if owner is not None:
            query = query.filter(Device.owner == owner)
        if active is not None:
            query = query.filter(Device.is_active == active)
        return query.order_by(Device.owner, Device.device_id).limit(limit).all()

    def validate_device_id(self, device_id: str) -> None:
        """
        Raises:
            InvalidDeviceId: If device_id is empty or longer than the configured byte limit
        """
        size = len(device_id.encode("utf-8")) if device_id else 0
        if size == 0 or size > self.settings.max_device_id_length:
            raise InvalidDeviceId(
                f"Device id must be 1-{self.settings.max_device_id_length} bytes, got {size}"
            )

    @ledger_operation(Operation.REGISTER_DEVICE)
    def register_device(
        self,
        owner: str,
        device_id: str,
        device_type: DeviceType,
        initial_location: LocationData,
    ) -> Device:
        """
        Register a new device for owner

        Args:
            owner: Verified identity of the registering caller
            device_id: Caller-chosen identifier, unique per owner
            device_type: Kind of device
            initial_location: Starting location

        Returns:
            Created Device

        Raises:
            NotInitialized: If the network has not been initialized
            InvalidDeviceId: If device_id is empty or too long
            DuplicateDevice: If owner already registered device_id
        """
        self.access.authorize(Operation.REGISTER_DEVICE, owner)
        self.validate_device_id(device_id)
        device_type = DeviceType(device_type)
        key = derive_device_key(owner, device_id)

        with atomic(self.db):
            state = self.network.get_state(for_update=True)
            if self.db.get(Device, key) is not None:
                raise DuplicateDevice(
                    f"Device '{device_id}' is already registered for {owner}",
                    device_key=key,
                )

            device = Device(
                key=key,
                owner=owner,
                device_id=device_id,
                device_type=device_type.value,
                is_active=True,
                total_uptime=0,
                total_rewards_earned=0,
                last_activity=self.clock.now(),
            )
            device.location = initial_location
            self.db.add(device)
            state.total_devices = NetworkState.total_devices + 1
            try:
                self.db.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                # Lost a concurrent registration of the same key
                raise DuplicateDevice(
                    f"Device '{device_id}' is already registered for {owner}",
                    device_key=key,
                ) from e

        devices_registered_total.labels(device_type=device_type.value).inc()
        logger.info(
            f"Device registered: {device_id}",
            extra={"device_key": key, "owner": owner, "device_type": device_type.value},
        )
        return device

    @ledger_operation(Operation.UPDATE_LOCATION)
    def update_location(self, caller: str, device_key: str, new_location: LocationData) -> Device:
        """
        Replace the location of an active device (owner only)

        Raises:
            DeviceNotFound: If no device has this key
            Unauthorized: If caller is not the owner
            DeviceInactive: If the device is inactive
        """
        with atomic(self.db):
            device = self.get_device(device_key, for_update=True)
            self.access.authorize(Operation.UPDATE_LOCATION, caller, device=device)
            if not device.is_active:
                raise DeviceInactive(device_key=device_key)

            device.location = new_location
            device.last_activity = self.clock.now()

        logger.info("Device location updated", extra={"device_key": device_key})
        return device

    @ledger_operation(Operation.TOGGLE_DEVICE_STATUS)
    def toggle_device_status(self, caller: str, device_key: str) -> Device:
        """
        Flip a device between active and inactive (owner only)

        Raises:
            DeviceNotFound: If no device has this key
            Unauthorized: If caller is not the owner
        """
        with atomic(self.db):
            device = self.get_device(device_key, for_update=True)
            self.access.authorize(Operation.TOGGLE_DEVICE_STATUS, caller, device=device)
            device.is_active = not device.is_active
            device.last_activity = self.clock.now()

        logger.info(
            f"Device status toggled to: {device.is_active}",
            extra={"device_key": device_key, "is_active": device.is_active},
        )
        return device
