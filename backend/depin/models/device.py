"""
Device record
"""
from sqlalchemy import (BigInteger, Boolean, CheckConstraint, Column, Float,
                        Index, String, UniqueConstraint)
from sqlalchemy.orm import relationship

from depin.core.database import Base
from depin.models.telemetry import DeviceType, LocationData

_DEVICE_TYPES = ", ".join(f"'{t.value}'" for t in DeviceType)


class Device(Base):
    """
    A physical device registered by its owner

    Keyed by the hash of (owner, device_id). Devices are never deleted; they
    are toggled inactive instead.
    """
    __tablename__ = "devices"

    key = Column(String(64), primary_key=True)
    owner = Column(String(255), nullable=False)
    device_id = Column(String(255), nullable=False)
    device_type = Column(String(20), nullable=False)

    # Last-known location
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=False)

    is_active = Column(Boolean, nullable=False, default=True)
    total_uptime = Column(BigInteger, nullable=False, default=0)  # rewarded submissions, not seconds
    total_rewards_earned = Column(BigInteger, nullable=False, default=0)
    last_activity = Column(BigInteger, nullable=False)  # unix seconds

    submissions = relationship("DataSubmission", back_populates="device")

    __table_args__ = (
        UniqueConstraint("owner", "device_id", name="uq_devices_owner_device_id"),
        CheckConstraint(f"device_type IN ({_DEVICE_TYPES})", name="devices_type_check"),
        Index("idx_devices_owner", "owner"),
        Index("idx_devices_active", "is_active"),
    )

    @property
    def location(self) -> LocationData:
        return LocationData(latitude=self.latitude, longitude=self.longitude, accuracy=self.accuracy)

    @location.setter
    def location(self, value: LocationData) -> None:
        self.latitude = value.latitude
        self.longitude = value.longitude
        self.accuracy = value.accuracy

    def __repr__(self):
        return f"<Device(key={self.key[:12]}, owner={self.owner}, device_id={self.device_id}, active={self.is_active})>"
