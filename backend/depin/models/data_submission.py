"""
Telemetry submission record (append-only)
"""
from sqlalchemy import (BigInteger, Column, Float, ForeignKey, Index, Integer,
                        String, UniqueConstraint)
from sqlalchemy.orm import relationship

from depin.core.database import Base
from depin.models.telemetry import LocationData, NetworkQualityData


class DataSubmission(Base):
    """Immutable snapshot of one telemetry submission, keyed by (device, timestamp)"""
    __tablename__ = "data_submissions"

    key = Column(String(64), primary_key=True)
    device_key = Column(String(64), ForeignKey("devices.key"), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # unix seconds

    signal_strength = Column(Integer, nullable=False)
    latency = Column(BigInteger, nullable=False)
    throughput = Column(BigInteger, nullable=False)
    availability = Column(Float, nullable=False)

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=False)

    device = relationship("Device", back_populates="submissions")

    __table_args__ = (
        UniqueConstraint("device_key", "timestamp", name="uq_data_submissions_device_timestamp"),
        Index("idx_data_submissions_device", "device_key"),
    )

    @classmethod
    def snapshot(cls, key: str, device_key: str, timestamp: int, quality: NetworkQualityData) -> "DataSubmission":
        """Build a submission record from a telemetry measurement"""
        return cls(
            key=key,
            device_key=device_key,
            timestamp=timestamp,
            signal_strength=quality.signal_strength,
            latency=quality.latency,
            throughput=quality.throughput,
            availability=quality.availability,
            latitude=quality.location.latitude,
            longitude=quality.location.longitude,
            accuracy=quality.location.accuracy,
        )

    @property
    def location(self) -> LocationData:
        return LocationData(latitude=self.latitude, longitude=self.longitude, accuracy=self.accuracy)

    @property
    def quality(self) -> NetworkQualityData:
        return NetworkQualityData(
            signal_strength=self.signal_strength,
            latency=self.latency,
            throughput=self.throughput,
            availability=self.availability,
            location=self.location,
        )

    def __repr__(self):
        return f"<DataSubmission(device={self.device_key[:12]}, timestamp={self.timestamp})>"
