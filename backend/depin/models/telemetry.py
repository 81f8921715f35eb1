"""
Telemetry value types shared by records, services and the API
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
UINT32_MAX = 2 ** 32 - 1
# Stored in signed BIGINT columns
UINT64_STORABLE_MAX = 2 ** 63 - 1


class DeviceType(str, Enum):
    """Kinds of physical devices that can join the network"""
    SMARTPHONE = "Smartphone"
    ROUTER = "Router"
    IOT_DEVICE = "IoTDevice"
    HOTSPOT = "Hotspot"


class LocationData(BaseModel):
    """Last-known position of a device"""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float
    longitude: float
    accuracy: float


class NetworkQualityData(BaseModel):
    """
    One network-quality measurement submitted by a device

    Integer fields carry the bounds of their record columns. Availability is
    taken as supplied; no range is enforced on it.
    """
    model_config = ConfigDict(frozen=True)

    signal_strength: int = Field(..., ge=INT32_MIN, le=INT32_MAX, description="Signal strength (dBm)")
    latency: int = Field(..., ge=0, le=UINT32_MAX, description="Latency (ms)")
    throughput: int = Field(..., ge=0, le=UINT64_STORABLE_MAX, description="Throughput (bits/s)")
    availability: float = Field(..., description="Availability ratio, expected in [0, 1]")
    location: LocationData
