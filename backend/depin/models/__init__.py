"""
SQLAlchemy models
"""
from depin.core.database import Base
# Import all models here so Alembic can detect them
from depin.models.data_submission import DataSubmission  # noqa: F401
from depin.models.device import Device  # noqa: F401
from depin.models.network_state import NetworkState  # noqa: F401
from depin.models.telemetry import (DeviceType, LocationData,  # noqa: F401
                                    NetworkQualityData)

__all__ = [
    "Base",
    "NetworkState",
    "Device",
    "DataSubmission",
    "DeviceType",
    "LocationData",
    "NetworkQualityData",
]
