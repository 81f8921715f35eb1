"""
API routes for devices and their telemetry submissions
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from depin.api.dependencies import (get_device_registry, get_submission_ledger,
                                    ledger_http_error)
from depin.core.addressing import derive_device_key
from depin.core.auth import get_verified_caller
from depin.core.errors import DeviceNotFound, LedgerError
from depin.core.logging_config import LoggingConfig
from depin.models.data_submission import DataSubmission
from depin.models.device import Device
from depin.models.telemetry import DeviceType, LocationData, NetworkQualityData
from depin.services.device_registry import DeviceRegistry
from depin.services.submission_ledger import SubmissionLedger

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


class DeviceRegisterRequest(BaseModel):
    """Request to register a device"""
    device_id: str = Field(..., min_length=1, description="Caller-chosen device identifier")
    device_type: DeviceType
    location: LocationData


class LocationUpdateRequest(BaseModel):
    """Request to replace a device location"""
    location: LocationData


class DeviceResponse(BaseModel):
    """Device response model"""
    key: str
    owner: str
    device_id: str
    device_type: DeviceType
    location: LocationData
    is_active: bool
    total_uptime: int
    total_rewards_earned: int
    last_activity: int

    @classmethod
    def from_record(cls, device: Device) -> "DeviceResponse":
        return cls(
            key=device.key,
            owner=device.owner,
            device_id=device.device_id,
            device_type=DeviceType(device.device_type),
            location=device.location,
            is_active=device.is_active,
            total_uptime=device.total_uptime,
            total_rewards_earned=device.total_rewards_earned,
            last_activity=device.last_activity,
        )


class SubmissionResponse(BaseModel):
    """Submission response model"""
    key: str
    device_key: str
    timestamp: int
    quality: NetworkQualityData

    @classmethod
    def from_record(cls, submission: DataSubmission) -> "SubmissionResponse":
        return cls(
            key=submission.key,
            device_key=submission.device_key,
            timestamp=submission.timestamp,
            quality=submission.quality,
        )


class SubmissionReceiptResponse(BaseModel):
    """Committed submission with the reward it earned"""
    submission: SubmissionResponse
    reward: int
    transfer_id: Optional[str] = None
    device: DeviceResponse


@router.post("", response_model=DeviceResponse, status_code=status.HTTP_201_CREATED)
async def register_device(
    request: DeviceRegisterRequest,
    caller: str = Depends(get_verified_caller),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Register a device owned by the caller"""
    try:
        device = registry.register_device(
            owner=caller,
            device_id=request.device_id,
            device_type=request.device_type,
            initial_location=request.location,
        )
        return DeviceResponse.from_record(device)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("", response_model=List[DeviceResponse])
async def list_devices(
    owner: Optional[str] = Query(None, description="Only devices of this owner"),
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of devices"),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """List registered devices"""
    devices = registry.list_devices(owner=owner, active=active, limit=limit)
    return [DeviceResponse.from_record(d) for d in devices]


@router.get("/by-owner/{owner}/{device_id}", response_model=DeviceResponse)
async def find_device(
    owner: str,
    device_id: str,
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Get the device owner registered under device_id"""
    device = registry.find_device(owner, device_id)
    if device is None:
        raise ledger_http_error(DeviceNotFound(
            f"Device '{device_id}' of {owner} not found",
            device_key=derive_device_key(owner, device_id),
        ))
    return DeviceResponse.from_record(device)


@router.get("/{device_key}", response_model=DeviceResponse)
async def get_device(
    device_key: str,
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Get a device by key"""
    try:
        return DeviceResponse.from_record(registry.get_device(device_key))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.put("/{device_key}/location", response_model=DeviceResponse)
async def update_location(
    device_key: str,
    request: LocationUpdateRequest,
    caller: str = Depends(get_verified_caller),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Replace the location of an active device (owner only)"""
    try:
        device = registry.update_location(caller, device_key, request.location)
        return DeviceResponse.from_record(device)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.post("/{device_key}/toggle", response_model=DeviceResponse)
async def toggle_device_status(
    device_key: str,
    caller: str = Depends(get_verified_caller),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Flip a device between active and inactive (owner only)"""
    try:
        return DeviceResponse.from_record(registry.toggle_device_status(caller, device_key))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.post(
    "/{device_key}/submissions",
    response_model=SubmissionReceiptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_data(
    device_key: str,
    quality: NetworkQualityData,
    caller: str = Depends(get_verified_caller),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """Submit telemetry for a device and receive its reward (owner only)"""
    try:
        receipt = ledger.submit_data(caller, device_key, quality)
        return SubmissionReceiptResponse(
            submission=SubmissionResponse.from_record(receipt.submission),
            reward=receipt.reward,
            transfer_id=receipt.transfer_id,
            device=DeviceResponse.from_record(receipt.device),
        )
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("/{device_key}/submissions", response_model=List[SubmissionResponse])
async def list_submissions(
    device_key: str,
    limit: int = Query(50, ge=1, le=500, description="Maximum number of submissions"),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """List a device's submissions, newest first"""
    try:
        return [SubmissionResponse.from_record(s) for s in ledger.list_submissions(device_key, limit)]
    except LedgerError as e:
        raise ledger_http_error(e)
