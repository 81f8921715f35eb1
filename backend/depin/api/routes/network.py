"""
API routes for the network state
"""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from depin.api.dependencies import ledger_http_error
from depin.core.auth import get_verified_caller
from depin.core.database import get_db
from depin.core.errors import LedgerError
from depin.core.logging_config import LoggingConfig
from depin.models.network_state import NetworkState
from depin.services.network_state_manager import NetworkStateManager

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/network", tags=["network"])


class NetworkStateResponse(BaseModel):
    """Network state response model"""
    authority: str
    total_devices: int
    total_rewards_distributed: int
    is_active: bool

    @classmethod
    def from_record(cls, state: NetworkState) -> "NetworkStateResponse":
        return cls(
            authority=state.authority,
            total_devices=state.total_devices,
            total_rewards_distributed=state.total_rewards_distributed,
            is_active=state.is_active,
        )


@router.post("/initialize", response_model=NetworkStateResponse, status_code=status.HTTP_201_CREATED)
async def initialize_network(
    caller: str = Depends(get_verified_caller),
    db: Session = Depends(get_db),
):
    """Create the network state; the caller becomes the authority"""
    try:
        state = NetworkStateManager(db).initialize(caller)
        return NetworkStateResponse.from_record(state)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("", response_model=NetworkStateResponse)
async def get_network_state(db: Session = Depends(get_db)):
    """Get the network state"""
    try:
        return NetworkStateResponse.from_record(NetworkStateManager(db).get_state())
    except LedgerError as e:
        raise ledger_http_error(e)


@router.post("/pause", response_model=NetworkStateResponse)
async def pause_network(
    caller: str = Depends(get_verified_caller),
    db: Session = Depends(get_db),
):
    """Pause the network (authority only)"""
    try:
        return NetworkStateResponse.from_record(NetworkStateManager(db).pause(caller))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.post("/resume", response_model=NetworkStateResponse)
async def resume_network(
    caller: str = Depends(get_verified_caller),
    db: Session = Depends(get_db),
):
    """Resume the network (authority only)"""
    try:
        return NetworkStateResponse.from_record(NetworkStateManager(db).resume(caller))
    except LedgerError as e:
        raise ledger_http_error(e)
