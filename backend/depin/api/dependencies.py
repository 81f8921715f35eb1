"""
Shared route dependencies
"""
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from depin.core.clock import Clock
from depin.core.collaborators import get_clock, get_transfer_service
from depin.core.database import get_db
from depin.core.errors import LedgerError
from depin.services.device_registry import DeviceRegistry
from depin.services.submission_ledger import SubmissionLedger
from depin.services.transfer_service import TransferService


def ledger_http_error(error: LedgerError) -> HTTPException:
    """Translate a ledger error into an HTTP error carrying its code"""
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def get_device_registry(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DeviceRegistry:
    return DeviceRegistry(db, clock)


def get_submission_ledger(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    transfer_service: TransferService = Depends(get_transfer_service),
) -> SubmissionLedger:
    return SubmissionLedger(db, clock, transfer_service)
