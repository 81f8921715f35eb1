"""
Ledger error kinds

Every failed operation raises exactly one of these. The enclosing unit of
work is rolled back and the error reaches the caller unchanged, carrying a
stable ``code`` that clients can match on.
"""
from typing import Any, Dict, Optional


class LedgerError(Exception):
    """Base class for all ledger operation failures"""

    code: str = "ledger_error"
    status_code: int = 400
    default_message: str = "Ledger operation failed"

    def __init__(self, message: Optional[str] = None, **metadata: Any):
        self.message = message or self.default_message
        self.metadata = metadata
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        data: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.metadata:
            data["metadata"] = self.metadata
        return data


class AlreadyInitialized(LedgerError):
    code = "already_initialized"
    status_code = 409
    default_message = "Network state is already initialized"


class NotInitialized(LedgerError):
    code = "not_initialized"
    status_code = 409
    default_message = "Network state has not been initialized"


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403
    default_message = "Caller is not permitted to perform this operation"


class DeviceNotFound(LedgerError):
    code = "device_not_found"
    status_code = 404
    default_message = "Device not found"


class DeviceInactive(LedgerError):
    code = "device_inactive"
    status_code = 409
    default_message = "Device is not active"


class DuplicateDevice(LedgerError):
    code = "duplicate_device"
    status_code = 409
    default_message = "Device is already registered for this owner"


class InvalidDeviceId(LedgerError):
    code = "invalid_device_id"
    status_code = 422
    default_message = "Device identifier is empty or too long"


class DuplicateSubmission(LedgerError):
    code = "duplicate_submission"
    status_code = 409
    default_message = "A submission for this device already exists at this timestamp"


class ProgramPaused(LedgerError):
    code = "program_paused"
    status_code = 409
    default_message = "Program is paused"


class InvalidDataQuality(LedgerError):
    code = "invalid_data_quality"
    status_code = 422
    default_message = "Invalid data quality"


class InsufficientRewards(LedgerError):
    code = "insufficient_rewards"
    status_code = 409
    default_message = "Insufficient rewards in vault"


class TransferFailed(LedgerError):
    code = "transfer_failed"
    status_code = 502
    default_message = "Reward transfer failed"


class RewardOverflow(LedgerError):
    code = "reward_overflow"
    status_code = 409
    default_message = "Reward would overflow the reward counters"
