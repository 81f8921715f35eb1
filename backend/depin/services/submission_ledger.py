"""
Submission ledger: telemetry intake and reward payout
"""
import math
import time
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from depin.core.access import AccessController, Operation
from depin.core.addressing import derive_submission_key
from depin.core.clock import Clock
from depin.core.config import Settings, get_settings
from depin.core.database import atomic, is_unique_violation
from depin.core.errors import (DeviceInactive, DuplicateSubmission,
                               InsufficientRewards, InvalidDataQuality,
                               ProgramPaused, RewardOverflow, TransferFailed)
from depin.core.logging_config import LoggingConfig
from depin.core.metrics import (reward_amount, rewards_distributed_total,
                                submissions_total, transfer_duration_seconds)
from depin.core.operations import ledger_operation
from depin.models.data_submission import DataSubmission
from depin.models.device import Device
from depin.models.network_state import NetworkState
from depin.models.telemetry import UINT64_STORABLE_MAX, NetworkQualityData
from depin.services.device_registry import DeviceRegistry
from depin.services.network_state_manager import NetworkStateManager
from depin.services.reward_engine import reward_breakdown
from depin.services.transfer_service import (TransferFailureReason,
                                             TransferService)

logger = LoggingConfig.get_logger(__name__)


@dataclass(frozen=True)
class SubmissionReceipt:
    """Result of a committed submission"""
    submission: DataSubmission
    device: Device
    reward: int
    transfer_id: Optional[str] = None

    @property
    def rewarded(self) -> bool:
        return self.reward > 0


class SubmissionLedger:
    """Owns the append-only submission records and the reward flow"""

    def __init__(
        self,
        db: Session,
        clock: Clock,
        transfer_service: TransferService,
        access: Optional[AccessController] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.clock = clock
        self.transfer_service = transfer_service
        self.access = access or AccessController()
        self.settings = settings or get_settings()
        self.devices = DeviceRegistry(db, clock, access=self.access, settings=self.settings)
        self.network = NetworkStateManager(db, access=self.access)

    def get_submission(self, key: str) -> Optional[DataSubmission]:
        """Get a submission by key"""
        return self.db.get(DataSubmission, key)

    def list_submissions(self, device_key: str, limit: int = 50) -> List[DataSubmission]:
        """
        List a device's submissions, newest first

        Raises:
            DeviceNotFound: If no device has this key
        """
        self.devices.get_device(device_key)
        return (
            self.db.query(DataSubmission)
            .filter(DataSubmission.device_key == device_key)
            .order_by(DataSubmission.timestamp.desc())
            .limit(limit)
            .all()
        )

    @ledger_operation(Operation.SUBMIT_DATA)
    def submit_data(self, caller: str, device_key: str, quality: NetworkQualityData) -> SubmissionReceipt:
        """
        Record a telemetry submission and pay its reward

        Snapshot, transfer and counter updates commit together; a failed
        transfer leaves no trace of the submission.

        Args:
            caller: Verified identity of the caller
            device_key: Key of the submitting device
            quality: Measured telemetry

        Returns:
            SubmissionReceipt with the stored submission and the reward paid

        Raises:
            DeviceNotFound: If no device has this key
            DeviceInactive: If the device is inactive
            Unauthorized: If caller is not the device owner
            NotInitialized: If the network has not been initialized
            ProgramPaused: If the network is paused and pause enforcement is on
            DuplicateSubmission: If the device already submitted at this timestamp
            InvalidDataQuality: If availability is NaN
            RewardOverflow: If the reward would overflow a reward counter
            InsufficientRewards: If the reward pool cannot cover the reward
            TransferFailed: If the transfer collaborator fails otherwise
        """
        with atomic(self.db):
            device = self.devices.get_device(device_key, for_update=True)
            if not device.is_active:
                raise DeviceInactive(device_key=device_key)
            self.access.authorize(Operation.SUBMIT_DATA, caller, device=device)

            state = self.network.get_state(for_update=True)
            # The pause flag is not consulted unless enforcement is configured
            if self.settings.enforce_network_pause and not state.is_active:
                raise ProgramPaused(device_key=device_key)

            timestamp = self.clock.now()
            key = derive_submission_key(device_key, timestamp)
            if self.db.get(DataSubmission, key) is not None:
                raise DuplicateSubmission(device_key=device_key, timestamp=timestamp)

            # NaN has no stored representation; the range itself is not enforced
            if math.isnan(quality.availability):
                raise InvalidDataQuality("Availability must be a number", device_key=device_key)

            submission = DataSubmission.snapshot(key, device_key, timestamp, quality)
            self.db.add(submission)
            try:
                self.db.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                raise DuplicateSubmission(device_key=device_key, timestamp=timestamp) from e

            breakdown = reward_breakdown(quality, device.total_uptime)
            reward = breakdown.amount
            transfer_id = None

            if reward > 0:
                self._check_counter_headroom(device, state, reward)
                transfer_id = self._pay_reward(caller, reward, key)

                device.total_rewards_earned = Device.total_rewards_earned + reward
                device.total_uptime = Device.total_uptime + 1
                device.last_activity = timestamp
                state.total_rewards_distributed = NetworkState.total_rewards_distributed + reward
                self.db.flush()

        submissions_total.labels(outcome="rewarded" if reward > 0 else "unrewarded").inc()
        if reward > 0:
            rewards_distributed_total.inc(reward)
            reward_amount.observe(reward)

        logger.info(
            f"Data submitted and rewards distributed: {reward} tokens",
            extra={
                "device_key": device_key,
                "submission_key": key,
                "reward": reward,
                "multipliers": breakdown.to_dict(),
            },
        )
        return SubmissionReceipt(submission=submission, device=device, reward=reward, transfer_id=transfer_id)

    @staticmethod
    def _check_counter_headroom(device: Device, state: NetworkState, reward: int) -> None:
        """Raise RewardOverflow before any transfer when a counter could not hold the reward"""
        if (device.total_rewards_earned + reward > UINT64_STORABLE_MAX
                or state.total_rewards_distributed + reward > UINT64_STORABLE_MAX):
            raise RewardOverflow(
                f"Reward of {reward} units exceeds the reward counters' capacity",
                device_key=device.key,
                reward=reward,
            )

    def _pay_reward(self, recipient: str, reward: int, reference: str) -> Optional[str]:
        """Transfer reward from the pool or raise; the caller rolls back on raise"""
        start = time.time()
        result = self.transfer_service.transfer(
            from_pool=self.settings.reward_pool_account,
            to_destination=recipient,
            amount=reward,
            reference=reference,
        )
        transfer_duration_seconds.labels(status="success" if result.success else "failure").observe(
            time.time() - start
        )

        if result.success:
            return result.transfer_id

        if result.reason == TransferFailureReason.INSUFFICIENT_FUNDS:
            raise InsufficientRewards(result.detail, submission_key=reference)
        raise TransferFailed(
            f"Reward transfer failed: {result.detail or result.reason}",
            submission_key=reference,
            reason=result.reason.value if result.reason else None,
        )
