"""
Service owning the network-wide state record
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from depin.core.access import AccessController, Operation
from depin.core.addressing import NETWORK_STATE_KEY
from depin.core.database import atomic, is_unique_violation
from depin.core.errors import AlreadyInitialized, NotInitialized, Unauthorized
from depin.core.logging_config import LoggingConfig
from depin.core.metrics import network_active
from depin.core.operations import ledger_operation
from depin.models.network_state import NetworkState

logger = LoggingConfig.get_logger(__name__)


class NetworkStateManager:
    """Initialization, pause and resume of the network"""

    def __init__(self, db: Session, access: Optional[AccessController] = None):
        self.db = db
        self.access = access or AccessController()

    def get_state_or_none(self) -> Optional[NetworkState]:
        """Get the network state, or None before initialization"""
        return self.db.get(NetworkState, NETWORK_STATE_KEY)

    def get_state(self, for_update: bool = False) -> NetworkState:
        """
        Get the network state

        Args:
            for_update: Lock the row for the rest of the transaction

        Raises:
            NotInitialized: If initialize has not run yet
        """
        state = self.db.get(NetworkState, NETWORK_STATE_KEY, with_for_update=for_update)
        if state is None:
            raise NotInitialized()
        return state

    @ledger_operation(Operation.INITIALIZE)
    def initialize(self, authority: str) -> NetworkState:
        """
        Create the network state with authority as its sole authority

        Args:
            authority: Verified identity of the initializing caller

        Returns:
            Created NetworkState

        Raises:
            AlreadyInitialized: If the network state already exists
        """
        if not authority:
            raise Unauthorized("initialize requires a verified caller identity")

        with atomic(self.db):
            if self.get_state_or_none() is not None:
                raise AlreadyInitialized()

            state = NetworkState(
                key=NETWORK_STATE_KEY,
                authority=authority,
                total_devices=0,
                total_rewards_distributed=0,
                is_active=True,
            )
            self.db.add(state)
            try:
                self.db.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                # Lost a concurrent initialize race
                raise AlreadyInitialized() from e

        network_active.set(1)
        logger.info(f"Network initialized with authority {authority}", extra={"authority": authority})
        return state

    @ledger_operation(Operation.PAUSE)
    def pause(self, caller: str) -> NetworkState:
        """Mark the network paused (authority only)"""
        return self._set_active(Operation.PAUSE, caller, False)

    @ledger_operation(Operation.RESUME)
    def resume(self, caller: str) -> NetworkState:
        """Mark the network active again (authority only)"""
        return self._set_active(Operation.RESUME, caller, True)

    def _set_active(self, operation: str, caller: str, is_active: bool) -> NetworkState:
        with atomic(self.db):
            state = self.get_state(for_update=True)
            self.access.authorize(operation, caller, network_state=state)
            state.is_active = is_active

        network_active.set(1 if is_active else 0)
        logger.info(
            f"Network {'resumed' if is_active else 'paused'} by authority",
            extra={"authority": caller, "is_active": is_active},
        )
        return state
