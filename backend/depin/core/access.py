"""
Capability checks for ledger operations

Each mutating operation declares the principal it requires in
OPERATION_PRINCIPALS; AccessController resolves that principal against the
target record and raises Unauthorized on any mismatch.
"""
from enum import Enum
from typing import TYPE_CHECKING, Optional

from depin.core.errors import Unauthorized
from depin.core.logging_config import LoggingConfig

if TYPE_CHECKING:
    from depin.models.device import Device
    from depin.models.network_state import NetworkState

logger = LoggingConfig.get_logger(__name__)


class Principal(str, Enum):
    """Who may perform an operation"""
    ANY = "any"
    DEVICE_OWNER = "device:owner"
    NETWORK_AUTHORITY = "network:authority"


class Operation:
    """Operation names"""
    INITIALIZE = "initialize"
    REGISTER_DEVICE = "register_device"
    SUBMIT_DATA = "submit_data"
    UPDATE_LOCATION = "update_location"
    TOGGLE_DEVICE_STATUS = "toggle_device_status"
    PAUSE = "pause"
    RESUME = "resume"


# Operation to required principal mapping
OPERATION_PRINCIPALS = {
    Operation.INITIALIZE: Principal.ANY,
    Operation.REGISTER_DEVICE: Principal.ANY,
    Operation.SUBMIT_DATA: Principal.DEVICE_OWNER,
    Operation.UPDATE_LOCATION: Principal.DEVICE_OWNER,
    Operation.TOGGLE_DEVICE_STATUS: Principal.DEVICE_OWNER,
    Operation.PAUSE: Principal.NETWORK_AUTHORITY,
    Operation.RESUME: Principal.NETWORK_AUTHORITY,
}


class AccessController:
    """Verifies callers against record ownership or network authority"""

    def required_principal(self, operation: str) -> Principal:
        """
        Get the principal an operation requires

        Raises:
            KeyError: If the operation is not declared
        """
        return OPERATION_PRINCIPALS[operation]

    def authorize(
        self,
        operation: str,
        caller: Optional[str],
        device: Optional["Device"] = None,
        network_state: Optional["NetworkState"] = None,
    ) -> str:
        """
        Check that caller may perform operation

        Args:
            operation: Operation name (see Operation)
            caller: Identity verified by the authentication collaborator
            device: Target device for device-owner operations
            network_state: Network state for authority operations

        Returns:
            The authorized caller identity

        Raises:
            Unauthorized: If the caller is missing or is not the required principal
        """
        principal = self.required_principal(operation)

        if not caller:
            self._reject(operation, caller, "no verified caller identity")

        if principal == Principal.DEVICE_OWNER:
            if device is None:
                raise ValueError(f"Operation '{operation}' requires a target device")
            if caller != device.owner:
                self._reject(operation, caller, "caller is not the device owner", device_key=device.key)
        elif principal == Principal.NETWORK_AUTHORITY:
            if network_state is None:
                raise ValueError(f"Operation '{operation}' requires the network state")
            if caller != network_state.authority:
                self._reject(operation, caller, "caller is not the network authority")

        return caller

    def _reject(self, operation: str, caller: Optional[str], reason: str, **extra) -> None:
        logger.debug(
            f"Unauthorized {operation}: {reason}",
            extra={"operation": operation, "caller": caller, **extra},
        )
        raise Unauthorized(f"Unauthorized {operation}: {reason}", operation=operation)
