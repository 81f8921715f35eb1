"""
Factories for external collaborators (clock, transfers, authentication)

Each factory is cached so the process shares one instance; FastAPI routes
receive them through Depends and tests replace them with
app.dependency_overrides.
"""
from functools import lru_cache
from typing import TYPE_CHECKING

from depin.core.clock import Clock, SystemClock
from depin.core.config import get_settings
from depin.core.logging_config import LoggingConfig
from depin.services.transfer_service import (CustodyTransferService,
                                             TokenVault, TransferService)

if TYPE_CHECKING:
    from depin.core.auth import Authenticator

logger = LoggingConfig.get_logger(__name__)


@lru_cache()
def get_clock() -> Clock:
    """Get the process clock"""
    return SystemClock()


@lru_cache()
def get_transfer_service() -> TransferService:
    """Get the reward transfer backend selected by settings"""
    settings = get_settings()

    if settings.transfer_backend == "http":
        if not settings.custody_api_url:
            raise RuntimeError("CUSTODY_API_URL must be set when TRANSFER_BACKEND=http")
        logger.info(f"Using custody API transfer backend at {settings.custody_api_url}")
        return CustodyTransferService(
            base_url=settings.custody_api_url,
            timeout=settings.custody_api_timeout_seconds,
        )

    vault = TokenVault()
    vault.fund(settings.reward_pool_account, settings.vault_initial_balance)
    logger.info(
        f"Using in-process token vault, pool '{settings.reward_pool_account}' "
        f"funded with {settings.vault_initial_balance} units"
    )
    return vault


@lru_cache()
def get_authenticator() -> "Authenticator":
    """Get the authenticator trusting the gateway identity header"""
    from depin.core.auth import GatewayHeaderAuthenticator

    return GatewayHeaderAuthenticator(header_name=get_settings().auth_header_name)
