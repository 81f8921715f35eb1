"""
Caller authentication

Signature verification happens upstream in the authentication gateway; the
ledger only consumes the identity the gateway vouches for.
"""
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from depin.core.collaborators import get_authenticator
from depin.core.errors import Unauthorized
from depin.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class Authenticator(ABC):
    """Supplies the verified caller identity of a request"""

    @abstractmethod
    def verified_caller(self, request: Request) -> Optional[str]:
        """Return the verified identity, or None when the request carries none"""


class GatewayHeaderAuthenticator(Authenticator):
    """Trusts the identity header set by the authentication gateway"""

    def __init__(self, header_name: str = "X-Verified-Caller"):
        self.header_name = header_name

    def verified_caller(self, request: Request) -> Optional[str]:
        identity = request.headers.get(self.header_name)
        if identity is None:
            return None
        identity = identity.strip()
        return identity or None


class StaticAuthenticator(Authenticator):
    """Always answers the same identity (scripts and tests)"""

    def __init__(self, identity: Optional[str]):
        self.identity = identity

    def verified_caller(self, request: Request) -> Optional[str]:
        return self.identity


async def get_verified_caller(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> str:
    """
    Require a verified caller identity: return it or raise 401
    """
    caller = authenticator.verified_caller(request)
    if not caller:
        logger.warning(
            "Request without verified caller identity",
            extra={"path": request.url.path},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=Unauthorized("Authentication required").to_dict(),
        )
    LoggingConfig.set_context(caller=caller)
    return caller
