"""
Reward transfer collaborators

The ledger asks a TransferService to move reward units from the reward pool
to a recipient. A transfer either succeeds or reports why it failed; it is
never retried here.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import httpx

from depin.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class TransferFailureReason(str, Enum):
    """Why a transfer did not happen"""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a transfer request"""
    success: bool
    reason: Optional[TransferFailureReason] = None
    detail: Optional[str] = None
    transfer_id: Optional[str] = None

    @classmethod
    def ok(cls, transfer_id: Optional[str] = None) -> "TransferResult":
        return cls(success=True, transfer_id=transfer_id)

    @classmethod
    def failed(cls, reason: TransferFailureReason, detail: Optional[str] = None) -> "TransferResult":
        return cls(success=False, reason=reason, detail=detail)


class TransferService(ABC):
    """Moves reward units between accounts"""

    @abstractmethod
    def transfer(
        self,
        from_pool: str,
        to_destination: str,
        amount: int,
        reference: Optional[str] = None,
    ) -> TransferResult:
        """
        Transfer amount units from from_pool to to_destination

        Args:
            from_pool: Source account (the reward pool)
            to_destination: Recipient account
            amount: Positive number of reward units
            reference: Caller-chosen reference (the submission key)
        """


@dataclass(frozen=True)
class TransferRecord:
    """One completed vault transfer"""
    transfer_id: str
    from_pool: str
    to_destination: str
    amount: int
    reference: Optional[str] = None


@dataclass
class TokenVault(TransferService):
    """
    In-process token custody

    Keeps balances per account and a journal of completed transfers.
    Used for development and tests.
    """
    balances: Dict[str, int] = field(default_factory=dict)
    journal: List[TransferRecord] = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()

    def fund(self, account: str, amount: int) -> int:
        """Credit amount units to account, returning the new balance"""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        with self._lock:
            self.balances[account] = self.balances.get(account, 0) + amount
            return self.balances[account]

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self.balances.get(account, 0)

    def total_transferred(self, to_destination: Optional[str] = None) -> int:
        with self._lock:
            return sum(
                record.amount for record in self.journal
                if to_destination is None or record.to_destination == to_destination
            )

    def transfer(
        self,
        from_pool: str,
        to_destination: str,
        amount: int,
        reference: Optional[str] = None,
    ) -> TransferResult:
        if amount <= 0:
            return TransferResult.failed(TransferFailureReason.REJECTED, "amount must be positive")

        with self._lock:
            available = self.balances.get(from_pool, 0)
            if available < amount:
                logger.warning(
                    f"Vault transfer refused: pool '{from_pool}' holds {available}, needs {amount}",
                    extra={"from_pool": from_pool, "amount": amount, "available": available},
                )
                return TransferResult.failed(
                    TransferFailureReason.INSUFFICIENT_FUNDS,
                    f"pool '{from_pool}' holds {available} units, {amount} requested",
                )

            self.balances[from_pool] = available - amount
            self.balances[to_destination] = self.balances.get(to_destination, 0) + amount
            transfer_id = f"vault-{len(self.journal) + 1}"
            self.journal.append(TransferRecord(
                transfer_id=transfer_id,
                from_pool=from_pool,
                to_destination=to_destination,
                amount=amount,
                reference=reference,
            ))

        logger.debug(
            f"Vault transferred {amount} units to {to_destination}",
            extra={"transfer_id": transfer_id, "reference": reference},
        )
        return TransferResult.ok(transfer_id)


class CustodyTransferService(TransferService):
    """
    Client for a remote custody API

    POST {base_url}/transfers with {"from", "to", "amount", "reference"}.
    2xx means the transfer happened. A 4xx body may carry
    {"code": "insufficient_funds"}; anything else is a rejection. Transport
    errors and 5xx answers report the custody service as unavailable.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def transfer(
        self,
        from_pool: str,
        to_destination: str,
        amount: int,
        reference: Optional[str] = None,
    ) -> TransferResult:
        payload = {
            "from": from_pool,
            "to": to_destination,
            "amount": amount,
            "reference": reference,
        }
        try:
            response = self._client.post("/transfers", json=payload)
        except httpx.HTTPError as e:
            logger.error(
                f"Custody API unreachable: {e}",
                extra={"custody_url": self.base_url, "reference": reference},
            )
            return TransferResult.failed(TransferFailureReason.UNAVAILABLE, str(e))

        if response.is_success:
            transfer_id = None
            try:
                transfer_id = response.json().get("transfer_id")
            except ValueError:
                logger.debug("Custody API returned a non-JSON success body")
            return TransferResult.ok(transfer_id)

        if response.status_code >= 500:
            logger.error(
                f"Custody API error {response.status_code}",
                extra={"custody_url": self.base_url, "reference": reference},
            )
            return TransferResult.failed(TransferFailureReason.UNAVAILABLE, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code") if isinstance(body, dict) else None
        detail = body.get("detail") if isinstance(body, dict) else None
        if code == TransferFailureReason.INSUFFICIENT_FUNDS.value:
            return TransferResult.failed(TransferFailureReason.INSUFFICIENT_FUNDS, detail)
        return TransferResult.failed(
            TransferFailureReason.REJECTED,
            detail or f"HTTP {response.status_code}",
        )
