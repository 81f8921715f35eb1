"""
Tests for the reward transfer collaborators
"""
import json

import httpx
import pytest

from depin.services.transfer_service import (CustodyTransferService,
                                             TokenVault, TransferFailureReason)


class TestTokenVault:
    """In-process vault"""

    def test_transfer_moves_funds(self):
        vault = TokenVault()
        vault.fund("pool", 1000)

        result = vault.transfer("pool", "alice", 400, reference="sub-1")

        assert result.success is True
        assert result.transfer_id == "vault-1"
        assert vault.balance_of("pool") == 600
        assert vault.balance_of("alice") == 400
        assert vault.journal[0].reference == "sub-1"
        assert vault.total_transferred() == 400

    def test_insufficient_funds(self):
        vault = TokenVault()
        vault.fund("pool", 10)

        result = vault.transfer("pool", "alice", 11)

        assert result.success is False
        assert result.reason == TransferFailureReason.INSUFFICIENT_FUNDS
        assert vault.balance_of("pool") == 10
        assert vault.journal == []

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(self, amount):
        vault = TokenVault()
        vault.fund("pool", 10)

        result = vault.transfer("pool", "alice", amount)

        assert result.reason == TransferFailureReason.REJECTED

    def test_fund_rejects_negative(self):
        with pytest.raises(ValueError):
            TokenVault().fund("pool", -1)

    def test_total_transferred_per_destination(self):
        vault = TokenVault()
        vault.fund("pool", 100)
        vault.transfer("pool", "alice", 10)
        vault.transfer("pool", "bob", 20)
        vault.transfer("pool", "alice", 5)

        assert vault.total_transferred("alice") == 15
        assert vault.total_transferred("bob") == 20
        assert vault.total_transferred() == 35


def custody(handler) -> CustodyTransferService:
    client = httpx.Client(base_url="http://custody.test", transport=httpx.MockTransport(handler))
    return CustodyTransferService("http://custody.test", client=client)


class TestCustodyTransferService:
    """Remote custody API client"""

    def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"transfer_id": "tx-42"})

        result = custody(handler).transfer("reward-pool", "alice", 2223, reference="sub-1")

        assert result.success is True
        assert result.transfer_id == "tx-42"
        assert seen["path"] == "/transfers"
        assert seen["body"] == {"from": "reward-pool", "to": "alice", "amount": 2223, "reference": "sub-1"}

    def test_success_without_json_body(self):
        result = custody(lambda request: httpx.Response(204)).transfer("pool", "alice", 1)

        assert result.success is True
        assert result.transfer_id is None

    def test_insufficient_funds(self):
        def handler(request):
            return httpx.Response(409, json={"code": "insufficient_funds", "detail": "pool empty"})

        result = custody(handler).transfer("pool", "alice", 1)

        assert result.reason == TransferFailureReason.INSUFFICIENT_FUNDS
        assert result.detail == "pool empty"

    def test_client_error_is_rejection(self):
        result = custody(lambda request: httpx.Response(400, json={"code": "bad_account"})).transfer("pool", "x", 1)

        assert result.reason == TransferFailureReason.REJECTED
        assert result.detail == "HTTP 400"

    def test_server_error_is_unavailable(self):
        result = custody(lambda request: httpx.Response(503)).transfer("pool", "alice", 1)

        assert result.reason == TransferFailureReason.UNAVAILABLE

    def test_transport_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = custody(handler).transfer("pool", "alice", 1)

        assert result.success is False
        assert result.reason == TransferFailureReason.UNAVAILABLE
