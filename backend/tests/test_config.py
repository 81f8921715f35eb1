"""
Tests for settings and collaborator factories
"""
import pytest
from pydantic import ValidationError

from depin.core.clock import FixedClock, SystemClock
from depin.core.collaborators import (get_authenticator, get_clock,
                                      get_transfer_service)
from depin.core.config import Settings, get_settings
from depin.services.transfer_service import CustodyTransferService, TokenVault


@pytest.fixture
def fresh_caches():
    """Clear cached settings and collaborators around a test"""
    caches = (get_settings, get_transfer_service, get_authenticator, get_clock)
    for cached in caches:
        cached.cache_clear()
    yield
    for cached in caches:
        cached.cache_clear()


def test_defaults():
    settings = Settings()

    assert settings.max_device_id_length == 32
    assert settings.reward_pool_account == "reward-pool"
    assert settings.enforce_network_pause is False
    assert settings.auth_header_name == "X-Verified-Caller"


def test_transfer_backend_is_normalized():
    assert Settings(transfer_backend=" HTTP ").transfer_backend == "http"


def test_unknown_transfer_backend():
    with pytest.raises(ValidationError):
        Settings(transfer_backend="carrier-pigeon")


def test_allowed_origins_list():
    settings = Settings(allowed_origins="http://a.test, http://b.test,")
    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]


def test_is_sqlite():
    assert Settings(database_url="sqlite://").is_sqlite is True
    assert Settings(database_url="postgresql://u:p@db/ledger").is_sqlite is False


def test_vault_backend_is_funded(monkeypatch, fresh_caches):
    monkeypatch.setenv("TRANSFER_BACKEND", "vault")
    monkeypatch.setenv("VAULT_INITIAL_BALANCE", "5000")

    service = get_transfer_service()

    assert isinstance(service, TokenVault)
    assert service.balance_of("reward-pool") == 5000
    assert get_transfer_service() is service


def test_http_backend_requires_url(monkeypatch, fresh_caches):
    monkeypatch.setenv("TRANSFER_BACKEND", "http")
    monkeypatch.delenv("CUSTODY_API_URL", raising=False)

    with pytest.raises(RuntimeError):
        get_transfer_service()


def test_http_backend(monkeypatch, fresh_caches):
    monkeypatch.setenv("TRANSFER_BACKEND", "http")
    monkeypatch.setenv("CUSTODY_API_URL", "http://custody.test/")

    service = get_transfer_service()

    assert isinstance(service, CustodyTransferService)
    assert service.base_url == "http://custody.test"
    service.close()


def test_clock_factory(fresh_caches):
    assert isinstance(get_clock(), SystemClock)


def test_fixed_clock():
    clock = FixedClock(start=100)
    assert clock.advance(5) == 105
    clock.set(7)
    assert clock.now() == 7
