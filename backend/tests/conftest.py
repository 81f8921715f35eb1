"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Keep test runs off the filesystem and on the in-process vault
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["TRANSFER_BACKEND"] = "vault"
os.environ["DATABASE_AUTO_CREATE"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from depin.core.clock import FixedClock
from depin.core.database import Base, init_db
from depin.models.telemetry import DeviceType, LocationData, NetworkQualityData
from depin.services.device_registry import DeviceRegistry
from depin.services.network_state_manager import NetworkStateManager
from depin.services.submission_ledger import SubmissionLedger
from depin.services.transfer_service import TokenVault

AUTHORITY = "authority-ops"
ALICE = "owner-alice"
BOB = "owner-bob"
REWARD_POOL = "reward-pool"
POOL_BALANCE = 1_000_000


def make_location(latitude: float = 52.52, longitude: float = 13.405, accuracy: float = 5.0) -> LocationData:
    return LocationData(latitude=latitude, longitude=longitude, accuracy=accuracy)


def make_quality(
    signal_strength: int = -65,
    latency: int = 40,
    throughput: int = 1_200_000,
    availability: float = 0.95,
) -> NetworkQualityData:
    """Telemetry that earns 2223 units on a fresh device"""
    return NetworkQualityData(
        signal_strength=signal_strength,
        latency=latency,
        throughput=throughput,
        availability=availability,
        location=make_location(),
    )


@pytest.fixture(scope="function")
def engine():
    """In-memory database shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """Create a database session for testing"""
    session = sessionmaker(autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(start=1_700_000_000)


@pytest.fixture
def vault() -> TokenVault:
    vault = TokenVault()
    vault.fund(REWARD_POOL, POOL_BALANCE)
    return vault


@pytest.fixture
def network(db) -> NetworkStateManager:
    return NetworkStateManager(db)


@pytest.fixture
def initialized(network):
    """Network state initialized with AUTHORITY"""
    return network.initialize(AUTHORITY)


@pytest.fixture
def registry(db, clock) -> DeviceRegistry:
    return DeviceRegistry(db, clock)


@pytest.fixture
def ledger(db, clock, vault) -> SubmissionLedger:
    return SubmissionLedger(db, clock, vault)


@pytest.fixture
def alice_device(initialized, registry):
    """Active smartphone registered by ALICE"""
    return registry.register_device(ALICE, "phone-1", DeviceType.SMARTPHONE, make_location())


@pytest.fixture(scope="function")
def client(db, clock, vault):
    """Create test client with database and collaborator overrides"""
    from fastapi.testclient import TestClient

    from depin.core.collaborators import get_clock, get_transfer_service
    from depin.core.database import get_db
    from depin.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_transfer_service] = lambda: vault
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def caller_headers(identity: str) -> dict:
    """Headers the authentication gateway sets for a verified caller"""
    return {"X-Verified-Caller": identity}
