from __future__ import annotations

import pytest
from helpers import CLIENT_ID, FakeBackend, FakeEpochSource, FakeProofBroker

from zklogin.client.orchestrator import LoginOrchestrator
from zklogin.client.salt_client import SaltClient
from zklogin.client.session_manager import SessionManager
from zklogin.client.session_store import MemorySessionStore


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def device_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def epoch_source() -> FakeEpochSource:
    return FakeEpochSource(5)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def proof_broker() -> FakeProofBroker:
    return FakeProofBroker()


@pytest.fixture
def session_manager(
    session_store: MemorySessionStore, epoch_source: FakeEpochSource
) -> SessionManager:
    return SessionManager(session_store, epoch_source)


@pytest.fixture
def salt_client(backend: FakeBackend, device_store: MemorySessionStore) -> SaltClient:
    return SaltClient(backend, device_store)  # type: ignore[arg-type]


@pytest.fixture
def orchestrator(
    session_manager: SessionManager,
    salt_client: SaltClient,
    proof_broker: FakeProofBroker,
) -> LoginOrchestrator:
    return LoginOrchestrator(
        session_manager,
        salt_client,
        proof_broker,
        client_id=CLIENT_ID,
        redirect_url="http://localhost:5173",
    )
