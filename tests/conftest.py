import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from server.app import ServerApp
from server.services import AuthService, MatchmakingService
from server.store.memory_store import MemoryMatchStore


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, store_backend="memory", server_secret_key="test-secret")


@pytest.fixture
def store() -> MemoryMatchStore:
    return MemoryMatchStore()


@pytest.fixture
def service(store: MemoryMatchStore, settings: Settings) -> MatchmakingService:
    return MatchmakingService(store, settings)


@pytest.fixture
def auth(settings: Settings) -> AuthService:
    return AuthService(settings)


@pytest.fixture
def client(store: MemoryMatchStore, settings: Settings) -> TestClient:
    return TestClient(ServerApp(settings, store=store).app)
