"""
Global pytest fixtures for the linkgate test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage for direct testing
    - Provide a controllable clock and scripted random sources

Why an app factory?
    `create_app()` builds a new LinkService per call, so each test gets fresh
    in-memory state and its own config.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from linkgate.config import AppConfig
from linkgate.manager.allocator import IdentifierAllocator
from linkgate.manager.creator import LinkCreator
from linkgate.manager.resolver import RedirectResolver
from linkgate.storage.storage import Storage

VALID_KEY = "validKey"


class FakeClock:
    """Callable clock returning a settable Unix time."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class ScriptedRandom:
    """`choice` returns the next symbol from a fixed script instead of a random one."""

    def __init__(self, symbols: str):
        self._symbols = iter(symbols)

    def choice(self, seq):
        symbol = next(self._symbols)
        assert symbol in seq
        return symbol


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def resolver(storage, clock) -> RedirectResolver:
    return RedirectResolver(storage, clock=clock)


@pytest.fixture
def creator(storage, clock) -> LinkCreator:
    return LinkCreator(storage, allowed_keys=[VALID_KEY], allocator=IdentifierAllocator(storage), clock=clock)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(KEYS=[VALID_KEY], STORAGE="memory")


@pytest.fixture
def app(app_config, storage, tmp_path):
    """App wired to the storage fixture; PATCH / reads a config file under tmp_path."""
    return create_app(
        config=app_config,
        storage=storage,
        config_path=str(tmp_path / "config.json"),
        not_found_page=str(tmp_path / "404.html"),
    )


@pytest.fixture
def client(app) -> TestClient:
    """
    Fresh TestClient; redirects are not followed so 302s can be asserted.
    """
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng("AAa") yields a source whose choice() plays back those symbols."""
    return ScriptedRandom
