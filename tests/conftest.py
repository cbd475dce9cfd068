"""Test configuration and fixtures."""

from __future__ import annotations

import pytest

from cspm_identity import (
    Identity,
    InMemoryIdentityBackend,
    InMemoryKeyValueStore,
    LocalIdentityRepository,
    RemoteIdentityRepository,
    Role,
    SessionManager,
    TotpEngine,
)

# RFC 6238 Appendix B SHA1 seed "12345678901234567890" in base32.
RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

# Unix time 1111111109 sits at the end of step 37037036 (code 081804, the
# low six digits of the RFC vector); step 37037037 yields 050471.
RFC_TIME = 1111111109


class FrozenClock:
    """Callable UNIX clock that only moves when told to."""

    def __init__(self, now: float = RFC_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticQrRenderer:
    def __init__(self) -> None:
        self.uris: list[str] = []

    async def render(self, uri: str) -> bytes:
        self.uris.append(uri)
        return b"PNG:" + uri.encode()


class FailingQrRenderer:
    async def render(self, uri: str) -> bytes:
        raise RuntimeError("renderer offline")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests that require external services",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def engine(clock: FrozenClock) -> TotpEngine:
    return TotpEngine(issuer="CSPM-NG", clock=clock)


@pytest.fixture
def cache() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def backend() -> InMemoryIdentityBackend:
    return InMemoryIdentityBackend()


@pytest.fixture
def local_repository(cache: InMemoryKeyValueStore) -> LocalIdentityRepository:
    return LocalIdentityRepository(cache)


@pytest.fixture
def remote_repository(
    backend: InMemoryIdentityBackend, cache: InMemoryKeyValueStore
) -> RemoteIdentityRepository:
    return RemoteIdentityRepository(backend, cache)


@pytest.fixture
def sessions(cache: InMemoryKeyValueStore) -> SessionManager:
    return SessionManager(cache)


@pytest.fixture
def enrolled_user() -> Identity:
    return Identity(
        email="user@co.test",
        display_name="User",
        role=Role.VIEWER,
        totp_secret=RFC_SECRET,
    )


@pytest.fixture
def pending_user() -> Identity:
    return Identity(email="user@co.test", display_name="User", role=Role.AUDITOR)


@pytest.fixture
def qr_renderer() -> StaticQrRenderer:
    return StaticQrRenderer()


@pytest.fixture
def failing_qr_renderer() -> FailingQrRenderer:
    return FailingQrRenderer()
