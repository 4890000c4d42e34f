from __future__ import annotations

import os

# cloudbook.main builds an app at import time from the environment
os.environ.setdefault("APP_SESSION_SECRET", "test-session-secret")
os.environ.setdefault("APP_STORAGE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from cloudbook.config import Settings
from cloudbook.core.repositories.implementations.memory.note_repository import InMemoryNoteRepository
from cloudbook.core.repositories.implementations.memory.user_repository import InMemoryUserRepository
from cloudbook.core.schemas.auth import ExternalIdentity
from cloudbook.core.services.credential_service import CredentialStore
from cloudbook.core.services.identity_service import ExternalIdentityProvider
from cloudbook.main import create_app

IDENTITY_HEADER = "X-Test-Identity"


class HeaderIdentityProvider(ExternalIdentityProvider):
    """Treats `X-Test-Identity: <email>[|<name>]` as an externally authenticated user."""

    def __init__(self) -> None:
        self.calls = 0

    async def identify(self, request):
        self.calls += 1
        raw = request.headers.get(IDENTITY_HEADER)
        if not raw:
            return None
        email, _, name = raw.partition("|")
        return ExternalIdentity(subject=f"ext-{email}", email=email or None, name=name or None)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        session_secret="test-session-secret",
        storage_backend="memory",
        enable_rate_limiting=False,
        password_hash_iterations=1_000,
    )


@pytest.fixture()
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def note_repo() -> InMemoryNoteRepository:
    return InMemoryNoteRepository()


@pytest.fixture()
def credentials(user_repo, settings) -> CredentialStore:
    return CredentialStore(user_repo, settings)


@pytest.fixture()
def identity_provider() -> HeaderIdentityProvider:
    return HeaderIdentityProvider()


@pytest.fixture()
def app(settings, user_repo, note_repo, identity_provider):
    return create_app(
        settings,
        user_repository=user_repo,
        note_repository=note_repo,
        identity_provider=identity_provider,
    )


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def _signup(client: TestClient, name: str = "Ann", email: str = "ann@x.com", password: str = "pw123456") -> dict:
    resp = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


@pytest.fixture()
def signup():
    return _signup


@pytest.fixture()
def signed_in(client):
    """A TestClient carrying Ann's session cookie."""
    _signup(client)
    return client
