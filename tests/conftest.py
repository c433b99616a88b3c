from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from auth import security
from auth import service as auth_service
from crafts import service as crafts_service
from fakes import (
    FakeCraftRepository,
    FakeParticipantsRepository,
    FakeRegistrationRepository,
    FakeStore,
    FakeUserRepository,
)
from participants import service as participants_service
from registration import service as registration_service


@pytest.fixture
def upload_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "uploads"
    monkeypatch.setenv("UPLOAD_ROOT", str(root))
    return root


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch, upload_root: Path) -> FakeStore:
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    fake = FakeStore()
    monkeypatch.setattr(registration_service, "repository", FakeRegistrationRepository(fake))
    monkeypatch.setattr(registration_service, "db", SimpleNamespace(transaction=fake.transaction))
    monkeypatch.setattr(participants_service, "repository", FakeParticipantsRepository(fake))
    monkeypatch.setattr(crafts_service, "repository", FakeCraftRepository(fake))
    monkeypatch.setattr(auth_service, "repository", FakeUserRepository(fake))
    return fake


@pytest.fixture
def client(store: FakeStore) -> TestClient:
    # Not entered as a context manager, so the lifespan (DB pool) never runs.
    import main

    return TestClient(main.app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers(store: FakeStore) -> dict[str, str]:
    token = security.build_access_token(user_id=7)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(store: FakeStore) -> dict[str, str]:
    token = security.build_access_token(user_id=1, is_admin=True)
    return {"Authorization": f"Bearer {token}"}
