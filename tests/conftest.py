# tests/conftest.py
import os
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("FORUM_STORE_BACKEND", "memory")
os.environ.setdefault("FORUM_BCRYPT_ROUNDS", "4")
os.environ["GEMINI_API_KEY"] = ""

import app as app_module
from ai_assist import AIAssist
from forum import Forum
from security import SecurityManager
from storage import MemoryStore, Persistence


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def persistence(store: MemoryStore) -> Persistence:
    return Persistence(store)


@pytest.fixture()
def security() -> SecurityManager:
    return SecurityManager("test-secret", rounds=4)


@pytest.fixture()
def forum(store: MemoryStore, security: SecurityManager) -> Forum:
    return Forum(store, security=security)


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch, forum: Forum) -> Iterator[TestClient]:
    monkeypatch.setattr(app_module, "forum", forum)
    monkeypatch.setattr(app_module, "ai_assist", AIAssist(api_key=""))
    with TestClient(app_module.app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client: TestClient) -> Callable[[str, str], dict[str, str]]:
    def _login(username: str, password: str) -> dict[str, str]:
        res = client.post("/api/auth/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}

    return _login
