from __future__ import annotations

import threading
import uuid
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from sns_functions.config import Settings
from sns_functions.errors import AuthAdminError, NaverApiError, PushGatewayError
from sns_functions.notifications.providers import BasePushGateway


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": "sqlite://",
        "supabase_url": "https://backend.test",
        "supabase_service_role_key": "service-role-key",
        "naver_client_id": "naver-client",
        "naver_client_secret": "naver-secret",
        "notification_provider": "fcm",
        "fcm_server_key": "fcm-server-key",
        "push_dispatch_url": "",
        "oauth_default_redirect": "com.example.communityapp://callback",
    }
    values.update(overrides)
    return Settings(**values)


class FakeGateway(BasePushGateway):
    name = "fake"

    def __init__(self, failing_tokens: set[str] | None = None) -> None:
        self.failing_tokens = failing_tokens or set()
        self.sent: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self.sent.append(payload)
        if payload["to"] in self.failing_tokens:
            raise PushGatewayError(401, "InvalidRegistration")
        return {"success": 1, "results": [{"message_id": f"msg-{payload['to']}"}]}


class FakeNaverClient:
    def __init__(self) -> None:
        self.profile: dict[str, Any] = {
            "id": "naver-123",
            "name": "Kim Minsu",
            "nickname": "minsu",
            "email": "minsu@naver.com",
            "profile_image": "https://phinf.example/minsu.png",
        }
        self.exchange_error: str | None = None
        self.profile_error: str | None = None
        self.exchanged_codes: list[str] = []

    def exchange_code(self, code: str, state: str | None = None) -> dict[str, Any]:
        self.exchanged_codes.append(code)
        if self.exchange_error:
            raise NaverApiError(self.exchange_error)
        return {"access_token": "naver-access", "refresh_token": "naver-refresh", "token_type": "bearer"}

    def fetch_profile(self, access_token: str) -> dict[str, Any]:
        if self.profile_error:
            raise NaverApiError(self.profile_error)
        return dict(self.profile)


class FakeAuthAdmin:
    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.session_status: int | None = None
        self.metadata_updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_metadata_update = False

    def add_user(self, user_id: str, email: str, provider: str = "naver", **metadata: Any) -> dict[str, Any]:
        user = {
            "id": user_id,
            "email": email,
            "app_metadata": {"provider": provider},
            "user_metadata": metadata,
        }
        self.users[user_id] = user
        return user

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        return self.users.get(user_id)

    def find_user_by_email(self, email: str) -> dict[str, Any] | None:
        for user in self.users.values():
            if user["email"] == email:
                return user
        return None

    def create_user(self, email: str, user_metadata: dict[str, Any], app_metadata: dict[str, Any]) -> dict[str, Any]:
        user_id = str(uuid.uuid4())
        user = {"id": user_id, "email": email, "app_metadata": app_metadata, "user_metadata": user_metadata}
        self.users[user_id] = user
        return user

    def update_user(self, user_id: str, user_metadata: dict[str, Any] | None = None, app_metadata=None) -> dict[str, Any]:
        if self.fail_metadata_update:
            raise AuthAdminError("metadata update rejected", 500)
        self.metadata_updates.append((user_id, user_metadata or {}))
        return self.users[user_id]

    def issue_session(self, user_id: str, expires_in: int = 3600) -> dict[str, Any]:
        if self.session_status is not None:
            raise AuthAdminError(f"Status {self.session_status}, Error: user not found", self.session_status)
        return {"access_token": f"access-{user_id}", "refresh_token": f"refresh-{user_id}", "expires_in": expires_in}


def _install_test_db(tmp_path, monkeypatch):
    import sns_functions.models.db as db_module
    from sns_functions.models import tables  # noqa: F401
    from sns_functions.models.db import Base

    db_file = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_file}", connect_args={"check_same_thread": False}, future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    monkeypatch.setattr(db_module, "engine", engine, raising=False)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=False)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine, TestingSessionLocal


@pytest.fixture
def test_ctx(tmp_path, monkeypatch) -> Generator[dict, None, None]:
    from sns_functions.api.dependencies import get_auth_admin, get_naver_client, get_push_gateway
    from sns_functions.app import create_app
    from sns_functions.models.db import Base

    engine, TestingSessionLocal = _install_test_db(tmp_path, monkeypatch)

    gateway = FakeGateway()
    naver = FakeNaverClient()
    auth_admin = FakeAuthAdmin()

    app = create_app(make_settings())
    app.dependency_overrides[get_push_gateway] = lambda: gateway
    app.dependency_overrides[get_naver_client] = lambda: naver
    app.dependency_overrides[get_auth_admin] = lambda: auth_admin

    with TestClient(app) as client:
        yield {
            "client": client,
            "app": app,
            "session_local": TestingSessionLocal,
            "engine": engine,
            "gateway": gateway,
            "naver": naver,
            "auth_admin": auth_admin,
        }

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(tmp_path, monkeypatch):
    _, TestingSessionLocal = _install_test_db(tmp_path, monkeypatch)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fake_naver() -> FakeNaverClient:
    return FakeNaverClient()


@pytest.fixture
def fake_auth_admin() -> FakeAuthAdmin:
    return FakeAuthAdmin()
