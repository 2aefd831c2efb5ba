from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

from sns_functions.models.tables import UserProfile

URL = "/functions/v1/naver-auth-callback"


def _redirect_query(resp) -> tuple[str, dict[str, list[str]]]:
    assert resp.status_code == 302
    location = resp.headers["location"]
    return location, parse_qs(urlsplit(location).query)


def test_successful_login_creates_user_and_profile(test_ctx) -> None:
    client = test_ctx["client"]

    resp = client.get(URL, params={"code": "abc", "state": "xyz"}, follow_redirects=False)

    location, query = _redirect_query(resp)
    assert location.startswith("com.example.communityapp://callback?")
    assert query["success"] == ["true"]
    user_id = query["user_id"][0]
    assert query["access_token"] == [f"access-{user_id}"]
    assert query["refresh_token"] == [f"refresh-{user_id}"]

    created = test_ctx["auth_admin"].users[user_id]
    assert created["app_metadata"]["provider"] == "naver"
    with test_ctx["session_local"]() as db:
        profile = db.get(UserProfile, user_id)
        assert profile.name == "Kim Minsu"
        assert profile.email == "minsu@naver.com"


def test_returning_user_is_reused(test_ctx) -> None:
    admin = test_ctx["auth_admin"]
    admin.add_user("existing-id", "minsu@naver.com")

    resp = test_ctx["client"].get(URL, params={"code": "abc"}, follow_redirects=False)

    _, query = _redirect_query(resp)
    assert query["user_id"] == ["existing-id"]
    assert list(admin.users) == ["existing-id"]


def test_custom_redirect_target(test_ctx) -> None:
    resp = test_ctx["client"].get(
        URL,
        params={"code": "abc", "redirect_to": "myapp://login"},
        follow_redirects=False,
    )

    location, _ = _redirect_query(resp)
    assert location.startswith("myapp://login?success=true")


def test_missing_code_redirects_with_error(test_ctx) -> None:
    resp = test_ctx["client"].get(URL, follow_redirects=False)

    _, query = _redirect_query(resp)
    assert query["error"] == ["Missing authorization code"]
    assert "access_token" not in query


def test_provider_error_redirects_with_description(test_ctx) -> None:
    resp = test_ctx["client"].get(
        URL,
        params={"error": "access_denied", "error_description": "Canceled by user"},
        follow_redirects=False,
    )

    _, query = _redirect_query(resp)
    assert query["error"] == ["Naver login error: Canceled by user"]


def test_token_exchange_failure_redirects(test_ctx) -> None:
    test_ctx["naver"].exchange_error = "Naver token exchange failed: invalid_request " + "x" * 200

    resp = test_ctx["client"].get(URL, params={"code": "bad"}, follow_redirects=False)

    _, query = _redirect_query(resp)
    assert len(query["error"][0]) == 100
    assert query["error"][0].startswith("Naver token exchange failed")
    assert "access_token" not in query


def test_session_issuance_failure_redirects(test_ctx) -> None:
    test_ctx["auth_admin"].session_status = 404

    resp = test_ctx["client"].get(URL, params={"code": "abc"}, follow_redirects=False)

    _, query = _redirect_query(resp)
    assert query["error"][0].startswith("Token issuance failed: Status 404")
    assert "access_token" not in query


def test_missing_configuration_redirects(tmp_path, monkeypatch, settings_factory) -> None:
    import sns_functions.models.db as db_module
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from sns_functions.app import create_app

    engine = create_engine(f"sqlite:///{tmp_path / 'cfg.db'}", connect_args={"check_same_thread": False})
    monkeypatch.setattr(db_module, "engine", engine)
    monkeypatch.setattr(db_module, "SessionLocal", sessionmaker(bind=engine))

    client = TestClient(create_app(settings_factory(naver_client_id="", naver_client_secret="")))
    resp = client.get(URL, params={"code": "abc"}, follow_redirects=False)

    _, query = _redirect_query(resp)
    assert query["error"] == ["Missing server configuration: NAVER_CLIENT_ID, NAVER_CLIENT_SECRET"]
