from __future__ import annotations

import json
import time
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

import pytest

from src.freeagent.integrations.freeagent_auth import FreeAgentAuthTokens, FreeAgentOAuth, TokenStore
from src.freeagent.integrations.freeagent_errors import FreeAgentTokenError


class _FakeResp:
    def __init__(self, status_code: int, payload: dict | None = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _oauth(environment: str = "sandbox") -> FreeAgentOAuth:
    return FreeAgentOAuth(
        client_id="cid",
        client_secret="secret",
        redirect_uri="http://localhost:8040/freeagent/callback",
        environment=environment,
    )


def test_authorization_url_points_at_approve_app() -> None:
    url = _oauth().authorization_url(state="xyz")
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert parsed.netloc == "api.sandbox.freeagent.com"
    assert parsed.path == "/v2/approve_app"
    assert query["client_id"] == ["cid"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["http://localhost:8040/freeagent/callback"]
    assert query["state"] == ["xyz"]


def test_exchange_code_posts_with_basic_auth(monkeypatch) -> None:
    seen = SimpleNamespace(method=None, url=None, auth=None, data=None)

    def fake_request(method, url, **kwargs):
        seen.method = method
        seen.url = url
        seen.auth = kwargs.get("auth")
        seen.data = kwargs.get("data")
        return _FakeResp(
            200,
            {"access_token": "a1", "refresh_token": "r1", "expires_in": 3600, "token_type": "bearer"},
        )

    monkeypatch.setattr("requests.request", fake_request)

    tokens = _oauth("production").exchange_code("code-123")

    assert seen.method == "POST"
    assert seen.url == "https://api.freeagent.com/v2/token_endpoint"
    assert seen.auth == ("cid", "secret")
    assert seen.data["grant_type"] == "authorization_code"
    assert seen.data["code"] == "code-123"
    assert tokens.access_token == "a1"
    assert tokens.refresh_token == "r1"
    assert tokens.environment == "production"
    assert tokens.expires_at_unix is not None
    assert tokens.expires_at_unix > int(time.time()) + 3500


def test_refresh_keeps_existing_refresh_token_when_not_rotated(monkeypatch) -> None:
    def fake_request(method, url, **kwargs):
        assert kwargs["data"] == {"grant_type": "refresh_token", "refresh_token": "r-old"}
        return _FakeResp(200, {"access_token": "a2", "expires_in": 3600})

    monkeypatch.setattr("requests.request", fake_request)

    tokens = _oauth().refresh("r-old")

    assert tokens.access_token == "a2"
    assert tokens.refresh_token == "r-old"


def test_token_endpoint_failure_raises_token_error(monkeypatch) -> None:
    monkeypatch.setattr(
        "requests.request",
        lambda method, url, **kw: _FakeResp(400, {"error": "invalid_grant"}),
    )

    with pytest.raises(FreeAgentTokenError) as excinfo:
        _oauth().refresh("r-old")

    assert excinfo.value.status_code == 400
    assert "invalid_grant" in excinfo.value.body


def test_token_endpoint_non_json_raises_token_error(monkeypatch) -> None:
    monkeypatch.setattr(
        "requests.request",
        lambda method, url, **kw: _FakeResp(200, None, text="<html>oops</html>"),
    )

    with pytest.raises(FreeAgentTokenError):
        _oauth().exchange_code("code")


def test_refresh_without_token_is_rejected() -> None:
    with pytest.raises(FreeAgentTokenError):
        _oauth().refresh("")


def test_tokens_expire_sixty_seconds_early() -> None:
    now = 1_700_000_000
    tokens = FreeAgentAuthTokens(access_token="a", refresh_token="r", expires_at_unix=now + 90)

    assert tokens.is_expired(now=now) is False
    assert tokens.is_expired(now=now + 30) is True
    assert FreeAgentAuthTokens(access_token="a", refresh_token="r").is_expired(now=now) is False


def test_token_store_save_and_load(tmp_path) -> None:
    store = TokenStore(str(tmp_path / "tokens.json"), environment="production")
    store.save(FreeAgentAuthTokens(access_token="a", refresh_token="r", expires_at_unix=123))

    raw = json.loads((tmp_path / "tokens.json").read_text())
    assert raw["access_token"] == "a"
    assert raw["saved_at_unix"] is not None

    loaded = store.load()
    assert loaded.refresh_token == "r"
    assert loaded.expires_at_unix == 123
    assert loaded.environment == "sandbox"


def test_token_store_missing_file(tmp_path) -> None:
    store = TokenStore(str(tmp_path / "none.json"))

    assert store.exists() is False
    with pytest.raises(FileNotFoundError):
        store.load()
