from __future__ import annotations

import json
import time
from types import SimpleNamespace

import pytest
import requests

from src.freeagent.integrations.freeagent_auth import FreeAgentAuthTokens
from src.freeagent.integrations.freeagent_errors import (
    FreeAgentAuthenticationError,
    FreeAgentBadRequestError,
    FreeAgentConnectionError,
    FreeAgentError,
    FreeAgentForbiddenError,
    FreeAgentNotAcceptableError,
    FreeAgentNotFoundError,
    FreeAgentRateLimitError,
    FreeAgentServerError,
    FreeAgentValidationError,
)


class _FakeResp:
    def __init__(
        self,
        status_code: int,
        payload: dict | None = None,
        *,
        text: str | None = None,
        headers: dict | None = None,
    ) -> None:
        self.status_code = status_code
        self.text = text if text is not None else (json.dumps(payload) if payload is not None else "")
        self.content = self.text.encode("utf-8")
        self.headers = {"Content-Type": "application/json", **(headers or {})}


def _fresh_tokens(tokens: FreeAgentAuthTokens) -> FreeAgentAuthTokens:
    return FreeAgentAuthTokens(
        access_token="fresh",
        refresh_token=tokens.refresh_token,
        expires_at_unix=int(time.time()) + 3600,
        environment=tokens.environment,
    )


def test_request_refreshes_once_on_401_and_replays(monkeypatch, make_client) -> None:
    client = make_client()
    seen = []

    def fake_request(method, url, **kwargs):
        seen.append(kwargs["headers"]["Authorization"])
        if len(seen) == 1:
            return _FakeResp(401, {"errors": {"error": {"message": "Access token not recognised"}}})
        return _FakeResp(200, {"company": {"name": "Acme Ltd", "currency": "GBP"}})

    monkeypatch.setattr("requests.request", fake_request)
    monkeypatch.setattr(client, "refresh_tokens", _fresh_tokens)

    company = client.company.get()

    assert company.name == "Acme Ltd"
    assert seen == ["Bearer ok", "Bearer fresh"]


def test_second_401_raises_authentication_error(monkeypatch, make_client) -> None:
    client = make_client()
    calls = {"n": 0}

    def fake_request(method, url, **kwargs):
        calls["n"] += 1
        return _FakeResp(401, {"errors": {"error": {"message": "Access token not recognised"}}})

    monkeypatch.setattr("requests.request", fake_request)
    monkeypatch.setattr(client, "refresh_tokens", _fresh_tokens)

    with pytest.raises(FreeAgentAuthenticationError) as excinfo:
        client.get("/v2/company")

    assert calls["n"] == 2
    assert excinfo.value.status_code == 401
    assert excinfo.value.messages == ["Access token not recognised"]


@pytest.mark.parametrize(
    "status, exc_type",
    [
        (400, FreeAgentBadRequestError),
        (403, FreeAgentForbiddenError),
        (404, FreeAgentNotFoundError),
        (406, FreeAgentNotAcceptableError),
        (422, FreeAgentValidationError),
        (429, FreeAgentRateLimitError),
        (500, FreeAgentServerError),
        (503, FreeAgentServerError),
    ],
)
def test_error_statuses_map_to_exception_types(monkeypatch, make_client, status, exc_type) -> None:
    client = make_client()

    def fake_request(method, url, **kwargs):
        return _FakeResp(status, {"errors": [{"message": "first"}, {"message": "second"}]})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(exc_type) as excinfo:
        client.get("/v2/invoices/1")

    assert excinfo.value.status_code == status
    assert excinfo.value.messages == ["first", "second"]
    assert "first" in excinfo.value.body


def test_unmapped_4xx_is_base_error(monkeypatch, make_client) -> None:
    client = make_client()
    monkeypatch.setattr("requests.request", lambda method, url, **kw: _FakeResp(418, text="teapot"))

    with pytest.raises(FreeAgentError) as excinfo:
        client.get("/v2/company")

    assert type(excinfo.value) is FreeAgentError
    assert excinfo.value.status_code == 418
    assert excinfo.value.messages == []


def test_rate_limit_carries_retry_after(monkeypatch, make_client) -> None:
    client = make_client()

    def fake_request(method, url, **kwargs):
        return _FakeResp(429, text="", headers={"Retry-After": "60"})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(FreeAgentRateLimitError) as excinfo:
        client.get("/v2/invoices")

    assert excinfo.value.retry_after == 60


def test_xml_error_body_messages_are_extracted(monkeypatch, make_client) -> None:
    client = make_client(payload_format="xml")
    body = "<errors><error><message>Dated on is invalid</message></error></errors>"

    def fake_request(method, url, **kwargs):
        return _FakeResp(422, text=body, headers={"Content-Type": "application/xml"})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(FreeAgentValidationError) as excinfo:
        client.post("/v2/invoices", body=b"<freeagent/>")

    assert excinfo.value.messages == ["Dated on is invalid"]


def test_network_failure_becomes_connection_error(monkeypatch, make_client) -> None:
    client = make_client()

    def fake_request(method, url, **kwargs):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(FreeAgentConnectionError):
        client.get("/v2/company")


def test_listing_follows_link_header_until_exhausted(monkeypatch, make_client) -> None:
    client = make_client()
    seen = []
    next_url = "https://api.sandbox.freeagent.com/v2/contacts?page=2&per_page=100"

    def fake_request(method, url, **kwargs):
        seen.append(SimpleNamespace(url=url, params=kwargs.get("params")))
        if len(seen) == 1:
            return _FakeResp(
                200,
                {"contacts": [{"organisation_name": "A"}]},
                headers={"Link": f"<{next_url}>; rel='next', <{next_url}>; rel='last'"},
            )
        return _FakeResp(200, {"contacts": [{"organisation_name": "B"}]})

    monkeypatch.setattr("requests.request", fake_request)

    contacts = client.contacts.list(view="active")

    assert [c.organisation_name for c in contacts] == ["A", "B"]
    assert seen[0].url == "https://api.sandbox.freeagent.com/v2/contacts"
    assert seen[0].params == {"per_page": "100", "view": "active"}
    assert seen[1].url == next_url
    assert seen[1].params is None


def test_expired_token_is_refreshed_before_sending(monkeypatch, tmp_path, make_client) -> None:
    tokens_path = tmp_path / "expired.json"
    tokens_path.write_text(
        json.dumps(
            {
                "environment": "sandbox",
                "access_token": "stale",
                "refresh_token": "refresh",
                "expires_at_unix": int(time.time()) + 10,
            }
        )
    )
    client = make_client(tokens_path=str(tokens_path))
    seen = []

    def fake_request(method, url, **kwargs):
        seen.append(kwargs["headers"]["Authorization"])
        return _FakeResp(200, {"user": {"first_name": "Ada"}})

    monkeypatch.setattr("requests.request", fake_request)
    monkeypatch.setattr(client, "refresh_tokens", _fresh_tokens)

    assert client.users.me().first_name == "Ada"
    assert seen == ["Bearer fresh"]


def test_xml_format_sets_accept_and_content_type(monkeypatch, make_client) -> None:
    client = make_client(payload_format="xml", user_agent="acme-books/1.0")
    seen = SimpleNamespace(headers=None, data=None)

    def fake_request(method, url, **kwargs):
        seen.headers = kwargs["headers"]
        seen.data = kwargs["data"]
        return _FakeResp(
            201,
            text="<freeagent><contact><organisation-name>Acme</organisation-name></contact></freeagent>",
            headers={"Content-Type": "application/xml"},
        )

    monkeypatch.setattr("requests.request", fake_request)

    from src.freeagent.models import Contact

    created = client.contacts.create(Contact(organisation_name="Acme"))

    assert created.organisation_name == "Acme"
    assert seen.headers["Accept"] == "application/xml"
    assert seen.headers["Content-Type"] == "application/xml"
    assert seen.headers["User-Agent"] == "acme-books/1.0"
    assert b"<organisation-name>Acme</organisation-name>" in seen.data


def test_bootstrap_refresh_token_used_when_no_token_file(monkeypatch, tmp_path, make_client) -> None:
    tokens_path = tmp_path / "missing.json"
    client = make_client(tokens_path=str(tokens_path), refresh_token="bootstrap")
    refreshed = []

    def fake_oauth_refresh(refresh_token):
        refreshed.append(refresh_token)
        return FreeAgentAuthTokens(access_token="new", refresh_token="rotated")

    monkeypatch.setattr(client.oauth, "refresh", fake_oauth_refresh)

    tokens = client.load_tokens()

    assert refreshed == ["bootstrap"]
    assert tokens.access_token == "new"
    assert json.loads(tokens_path.read_text())["refresh_token"] == "rotated"


def test_missing_token_file_without_bootstrap_raises(tmp_path, make_client) -> None:
    client = make_client(tokens_path=str(tmp_path / "nope.json"))

    with pytest.raises(FileNotFoundError):
        client.load_tokens()


def test_xml_listing_without_array_marker_collects_all_records(monkeypatch, make_client) -> None:
    client = make_client(payload_format="xml")
    body = (
        "<freeagent><contacts>"
        "<contact><organisation-name>A</organisation-name></contact>"
        "<contact><organisation-name>B</organisation-name></contact>"
        "</contacts></freeagent>"
    )

    def fake_request(method, url, **kwargs):
        return _FakeResp(200, text=body, headers={"Content-Type": "application/xml"})

    monkeypatch.setattr("requests.request", fake_request)

    assert [c.organisation_name for c in client.contacts.list()] == ["A", "B"]
