"""Shared fixtures for FreeAgent client tests."""

import json
import time

import pytest


@pytest.fixture
def tokens_path(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps(
            {
                "environment": "sandbox",
                "access_token": "ok",
                "refresh_token": "refresh",
                "expires_at_unix": int(time.time()) + 3600,
                "token_type": "bearer",
            }
        )
    )
    return path


@pytest.fixture
def make_client(tokens_path):
    """Factory building a sandbox client backed by the temp token file."""
    from src.freeagent.integrations.freeagent_client import FreeAgentClient

    def _make(**overrides):
        kwargs = {
            "client_id": "cid",
            "client_secret": "secret",
            "redirect_uri": "http://localhost:8040/freeagent/callback",
            "environment": "sandbox",
            "tokens_path": str(tokens_path),
        }
        kwargs.update(overrides)
        return FreeAgentClient(**kwargs)

    return _make
