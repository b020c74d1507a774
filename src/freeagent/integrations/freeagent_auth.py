"""OAuth 2 for FreeAgent.

Purpose
- Build the approve-app URL for the 3-legged flow.
- Exchange authorisation codes and refresh tokens at the token endpoint.
- Persist the token pair to a local JSON file.

The token endpoint uses HTTP basic client authentication (client id/secret).
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

from src.freeagent.config.settings import base_url_for
from src.freeagent.integrations.freeagent_errors import FreeAgentTokenError

logger = logging.getLogger(__name__)

# Tokens are treated as expired this many seconds before the server says so.
EXPIRY_SKEW_SECONDS = 60


@dataclass(slots=True)
class FreeAgentAuthTokens:
    access_token: str
    refresh_token: str
    expires_at_unix: int | None = None
    token_type: str = "bearer"
    environment: str = "sandbox"
    saved_at_unix: int | None = None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at_unix is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expires_at_unix - EXPIRY_SKEW_SECONDS

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at_unix": self.expires_at_unix,
            "token_type": self.token_type,
            "saved_at_unix": self.saved_at_unix,
        }


class TokenStore:
    """JSON file holding the current token pair."""

    def __init__(self, path: str, *, environment: str = "sandbox") -> None:
        self._path = path
        self._environment = environment

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.exists(self._path)

    def load(self) -> FreeAgentAuthTokens:
        if not self.exists():
            raise FileNotFoundError(
                f"Token file not found: {self._path}. Run scripts/freeagent_auth_local.py first."
            )
        with open(self._path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        return FreeAgentAuthTokens(
            access_token=raw["access_token"],
            refresh_token=raw["refresh_token"],
            expires_at_unix=raw.get("expires_at_unix"),
            token_type=raw.get("token_type") or "bearer",
            environment=raw.get("environment") or self._environment,
            saved_at_unix=raw.get("saved_at_unix"),
        )

    def save(self, tokens: FreeAgentAuthTokens) -> None:
        tokens.saved_at_unix = int(time.time())
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(tokens.to_dict(), f, indent=2)


class FreeAgentOAuth:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        environment: str = "sandbox",
        timeout_seconds: int = 30,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._environment = environment
        self._timeout_seconds = timeout_seconds

    @property
    def token_url(self) -> str:
        return f"{base_url_for(self._environment)}/v2/token_endpoint"

    def authorization_url(self, state: str | None = None) -> str:
        params = {
            "client_id": self._client_id,
            "response_type": "code",
            "redirect_uri": self._redirect_uri,
        }
        if state:
            params["state"] = state
        return f"{base_url_for(self._environment)}/v2/approve_app?{urlencode(params)}"

    def exchange_code(self, code: str) -> FreeAgentAuthTokens:
        return self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
            }
        )

    def refresh(self, refresh_token: str) -> FreeAgentAuthTokens:
        if not refresh_token:
            raise FreeAgentTokenError("Cannot refresh without a refresh token")
        return self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            previous_refresh_token=refresh_token,
        )

    def _token_request(
        self,
        data: dict[str, str],
        *,
        previous_refresh_token: str | None = None,
    ) -> FreeAgentAuthTokens:
        try:
            resp = requests.request(
                "POST",
                self.token_url,
                auth=(self._client_id, self._client_secret),
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            raise FreeAgentTokenError(f"Token endpoint unreachable: {e}") from e

        if resp.status_code >= 400:
            logger.warning(
                f"FreeAgent token endpoint returned HTTP {resp.status_code} "
                f"for grant_type={data.get('grant_type')}"
            )
            raise FreeAgentTokenError(
                f"Token request failed (HTTP {resp.status_code})",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            raw = resp.json()
        except ValueError as e:
            raise FreeAgentTokenError(
                "Token endpoint returned a non-JSON body", body=resp.text
            ) from e

        access_token = raw.get("access_token")
        refresh_token = raw.get("refresh_token") or previous_refresh_token
        if not access_token or not refresh_token:
            raise FreeAgentTokenError(
                "Token response is missing access_token/refresh_token", body=resp.text
            )

        expires_in = raw.get("expires_in")
        expires_at = int(time.time()) + int(expires_in) if expires_in else None

        return FreeAgentAuthTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at_unix=expires_at,
            token_type=raw.get("token_type") or "bearer",
            environment=self._environment,
        )
