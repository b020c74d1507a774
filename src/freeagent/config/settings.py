"""Environment-driven settings for the FreeAgent client.

Values come from the process environment, a local `.env` file, and, for local
runs where `.env` has not been created yet, the non-blank entries of
`.env.example`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import dotenv_values, load_dotenv

PRODUCTION_BASE_URL = "https://api.freeagent.com"
SANDBOX_BASE_URL = "https://api.sandbox.freeagent.com"

DEFAULT_REDIRECT_URI = "http://localhost:8040/freeagent/callback"
DEFAULT_TOKENS_FILE = ".env_freeagent_tokens.json"

load_dotenv(override=False)


def _load_env_example(path: str = ".env.example") -> None:
    # `.env.example` holds blank placeholders for secrets; blanks must never
    # override real values.
    example_path = os.path.abspath(path)
    if not os.path.exists(example_path):
        return
    for k, v in (dotenv_values(example_path) or {}).items():
        if not k or v is None or v == "":
            continue
        if not os.environ.get(k):
            os.environ[k] = v


if not os.environ.get("FREEAGENT_CLIENT_ID"):
    _load_env_example()


def base_url_for(environment: str) -> str:
    return PRODUCTION_BASE_URL if environment == "production" else SANDBOX_BASE_URL


@dataclass(slots=True)
class FreeAgentSettings:
    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    environment: str = "sandbox"
    tokens_path: str = DEFAULT_TOKENS_FILE
    refresh_token: str | None = None
    timeout_seconds: int = 30
    payload_format: str = "json"
    company_country: str | None = None
    user_agent: str | None = None

    @property
    def base_url(self) -> str:
        return base_url_for(self.environment)

    @classmethod
    def from_env(cls) -> "FreeAgentSettings":
        load_dotenv(override=False)
        client_id = os.environ.get("FREEAGENT_CLIENT_ID")
        client_secret = os.environ.get("FREEAGENT_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ValueError("Missing FREEAGENT_CLIENT_ID or FREEAGENT_CLIENT_SECRET")

        environment = (os.environ.get("FREEAGENT_ENVIRONMENT") or "sandbox").strip().lower()
        if environment not in {"sandbox", "production"}:
            raise ValueError(
                f"FREEAGENT_ENVIRONMENT must be 'sandbox' or 'production', got {environment!r}"
            )

        payload_format = (os.environ.get("FREEAGENT_FORMAT") or "json").strip().lower()
        if payload_format not in {"json", "xml"}:
            raise ValueError(f"FREEAGENT_FORMAT must be 'json' or 'xml', got {payload_format!r}")

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=os.environ.get("FREEAGENT_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
            environment=environment,
            tokens_path=os.environ.get("FREEAGENT_TOKENS_PATH") or os.path.abspath(DEFAULT_TOKENS_FILE),
            refresh_token=os.environ.get("FREEAGENT_REFRESH_TOKEN") or None,
            timeout_seconds=int(os.environ.get("FREEAGENT_HTTP_TIMEOUT_SECONDS") or "30"),
            payload_format=payload_format,
            company_country=(os.environ.get("FREEAGENT_COMPANY_COUNTRY") or "").strip().upper()
            or None,
            user_agent=os.environ.get("FREEAGENT_USER_AGENT") or None,
        )
