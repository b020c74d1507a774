"""Minimal local OAuth2 (3-legged) flow for FreeAgent.

What this does:
- Starts a tiny local HTTP server on your redirect URI
- Opens the FreeAgent "approve app" page in your browser
- Captures the auth `code` on the callback
- Exchanges `code` for access/refresh tokens
- Saves tokens to `.env_freeagent_tokens.json` (keep it out of version control)

Prereqs (env vars):
- FREEAGENT_CLIENT_ID
- FREEAGENT_CLIENT_SECRET
- FREEAGENT_REDIRECT_URI    (must exactly match the app's redirect URI in the FreeAgent developer dashboard)
- FREEAGENT_ENVIRONMENT     (sandbox | production)  [default: sandbox]

Optional:
- FREEAGENT_LOCAL_REDIRECT_URI   Local listener URI for the callback server.
    Use this if FREEAGENT_REDIRECT_URI is a public HTTPS URL (e.g., via ngrok)
    but you still want this script to listen on localhost.

Run:
  python scripts/freeagent_auth_local.py
"""

from __future__ import annotations

import os
import secrets
import threading
import time
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from src.freeagent.config.settings import FreeAgentSettings
from src.freeagent.integrations.freeagent_auth import FreeAgentOAuth, TokenStore


class _CallbackState:
    def __init__(self) -> None:
        self.code: str | None = None
        self.state: str | None = None
        self.error: str | None = None


def main() -> None:
    try:
        settings = FreeAgentSettings.from_env()
    except ValueError as e:
        raise SystemExit(f"{e}. Put it in your .env/.env.example and export it before running.")

    redirect_uri = settings.redirect_uri
    local_redirect_uri = os.environ.get("FREEAGENT_LOCAL_REDIRECT_URI") or redirect_uri

    if urlparse(redirect_uri).scheme not in {"http", "https"}:
        raise SystemExit("FREEAGENT_REDIRECT_URI must start with http:// or https://")

    local_parsed = urlparse(local_redirect_uri)
    if not local_parsed.hostname or not local_parsed.port:
        raise SystemExit(
            "FREEAGENT_LOCAL_REDIRECT_URI must include hostname and port, "
            "e.g. http://localhost:8040/freeagent/callback"
        )

    expected_state = secrets.token_urlsafe(16)
    callback = _CallbackState()

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):  # noqa: N802
            if urlparse(self.path).path != local_parsed.path:
                self.send_response(404)
                self.end_headers()
                self.wfile.write(b"Not found")
                return

            query = parse_qs(urlparse(self.path).query)
            if "error" in query:
                callback.error = query.get("error", [""])[0]
            callback.code = query.get("code", [None])[0]
            callback.state = query.get("state", [None])[0]

            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            self.wfile.write(
                b"<html><body><h3>FreeAgent connected.</h3><p>You can close this tab and return to the terminal.</p></body></html>"
            )

        def log_message(self, *_args, **_kwargs):
            return

    server = HTTPServer((local_parsed.hostname, local_parsed.port), Handler)
    thread = threading.Thread(target=lambda: server.serve_forever(poll_interval=0.1), daemon=True)
    thread.start()

    oauth = FreeAgentOAuth(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=redirect_uri,
        environment=settings.environment,
        timeout_seconds=settings.timeout_seconds,
    )
    auth_url = oauth.authorization_url(state=expected_state)

    print("\n1) Opening the FreeAgent approval page in your browser...")
    print("   If it doesn't open, copy/paste this URL:")
    print(auth_url)
    webbrowser.open(auth_url)

    print("\n2) After you approve, you will be redirected back to:")
    print(f"   {redirect_uri}")
    if local_redirect_uri != redirect_uri:
        print(f"   (This script is listening locally on {local_redirect_uri})")
    print("   Waiting for callback...")

    timeout_s = int(os.environ.get("FREEAGENT_AUTH_TIMEOUT_SECONDS", "180"))
    start = time.time()
    while time.time() - start < timeout_s:
        if callback.error or callback.code:
            break
        time.sleep(0.1)

    server.shutdown()

    if callback.error:
        raise SystemExit(f"OAuth error: {callback.error}")
    if not callback.code:
        raise SystemExit(
            "Timed out waiting for OAuth callback. Check that the redirect URI in the FreeAgent "
            "developer dashboard matches FREEAGENT_REDIRECT_URI exactly."
        )
    if callback.state != expected_state:
        raise SystemExit("OAuth state mismatch; refusing to exchange the code.")

    print("\n3) Exchanging auth code for tokens...")
    tokens = oauth.exchange_code(callback.code)

    store = TokenStore(settings.tokens_path, environment=settings.environment)
    store.save(tokens)

    print("\nSuccess. Tokens saved to:")
    print(f"   {store.path}")
    print("\nNext: run the smoke test:")
    print("  python scripts/freeagent_api_smoke_test.py")


if __name__ == "__main__":
    main()
