"""FreeAgent API connector.

Purpose
- One place for authenticated HTTP calls: bearer token, Accept/Content-Type,
  timeouts, error mapping.
- Keep OAuth token handling (load/save/refresh) here; a 401 triggers exactly
  one refresh and one replay of the request.
- Follow `Link: <...>; rel='next'` headers when listing.

Resource-specific calls live on the endpoint objects exposed as attributes
(`client.invoices`, `client.bills`...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterator, Mapping

import requests

from src.freeagent.config.settings import FreeAgentSettings, base_url_for
from src.freeagent.integrations.freeagent_auth import FreeAgentAuthTokens, FreeAgentOAuth, TokenStore
from src.freeagent.integrations.freeagent_codec import (
    PayloadFormat,
    collection_items,
    decode,
    format_for_content_type,
)
from src.freeagent.integrations.freeagent_errors import (
    FreeAgentConnectionError,
    FreeAgentDecodeError,
    error_for_status,
    extract_error_messages,
)
from src.freeagent.integrations import freeagent_resources as resources

logger = logging.getLogger(__name__)

PER_PAGE = 100
DEFAULT_USER_AGENT = "freeagent-client-python"


@dataclass(slots=True)
class FreeAgentResponse:
    status_code: int
    payload: dict[str, Any]
    headers: Mapping[str, str]
    content: bytes


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(getattr(value, "value", value))


def clean_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Drop unset query parameters and render the rest as strings."""

    if not params:
        return None
    out = {k: _query_value(v) for k, v in params.items() if v is not None and v != ""}
    return out or None


def next_page_url(headers: Mapping[str, str]) -> str | None:
    link = headers.get("Link") or headers.get("link")
    if not link:
        return None
    for item in requests.utils.parse_header_links(link):
        if item.get("rel") == "next" and item.get("url"):
            return item["url"]
    return None


class FreeAgentClient:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        environment: str,
        tokens_path: str,
        timeout_seconds: int = 30,
        payload_format: PayloadFormat | str = PayloadFormat.JSON,
        company_country: str | None = None,
        user_agent: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        self._environment = environment
        self._timeout_seconds = timeout_seconds
        self._payload_format = PayloadFormat(payload_format)
        self._company_country = company_country
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._bootstrap_refresh_token = refresh_token
        self._store = TokenStore(tokens_path, environment=environment)
        self._oauth = FreeAgentOAuth(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            environment=environment,
            timeout_seconds=timeout_seconds,
        )
        self._tokens: FreeAgentAuthTokens | None = None

        self.invoices = resources.Invoices(self)
        self.bills = resources.Bills(self)
        self.bank_accounts = resources.BankAccounts(self)
        self.bank_transactions = resources.BankTransactions(self)
        self.bank_transaction_explanations = resources.BankTransactionExplanations(self)
        self.categories = resources.Categories(self)
        self.estimates = resources.Estimates(self)
        self.credit_notes = resources.CreditNotes(self)
        self.contacts = resources.Contacts(self)
        self.projects = resources.Projects(self)
        self.notes = resources.Notes(self)
        self.users = resources.Users(self)
        self.company = resources.CompanyEndpoint(self)
        self.vat_returns = resources.VatReturns(self)
        self.self_assessment_returns = resources.SelfAssessmentReturns(self)
        self.payroll = resources.Payroll(self)
        self.payslips = resources.Payslips(self)
        self.capital_asset_types = resources.CapitalAssetTypes(self)
        self.hire_purchases = resources.HirePurchases(self)
        self.cis_bands = resources.CisBands(self)

    @classmethod
    def from_settings(cls, settings: FreeAgentSettings) -> "FreeAgentClient":
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            environment=settings.environment,
            tokens_path=settings.tokens_path,
            timeout_seconds=settings.timeout_seconds,
            payload_format=settings.payload_format,
            company_country=settings.company_country,
            user_agent=settings.user_agent,
            refresh_token=settings.refresh_token,
        )

    @classmethod
    def from_env(cls) -> "FreeAgentClient":
        return cls.from_settings(FreeAgentSettings.from_env())

    @property
    def base_url(self) -> str:
        return base_url_for(self._environment)

    @property
    def payload_format(self) -> PayloadFormat:
        return self._payload_format

    @property
    def company_country(self) -> str | None:
        return self._company_country

    @property
    def oauth(self) -> FreeAgentOAuth:
        return self._oauth

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def load_tokens(self) -> FreeAgentAuthTokens:
        if self._tokens is not None:
            return self._tokens
        if not self._store.exists() and self._bootstrap_refresh_token:
            logger.info("No FreeAgent token file yet; bootstrapping from FREEAGENT_REFRESH_TOKEN")
            self._tokens = self.refresh_tokens(
                FreeAgentAuthTokens(
                    access_token="",
                    refresh_token=self._bootstrap_refresh_token,
                    environment=self._environment,
                )
            )
            return self._tokens
        self._tokens = self._store.load()
        return self._tokens

    def save_tokens(self, tokens: FreeAgentAuthTokens) -> None:
        self._store.save(tokens)
        self._tokens = tokens

    def refresh_tokens(self, tokens: FreeAgentAuthTokens) -> FreeAgentAuthTokens:
        logger.info("Refreshing FreeAgent access token")
        updated = self._oauth.refresh(tokens.refresh_token)
        self.save_tokens(updated)
        return updated

    def _current_tokens(self) -> FreeAgentAuthTokens:
        tokens = self.load_tokens()
        if tokens.is_expired():
            tokens = self.refresh_tokens(tokens)
        return tokens

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        bearer_token: str,
        params: dict[str, str] | None,
        body: bytes | None,
        files: Mapping[str, Any] | None,
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {bearer_token}",
            "Accept": self._payload_format.media_type,
            "User-Agent": self._user_agent,
        }
        if body is not None:
            headers["Content-Type"] = self._payload_format.media_type

        logger.debug(f"FreeAgent {method} {url} params={params}")
        try:
            return requests.request(
                method,
                url,
                headers=headers,
                params=params,
                data=body,
                files=files,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            raise FreeAgentConnectionError(f"{method} {url} failed: {e}") from e

    def request(
        self,
        method: str,
        path_or_url: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: bytes | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> FreeAgentResponse:
        """Send one authenticated request and decode the response.

        Raises the `FreeAgentError` subclass matching any HTTP error status.
        """

        url = self._url(path_or_url)
        query = clean_params(params)
        tokens = self._current_tokens()

        resp = self._send(
            method, url, bearer_token=tokens.access_token, params=query, body=body, files=files
        )
        if resp.status_code == 401:
            tokens = self.refresh_tokens(tokens)
            resp = self._send(
                method, url, bearer_token=tokens.access_token, params=query, body=body, files=files
            )

        headers = resp.headers or {}
        fmt = format_for_content_type(headers.get("Content-Type"), self._payload_format)

        if resp.status_code >= 400:
            logger.warning(f"FreeAgent {method} {url} failed with HTTP {resp.status_code}")
            try:
                messages = extract_error_messages(decode(resp.content, fmt))
            except (FreeAgentDecodeError, ValueError):
                messages = []
            raise error_for_status(
                resp.status_code, messages=messages, body=resp.text, headers=headers
            )

        return FreeAgentResponse(
            status_code=resp.status_code,
            payload=decode(resp.content, fmt),
            headers=headers,
            content=resp.content,
        )

    def get(self, path_or_url: str, *, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return self.request("GET", path_or_url, params=params).payload

    def post(
        self,
        path_or_url: str,
        *,
        body: bytes | None = None,
        params: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self.request("POST", path_or_url, params=params, body=body, files=files).payload

    def put(
        self,
        path_or_url: str,
        *,
        body: bytes | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self.request("PUT", path_or_url, params=params, body=body).payload

    def delete(self, path_or_url: str) -> None:
        self.request("DELETE", path_or_url)

    def iter_pages(
        self, path_or_url: str, *, params: Mapping[str, Any] | None = None
    ) -> Iterator[dict[str, Any]]:
        """Yield each decoded page, following `rel='next'` links until exhausted."""

        query: dict[str, Any] = {"per_page": PER_PAGE, **dict(params or {})}
        url: str | None = path_or_url
        while url:
            resp = self.request("GET", url, params=query)
            yield resp.payload
            url = next_page_url(resp.headers)
            # The next link already carries the query string.
            query = {}

    def get_all(
        self,
        path_or_url: str,
        collection_name: str,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        items: list[Any] = []
        for page in self.iter_pages(path_or_url, params=params):
            items.extend(collection_items(page.get(collection_name), collection_name))
        return items
