"""Exceptions raised by the FreeAgent client.

HTTP failures map onto one subclass of `FreeAgentError` per status family and
carry the status code, the server's error messages and the raw body.
Client-side rule failures raise `ResourceValidationError` before anything is
sent.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


class FreeAgentError(Exception):
    """Base exception for FreeAgent API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        messages: list[str] | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.messages = list(messages or [])
        self.body = body


class FreeAgentConnectionError(FreeAgentError):
    """Raised when the API cannot be reached or the request times out."""


class FreeAgentTokenError(FreeAgentError):
    """Raised when the OAuth token endpoint rejects a code or refresh token."""


class FreeAgentDecodeError(FreeAgentError):
    """Raised when a response body is not valid JSON/XML or lacks its root key."""


class FreeAgentBadRequestError(FreeAgentError):
    """Raised on 400 (malformed request, bad statement upload...)."""


class FreeAgentAuthenticationError(FreeAgentError):
    """Raised on 401 once a token refresh has already been tried."""


class FreeAgentForbiddenError(FreeAgentError):
    """Raised on 403."""


class FreeAgentNotFoundError(FreeAgentError):
    """Raised on 404."""


class FreeAgentNotAcceptableError(FreeAgentError):
    """Raised on 406 (unsupported Accept / Content-Type)."""


class FreeAgentValidationError(FreeAgentError):
    """Raised on 422."""


class FreeAgentRateLimitError(FreeAgentError):
    """Raised on 429."""

    def __init__(self, message: str, *, retry_after: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class FreeAgentServerError(FreeAgentError):
    """Raised on 5xx."""


class ResourceValidationError(ValueError):
    """A record breaks one or more rules the API enforces.

    `errors` lists every failed rule, not only the first.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid resource")


_STATUS_ERRORS: dict[int, tuple[type[FreeAgentError], str]] = {
    400: (FreeAgentBadRequestError, "Bad request"),
    401: (FreeAgentAuthenticationError, "Authentication failed"),
    403: (FreeAgentForbiddenError, "Access forbidden"),
    404: (FreeAgentNotFoundError, "Resource not found"),
    406: (FreeAgentNotAcceptableError, "Not acceptable"),
    422: (FreeAgentValidationError, "Validation error"),
}


def extract_error_messages(payload: Any) -> list[str]:
    """Pull messages out of a decoded error body.

    Accepts both shapes the API uses:
    `{"errors": {"error": {"message": "..."}}}` and
    `{"errors": [{"message": "..."}, ...]}`.
    """

    if not isinstance(payload, Mapping):
        return []
    errors = payload.get("errors")
    if errors is None:
        return []
    if isinstance(errors, Mapping):
        errors = errors.get("error", errors)
    if isinstance(errors, (Mapping, str)):
        errors = [errors]

    out: list[str] = []
    for item in errors or []:
        if isinstance(item, str):
            if item.strip():
                out.append(item.strip())
        elif isinstance(item, Mapping):
            msg = item.get("message")
            if msg:
                out.append(str(msg))
    return out


def _parse_retry_after(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def error_for_status(
    status_code: int,
    *,
    messages: list[str] | None = None,
    body: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> FreeAgentError:
    """Build the exception matching an HTTP error status."""

    detail = "; ".join(messages or []) or (body or "").strip() or f"HTTP {status_code}"
    kwargs: dict[str, Any] = {"status_code": status_code, "messages": messages, "body": body}

    if status_code == 429:
        retry_after = _parse_retry_after((headers or {}).get("Retry-After"))
        return FreeAgentRateLimitError(
            f"Rate limited: {detail}", retry_after=retry_after, **kwargs
        )
    if status_code in _STATUS_ERRORS:
        exc_type, label = _STATUS_ERRORS[status_code]
        return exc_type(f"{label} ({status_code}): {detail}", **kwargs)
    if status_code >= 500:
        return FreeAgentServerError(f"Server error ({status_code}): {detail}", **kwargs)
    return FreeAgentError(f"API error ({status_code}): {detail}", **kwargs)
