import enum
import json
from dataclasses import dataclass
from typing import Any, Union

DEFAULT_ERROR_MESSAGE = "Request failed"


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    SUBSCRIPTION = "subscription"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    TIMEOUT = "timeout"
    NETWORK = "network"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


# Kinds that abort the retry loop on first sight
NON_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.AUTHENTICATION,
        ErrorKind.VALIDATION,
        ErrorKind.NOT_FOUND,
        ErrorKind.SUBSCRIPTION,
    }
)


@dataclass(frozen=True)
class ErrorLinks:
    upgrade: Union[str, None] = None
    docs: Union[str, None] = None
    dashboard: Union[str, None] = None


@dataclass(frozen=True)
class APIErrorBody:
    """Parsed ``{"error": {...}}`` envelope returned by the API on failure."""

    code: Union[str, None]
    message: Union[str, None]
    details: Any = None
    suggestion: Union[str, None] = None
    links: Union[ErrorLinks, None] = None


class TuteliqError(Exception):
    """Base class of every error the client raises for a failed call."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    label = "Error"

    def __init__(
        self,
        message: str,
        *,
        code: Union[str, None] = None,
        suggestion: Union[str, None] = None,
        links: Union[ErrorLinks, None] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.links = links

    @property
    def retryable(self) -> bool:
        return self.kind not in NON_RETRYABLE_KINDS and self.kind is not ErrorKind.CANCELLED

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(TuteliqError, ValueError):
    """Invalid request parameters (HTTP 400) or invalid client configuration."""

    kind = ErrorKind.VALIDATION
    label = "Validation Error"

    def __init__(self, message: str, *, details: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.details = details


class AuthenticationError(TuteliqError):
    kind = ErrorKind.AUTHENTICATION
    label = "Authentication Error"


class SubscriptionError(TuteliqError):
    """The current plan does not include the endpoint (HTTP 403)."""

    kind = ErrorKind.SUBSCRIPTION
    label = "Subscription Error"


class NotFoundError(TuteliqError):
    kind = ErrorKind.NOT_FOUND
    label = "Not Found"


class RateLimitError(TuteliqError):
    kind = ErrorKind.RATE_LIMIT
    label = "Rate Limit Error"


class ServerError(TuteliqError):
    kind = ErrorKind.SERVER
    label = "Server Error"

    def __init__(self, message: str, *, status_code: int, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.label} ({self.status_code}): {self.message}"


class RequestTimeoutError(TuteliqError):
    kind = ErrorKind.TIMEOUT
    label = "Timeout"


class NetworkError(TuteliqError):
    kind = ErrorKind.NETWORK
    label = "Network Error"


class RequestCancelledError(TuteliqError):
    """Raised when the caller's CancellationToken fired before an attempt started."""

    kind = ErrorKind.CANCELLED
    label = "Cancelled"

    def __init__(self, message: str = "Request was cancelled", **kwargs):
        super().__init__(message, **kwargs)


class UnknownError(TuteliqError):
    kind = ErrorKind.UNKNOWN
    label = "Error"


# ---------- Classification ----------


def _parse_links(raw) -> Union[ErrorLinks, None]:
    if not isinstance(raw, dict):
        return None
    return ErrorLinks(
        upgrade=raw.get("upgrade"),
        docs=raw.get("docs"),
        dashboard=raw.get("dashboard"),
    )


def parse_error_body(content: Union[bytes, str, None]) -> Union[APIErrorBody, None]:
    """Parse an API error envelope; return None if the body is not one."""
    if not content:
        return None
    try:
        payload = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("error"), dict):
        return None
    err = payload["error"]
    message = err.get("message")
    code = err.get("code")
    suggestion = err.get("suggestion")
    return APIErrorBody(
        code=code if isinstance(code, str) else None,
        message=message if isinstance(message, str) else None,
        details=err.get("details"),
        suggestion=suggestion if isinstance(suggestion, str) else None,
        links=_parse_links(err.get("links")),
    )


def classify_status(
    status_code: int,
    message: Union[str, None] = None,
    *,
    code: Union[str, None] = None,
    details: Any = None,
    suggestion: Union[str, None] = None,
    links: Union[ErrorLinks, None] = None,
) -> TuteliqError:
    """Map an HTTP status code (plus parsed error fields) to its error type.

    Pure function: the kind depends on the status code only, never on the message.
    """
    message = message or DEFAULT_ERROR_MESSAGE
    extra = {"code": code, "suggestion": suggestion, "links": links}
    if status_code == 400:  # noqa: PLR2004, http status code can be constant
        return ValidationError(message, details=details, **extra)
    if status_code == 401:  # noqa: PLR2004, http status code can be constant
        return AuthenticationError(message, **extra)
    if status_code == 403:  # noqa: PLR2004, http status code can be constant
        return SubscriptionError(message, **extra)
    if status_code == 404:  # noqa: PLR2004, http status code can be constant
        return NotFoundError(message, **extra)
    if status_code == 429:  # noqa: PLR2004, http status code can be constant
        return RateLimitError(message, **extra)
    if status_code >= 500:  # noqa: PLR2004, http status code can be constant
        return ServerError(message, status_code=status_code, **extra)
    return UnknownError(message, **extra)


def error_from_response(status_code: int, content: Union[bytes, None]) -> TuteliqError:
    body = parse_error_body(content)
    if body is None:
        return classify_status(status_code)
    return classify_status(
        status_code,
        body.message,
        code=body.code,
        details=body.details,
        suggestion=body.suggestion,
        links=body.links,
    )
