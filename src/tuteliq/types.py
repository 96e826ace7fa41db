from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import ValidationError

DEFAULT_BASE_URL = "https://api.tuteliq.ai"
MIN_API_KEY_LENGTH = 10


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    # Per-attempt timeout in seconds
    timeout: float = 30.0
    max_retries: int = 3
    # Initial backoff in seconds, doubled after every failed attempt
    retry_delay: float = 1.0
    # GET response cache lifetime in seconds; 0 disables the cache
    cache_ttl: float = 0.0
    # Optional transport (adapter or raw httpx/requests/aiohttp session)
    transport: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not self.api_key:
            raise ValidationError("API key is required")
        if len(self.api_key) < MIN_API_KEY_LENGTH:
            raise ValidationError("API key appears to be invalid (too short)")
        try:
            url = httpx.URL(self.base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ValidationError(f"Invalid base URL: {self.base_url}") from e
        if not url.scheme or not url.host:
            raise ValidationError(f"Invalid base URL: {self.base_url}")
        if self.max_retries < 1:
            raise ValidationError("max_retries must be at least 1")
        for name in ("timeout", "retry_delay", "cache_ttl"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must not be negative")

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='***', base_url={self.base_url!r}, timeout={self.timeout}, "
            f"max_retries={self.max_retries}, retry_delay={self.retry_delay}, "
            f"cache_ttl={self.cache_ttl})"
        )


@dataclass(frozen=True)
class RateLimitInfo:
    # Requests per minute for the current tier
    limit: int
    remaining: int
    # Unix timestamp (seconds) of the window reset
    reset: float


@dataclass(frozen=True)
class Usage:
    """Monthly usage, populated from response headers."""

    limit: int
    used: int
    remaining: int
    # Next monthly reset date (YYYY-MM-DD)
    reset: str | None = None
    # Present when more than 80% of the monthly limit is used
    warning: str | None = None


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    headers: dict[str, str]  # lower-cased names
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300  # noqa: PLR2004, http status code can be constant
