import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union
from urllib.parse import urlencode

from .types import RateLimitInfo, Usage

REQUEST_ID_HEADER = "x-request-id"
RATE_LIMIT_HEADERS = ("x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset")
MONTHLY_HEADERS = ("x-monthly-limit", "x-monthly-used", "x-monthly-remaining")
MONTHLY_RESET_HEADER = "x-monthly-reset"
USAGE_WARNING_HEADER = "x-usage-warning"


def _header(headers: Mapping[str, str], name: str) -> Union[str, None]:
    for k, v in headers.items():
        if k.lower() == name:
            return v
    return None


def _parse_int(value: Union[str, None]) -> Union[int, None]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_float(value: Union[str, None]) -> Union[float, None]:
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


def parse_rate_limit(headers: Mapping[str, str]) -> Union[RateLimitInfo, None]:
    limit_h, remaining_h, reset_h = (_header(headers, h) for h in RATE_LIMIT_HEADERS)
    limit, remaining, reset = _parse_int(limit_h), _parse_int(remaining_h), _parse_float(reset_h)
    if limit is None or remaining is None or reset is None:
        return None
    return RateLimitInfo(limit=limit, remaining=remaining, reset=reset)


def parse_usage(headers: Mapping[str, str]) -> Union[Usage, None]:
    limit, used, remaining = (_parse_int(_header(headers, h)) for h in MONTHLY_HEADERS)
    if limit is None or used is None or remaining is None:
        return None
    return Usage(
        limit=limit,
        used=used,
        remaining=remaining,
        reset=_header(headers, MONTHLY_RESET_HEADER),
        warning=_header(headers, USAGE_WARNING_HEADER),
    )


@dataclass(frozen=True)
class MetadataSnapshot:
    request_id: Union[str, None]
    latency: Union[float, None]
    rate_limit: Union[RateLimitInfo, None]
    usage: Union[Usage, None]


class ResponseMetadata:
    """Latest request diagnostics, shared by every call made through one client.

    Each header group is applied all-or-nothing: a response that lacks (or has a
    malformed) member of the rate-limit or monthly-usage group leaves the previous
    value for that group untouched.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._request_id: Union[str, None] = None
        self._latency: Union[float, None] = None
        self._rate_limit: Union[RateLimitInfo, None] = None
        self._usage: Union[Usage, None] = None

    def update(self, headers: Mapping[str, str], latency: float) -> None:
        # parse outside the lock, publish inside
        request_id = _header(headers, REQUEST_ID_HEADER)
        rate_limit = parse_rate_limit(headers)
        usage = parse_usage(headers)
        with self._lock:
            self._latency = latency
            self._request_id = request_id
            if rate_limit is not None:
                self._rate_limit = rate_limit
            if usage is not None:
                self._usage = usage

    @property
    def last_request_id(self) -> Union[str, None]:
        with self._lock:
            return self._request_id

    @property
    def last_latency(self) -> Union[float, None]:
        with self._lock:
            return self._latency

    @property
    def rate_limit_info(self) -> Union[RateLimitInfo, None]:
        with self._lock:
            return self._rate_limit

    @property
    def usage(self) -> Union[Usage, None]:
        with self._lock:
            return self._usage

    def snapshot(self) -> MetadataSnapshot:
        with self._lock:
            return MetadataSnapshot(
                request_id=self._request_id,
                latency=self._latency,
                rate_limit=self._rate_limit,
                usage=self._usage,
            )


@dataclass
class _CacheEntry:
    data: bytes
    expires_at: float


def cache_key(path: str, query: Union[Mapping[str, str], None] = None) -> str:
    items = sorted((query or {}).items())
    return f"{path}?" + urlencode(items)


class ResponseCache:
    """In-process GET response cache with lazy expiry (no background sweeper)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, key: str, now: float) -> Union[bytes, None]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                return None
            return entry.data

    def put(self, key: str, data: bytes, ttl: float, now: float) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(data=data, expires_at=now + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
