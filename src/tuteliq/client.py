import asyncio
import enum
import logging
import time
from collections.abc import Mapping
from typing import Any, Union

import httpx

from .adapters import coerce_async_transport, coerce_transport
from .cancellation import CancellationToken
from .endpoints import EndpointsMixin, analysis_requests, merge_analysis
from .env import load_config_from_env
from .errors import TuteliqError, UnknownError, error_from_response
from .models import AnalyzeInput, AnalyzeResult
from .multipart import MultipartBuilder
from .serialization import decode_json, encode_json
from .state import MetadataSnapshot, ResponseCache, ResponseMetadata, cache_key
from .types import DEFAULT_BASE_URL, ClientConfig, RateLimitInfo, RawResponse, Usage

JSON_CONTENT_TYPE = "application/json"


def _query_text(value) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _BaseClient(EndpointsMixin):
    """Shared configuration, state and pure helpers of the sync and async clients."""

    def __init__(
        self,
        api_key: Union[str, None] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        cache_ttl: float = 0.0,
        transport: Any = None,
        config: Union[ClientConfig, None] = None,
        log_level: Union[int, str, None] = None,
    ):
        if config is None:
            config = ClientConfig(
                api_key=api_key or "",
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
                retry_delay=retry_delay,
                cache_ttl=cache_ttl,
                transport=transport,
            )
        self.config = config
        self._logger = logging.getLogger("tuteliq")
        if log_level is not None:
            self._logger.setLevel(log_level)
        self._metadata = ResponseMetadata()
        self._cache = ResponseCache()

    @classmethod
    def from_env(
        cls,
        prefix: str = "TUTELIQ_",
        env_path: Union[str, None] = None,
        log_level: Union[int, str, None] = None,
        **overrides,
    ):
        """Build a client from TUTELIQ_* variables (optionally augmented by a .env file)."""
        return cls(config=load_config_from_env(prefix, env_path, **overrides), log_level=log_level)

    # ---------- response metadata ----------
    @property
    def usage(self) -> Union[Usage, None]:
        return self._metadata.usage

    @property
    def last_request_id(self) -> Union[str, None]:
        return self._metadata.last_request_id

    @property
    def last_latency(self) -> Union[float, None]:
        """Wall-clock seconds spent in the transport on the latest attempt."""
        return self._metadata.last_latency

    @property
    def rate_limit_info(self) -> Union[RateLimitInfo, None]:
        return self._metadata.rate_limit_info

    @property
    def metadata(self) -> MetadataSnapshot:
        return self._metadata.snapshot()

    def clear_cache(self) -> None:
        self._cache.clear()

    # ---------- helpers ----------
    def _now(self) -> float:
        return time.monotonic()

    @staticmethod
    def _query(query: Union[Mapping[str, Any], None]) -> dict[str, str]:
        return {k: _query_text(v) for k, v in (query or {}).items() if v is not None}

    def _build_url(self, path: str, query: Mapping[str, str]) -> str:
        try:
            url = httpx.URL(self.config.base_url.rstrip("/") + path, params=query or None)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise UnknownError(f"Invalid URL path: {path}") from e
        return str(url)

    def _headers(self, content_type: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": content_type,
            "Accept": JSON_CONTENT_TYPE,
        }

    @staticmethod
    def _encode_body(body: Any) -> Union[bytes, None]:
        if body is None:
            return None
        if isinstance(body, Mapping):
            body = {k: v for k, v in body.items() if v is not None}
        return encode_json(body)

    def _check_response(self, raw: RawResponse) -> bytes:
        if raw.ok:
            return raw.content
        raise error_from_response(raw.status_code, raw.content)

    def _cache_key(self, method: str, path: str, query: Mapping[str, str]) -> Union[str, None]:
        if method != "GET" or self.config.cache_ttl <= 0:
            return None
        return cache_key(path, query)

    def _backoff(self, attempt: int) -> float:
        return self.config.retry_delay * (2**attempt)

    @staticmethod
    def _decoder(result):
        if result is None:
            return lambda content: content

        def _decode(content: bytes):
            try:
                return decode_json(result, content)
            except (ValueError, TypeError, KeyError) as e:
                raise UnknownError(f"Failed to decode {result.__name__}: {e}") from e

        return _decode

    def _cached(self, key: Union[str, None], path: str) -> Union[bytes, None]:
        if key is None:
            return None
        data = self._cache.get(key, self._now())
        if data is not None:
            self._logger.debug(f"cache hit path={path}")
        return data

    def _store(self, key: Union[str, None], data: bytes) -> None:
        if key is not None:
            self._cache.put(key, data, self.config.cache_ttl, self._now())

    def _retry_or_raise(self, error: TuteliqError, attempt: int, path: str) -> Union[float, None]:
        """Return the backoff before the next attempt, or None when attempts are exhausted."""
        if not error.retryable:
            raise error
        if attempt >= self.config.max_retries - 1:
            return None
        delay = self._backoff(attempt)
        self._logger.info(
            f"retrying path={path} attempt={attempt + 2}/{self.config.max_retries} "
            f"in {delay:g}s after {error.kind.value}"
        )
        return delay

    def _exhausted(self, last_error: Union[TuteliqError, None]) -> TuteliqError:
        if last_error is not None:
            return last_error
        return UnknownError(f"Request failed after {self.config.max_retries} attempts")


class Tuteliq(_BaseClient):
    """Synchronous Tuteliq API client.

    Safe to share between threads. Pass ``transport=`` to inject an httpx.Client,
    a requests.Session or a custom Transport; the default is an owned httpx.Client.
    """

    def __init__(self, api_key: Union[str, None] = None, **kwargs):
        super().__init__(api_key, **kwargs)
        self._transport = coerce_transport(self.config.transport)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    # ---------- execution ----------
    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: Union[Mapping[str, Any], None] = None,
        *,
        cancel: Union[CancellationToken, None] = None,
    ) -> bytes:
        """Run a JSON request through the retry loop and return the raw 2xx body."""
        return self._run(method, path, self._encode_body(body), JSON_CONTENT_TYPE, query, None, cancel)

    def execute_multipart(
        self,
        path: str,
        body: bytes,
        boundary: str,
        *,
        cancel: Union[CancellationToken, None] = None,
    ) -> bytes:
        content_type = f"multipart/form-data; boundary={boundary}"
        return self._run("POST", path, body, content_type, None, None, cancel)

    def _request(self, method, path, *, body=None, query=None, result=None, cancel=None):
        content = self._encode_body(body)
        return self._run(method, path, content, JSON_CONTENT_TYPE, query, result, cancel)

    def _request_multipart(self, path, builder: MultipartBuilder, *, result=None, cancel=None):
        return self._run("POST", path, builder.build(), builder.content_type, None, result, cancel)

    def _run(self, method, path, content, content_type, query, result, cancel):
        query = self._query(query)
        decode = self._decoder(result)
        key = self._cache_key(method, path, query)
        cached = self._cached(key, path)
        if cached is not None:
            return decode(cached)

        last_error = None
        for attempt in range(self.config.max_retries):
            if cancel is not None:
                cancel.raise_if_cancelled()
            try:
                data = self._perform(method, path, query, content, content_type)
                value = decode(data)
            except TuteliqError as e:
                last_error = e
                delay = self._retry_or_raise(e, attempt, path)
                if delay is None:
                    break
                self._sleep(delay, cancel)
                continue
            self._store(key, data)
            return value
        raise self._exhausted(last_error)

    def _perform(self, method, path, query, content, content_type) -> bytes:
        url = self._build_url(path, query)
        headers = self._headers(content_type)
        self._logger.debug(f"req start method={method} path={path}")
        started = time.perf_counter()
        try:
            raw = self._transport.send(method, url, headers, content, self.config.timeout)
        except TuteliqError as e:
            self._logger.warning(f"request error method={method} path={path}: {e}")
            raise
        latency = time.perf_counter() - started
        self._metadata.update(raw.headers, latency)
        self._logger.debug(
            f"req done method={method} path={path} status={raw.status_code} latency={latency:.3f}s"
        )
        return self._check_response(raw)

    def _sleep(self, delay: float, cancel: Union[CancellationToken, None]) -> None:
        if cancel is None:
            time.sleep(delay)
        else:
            cancel.wait(delay)

    # ---------- combined analysis ----------
    def analyze(
        self,
        input: Union[AnalyzeInput, str],
        *,
        context=None,
        cancel: Union[CancellationToken, None] = None,
    ) -> AnalyzeResult:
        """Run bullying and unsafe detection and merge them into one risk summary."""
        input, bullying_input, unsafe_input = analysis_requests(input, context)
        bullying = self.detect_bullying(bullying_input, cancel=cancel) if bullying_input else None
        unsafe = self.detect_unsafe(unsafe_input, cancel=cancel) if unsafe_input else None
        return merge_analysis(input, bullying, unsafe)


class AsyncTuteliq(_BaseClient):
    """asyncio Tuteliq API client; every endpoint method is a coroutine.

    Cancelling the awaiting task raises asyncio.CancelledError as usual; a
    CancellationToken passed as ``cancel=`` stops the retry loop cooperatively.
    """

    def __init__(self, api_key: Union[str, None] = None, **kwargs):
        super().__init__(api_key, **kwargs)
        self._transport = coerce_async_transport(self.config.transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        aclose = getattr(self._transport, "aclose", None)
        if callable(aclose):
            await aclose()

    # ---------- execution ----------
    async def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: Union[Mapping[str, Any], None] = None,
        *,
        cancel: Union[CancellationToken, None] = None,
    ) -> bytes:
        return await self._run(
            method, path, self._encode_body(body), JSON_CONTENT_TYPE, query, None, cancel
        )

    async def execute_multipart(
        self,
        path: str,
        body: bytes,
        boundary: str,
        *,
        cancel: Union[CancellationToken, None] = None,
    ) -> bytes:
        content_type = f"multipart/form-data; boundary={boundary}"
        return await self._run("POST", path, body, content_type, None, None, cancel)

    async def _request(self, method, path, *, body=None, query=None, result=None, cancel=None):
        content = self._encode_body(body)
        return await self._run(method, path, content, JSON_CONTENT_TYPE, query, result, cancel)

    async def _request_multipart(self, path, builder: MultipartBuilder, *, result=None, cancel=None):
        return await self._run(
            "POST", path, builder.build(), builder.content_type, None, result, cancel
        )

    async def _run(self, method, path, content, content_type, query, result, cancel):
        query = self._query(query)
        decode = self._decoder(result)
        key = self._cache_key(method, path, query)
        cached = self._cached(key, path)
        if cached is not None:
            return decode(cached)

        last_error = None
        for attempt in range(self.config.max_retries):
            if cancel is not None:
                cancel.raise_if_cancelled()
            try:
                data = await self._perform(method, path, query, content, content_type)
                value = decode(data)
            except TuteliqError as e:
                last_error = e
                delay = self._retry_or_raise(e, attempt, path)
                if delay is None:
                    break
                await self._sleep(delay, cancel)
                continue
            self._store(key, data)
            return value
        raise self._exhausted(last_error)

    async def _perform(self, method, path, query, content, content_type) -> bytes:
        url = self._build_url(path, query)
        headers = self._headers(content_type)
        self._logger.debug(f"req start method={method} path={path}")
        started = time.perf_counter()
        try:
            raw = await self._transport.send(method, url, headers, content, self.config.timeout)
        except TuteliqError as e:
            self._logger.warning(f"request error method={method} path={path}: {e}")
            raise
        latency = time.perf_counter() - started
        self._metadata.update(raw.headers, latency)
        self._logger.debug(
            f"req done method={method} path={path} status={raw.status_code} latency={latency:.3f}s"
        )
        return self._check_response(raw)

    async def _sleep(self, delay: float, cancel: Union[CancellationToken, None]) -> None:
        if cancel is None:
            await asyncio.sleep(delay)
            return
        loop = asyncio.get_running_loop()
        woken = loop.create_future()

        def _set():
            if not woken.done():
                woken.set_result(None)

        remove = cancel.add_callback(lambda: loop.call_soon_threadsafe(_set))
        try:
            await asyncio.wait({woken}, timeout=delay)
        finally:
            remove()
            if not woken.done():
                woken.cancel()

    # ---------- combined analysis ----------
    async def analyze(
        self,
        input: Union[AnalyzeInput, str],
        *,
        context=None,
        cancel: Union[CancellationToken, None] = None,
    ) -> AnalyzeResult:
        """Run bullying and unsafe detection concurrently and merge them."""
        input, bullying_input, unsafe_input = analysis_requests(input, context)

        async def _skip():
            return None

        tasks = [
            asyncio.ensure_future(
                self.detect_bullying(bullying_input, cancel=cancel) if bullying_input else _skip()
            ),
            asyncio.ensure_future(
                self.detect_unsafe(unsafe_input, cancel=cancel) if unsafe_input else _skip()
            ),
        ]
        try:
            bullying, unsafe = await asyncio.gather(*tasks)
        except BaseException:
            # first failure wins; do not leave the sibling request running
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return merge_analysis(input, bullying, unsafe)
