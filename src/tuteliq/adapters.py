import asyncio
import contextlib
from typing import Union

import httpx

from .errors import NetworkError, RequestTimeoutError, UnknownError
from .types import RawResponse

NO_CONNECTION_MESSAGE = "No internet connection"


def _timeout_error(timeout: float) -> RequestTimeoutError:
    return RequestTimeoutError(f"Request timed out after {timeout:g} seconds")


def _lower_headers(headers) -> dict[str, str]:
    return {str(k).lower(): str(v) for k, v in headers.items()}


def _library_of(obj) -> str:
    return type(obj).__module__.split(".")[0]


class Transport:
    """Performs exactly one HTTP exchange and classifies transport failures.

    Implementations return a RawResponse for any HTTP status and raise
    RequestTimeoutError / NetworkError when no response was received at all.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: Union[bytes, None],
        timeout: float,
    ) -> RawResponse:
        raise NotImplementedError

    def close(self) -> None:
        pass


class AsyncTransport:
    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: Union[bytes, None],
        timeout: float,
    ) -> RawResponse:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


# ---------- httpx (sync) ----------
class HttpxTransport(Transport):
    def __init__(self, client: Union[httpx.Client, None] = None):
        self._own_client = client is None
        self.client = client or httpx.Client()

    def send(self, method, url, headers, content, timeout):
        try:
            resp = self.client.request(method, url, headers=headers, content=content, timeout=timeout)
        except httpx.TimeoutException as e:
            raise _timeout_error(timeout) from e
        except httpx.ConnectError as e:
            raise NetworkError(NO_CONNECTION_MESSAGE) from e
        except httpx.InvalidURL as e:
            raise UnknownError(f"Invalid URL: {url}") from e
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__) from e
        return RawResponse(resp.status_code, _lower_headers(resp.headers), resp.content)

    def close(self):
        if self._own_client:
            self.client.close()


# ---------- httpx (async) ----------
class AsyncHttpxTransport(AsyncTransport):
    def __init__(self, client: Union[httpx.AsyncClient, None] = None):
        self._own_client = client is None
        self.client = client or httpx.AsyncClient()

    async def send(self, method, url, headers, content, timeout):
        try:
            resp = await self.client.request(
                method, url, headers=headers, content=content, timeout=timeout
            )
        except httpx.TimeoutException as e:
            raise _timeout_error(timeout) from e
        except httpx.ConnectError as e:
            raise NetworkError(NO_CONNECTION_MESSAGE) from e
        except httpx.InvalidURL as e:
            raise UnknownError(f"Invalid URL: {url}") from e
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__) from e
        return RawResponse(resp.status_code, _lower_headers(resp.headers), resp.content)

    async def aclose(self):
        if self._own_client:
            await self.client.aclose()


# ---------- requests (sync) ----------
class RequestsTransport(Transport):
    def __init__(self, session=None):
        if session is None:
            import requests  # noqa: PLC0415

            session = requests.Session()
            self._own_session = True
        else:
            self._own_session = False
        self.session = session

    def send(self, method, url, headers, content, timeout):
        import requests  # noqa: PLC0415

        try:
            resp = self.session.request(method, url, headers=headers, data=content, timeout=timeout)
        # ConnectTimeout is both a Timeout and a ConnectionError; timeout wins
        except requests.Timeout as e:
            raise _timeout_error(timeout) from e
        except requests.ConnectionError as e:
            raise NetworkError(NO_CONNECTION_MESSAGE) from e
        except requests.RequestException as e:
            raise NetworkError(str(e) or type(e).__name__) from e
        return RawResponse(resp.status_code, _lower_headers(resp.headers), resp.content)

    def close(self):
        if self._own_session:
            with contextlib.suppress(Exception):
                self.session.close()


# ---------- aiohttp (async) ----------
class AiohttpTransport(AsyncTransport):
    def __init__(self, session=None):
        self.session = session
        self._own_session = session is None

    def _ensure_session(self):
        # must stay free of awaits: concurrent first sends then share one session
        if self.session is None:
            import aiohttp  # noqa: PLC0415

            self.session = aiohttp.ClientSession()
        return self.session

    async def send(self, method, url, headers, content, timeout):
        import aiohttp  # noqa: PLC0415

        session = self._ensure_session()
        try:
            async with session.request(
                method,
                url,
                headers=headers,
                data=content,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                body = await resp.read()
                return RawResponse(resp.status, _lower_headers(resp.headers), body)
        except asyncio.TimeoutError as e:
            raise _timeout_error(timeout) from e
        except aiohttp.ClientConnectionError as e:
            raise NetworkError(NO_CONNECTION_MESSAGE) from e
        except aiohttp.ClientError as e:
            raise NetworkError(str(e) or type(e).__name__) from e

    async def aclose(self):
        if self._own_session and self.session is not None:
            await self.session.close()
            self.session = None


SYNC_TRANSPORT_MESSAGE = "transport must be None, a Transport, an httpx.Client or a requests.Session"
ASYNC_TRANSPORT_MESSAGE = (
    "transport must be None, an AsyncTransport, an httpx.AsyncClient or an aiohttp.ClientSession"
)


def coerce_transport(obj) -> Transport:
    """Turn None | Transport | httpx.Client | requests.Session into a Transport."""
    if obj is None:
        return HttpxTransport()
    if isinstance(obj, Transport):
        return obj
    if isinstance(obj, httpx.Client):
        return HttpxTransport(obj)
    if _library_of(obj) == "requests":
        return RequestsTransport(obj)
    # async clients also expose send() but cannot be driven synchronously
    if isinstance(obj, (AsyncTransport, httpx.AsyncClient)) or _library_of(obj) == "aiohttp":
        raise TypeError(SYNC_TRANSPORT_MESSAGE)
    if callable(getattr(obj, "send", None)):
        return obj
    raise TypeError(SYNC_TRANSPORT_MESSAGE)


def coerce_async_transport(obj) -> AsyncTransport:
    """Turn None | AsyncTransport | httpx.AsyncClient | aiohttp.ClientSession into a transport."""
    if obj is None:
        return AsyncHttpxTransport()
    if isinstance(obj, AsyncTransport):
        return obj
    if isinstance(obj, httpx.AsyncClient):
        return AsyncHttpxTransport(obj)
    if _library_of(obj) == "aiohttp":
        return AiohttpTransport(obj)
    if isinstance(obj, (Transport, httpx.Client)) or _library_of(obj) == "requests":
        raise TypeError(ASYNC_TRANSPORT_MESSAGE)
    if callable(getattr(obj, "send", None)):
        return obj
    raise TypeError(ASYNC_TRANSPORT_MESSAGE)
