"""
Async IPFS API client.

Transport layer for the HTTP API of an IPFS node: session lifecycle,
URL construction, status checking and cancellable streaming.
"""
import json
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Any, AsyncIterator, Mapping
from urllib.parse import urlencode

import aiohttp

from .config import APIConfig
from .errors import IpfsAPIError
from ..cancellation import CancellationToken, guarded
from ..exceptions import IpfsException, TransportError, DecodeError, CancellationError
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous IPFS API client.

    Features:
    - Full async/await support
    - Configurable proxy, SSL, timeouts
    - Connection pooling
    - Streaming request bodies and responses
    - Cooperative cancellation through CancellationToken

    Requests are never retried; failures surface as TransportError.

    Example:
        >>> config = APIConfig.from_url('http://127.0.0.1:5001')
        >>> async with AsyncAPIClient(config) as client:
        ...     info = await client.request_json('id')
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('ipfspy.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._closed:
            raise TransportError("Client is closed")

        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
        self._connector = None

    def build_url(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Build request URL for an API endpoint."""
        url = f"{self._config.base_url}/{endpoint.lstrip('/')}"
        if params:
            url += f"?{urlencode(params)}"
        return url

    def _merge_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        # Caller headers replace the configured ones for this request
        merged = dict(self._config.extra_headers)
        if headers:
            merged.update(headers)
        return merged

    @asynccontextmanager
    async def post_stream(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        POST to an endpoint and hold the streaming response open.

        The response is checked before it is handed out, so the body can
        be consumed with iter_chunks() straight away.

        Args:
            endpoint: Endpoint path below the API root (e.g. 'add')
            params: Query string parameters
            data: Request body (bytes or async iterable of bytes)
            headers: Extra headers for this request
            cancel_token: Aborts the request when fired
            timeout: Optional total timeout in seconds for this request

        Raises:
            IpfsAPIError: If the node answers with a non-success status
            TransportError: If the request fails at the network level
            CancellationError: If the token fires before the response starts
        """
        session = await self._ensure_session()
        url = self.build_url(endpoint, params)
        request_kwargs: Dict[str, Any] = {
            'data': data,
            'headers': self._merge_headers(headers),
            'proxy': self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None,
        }
        if timeout is not None:
            request_kwargs['timeout'] = aiohttp.ClientTimeout(total=timeout)

        self._logger.debug(f"POST {url}")

        async def send() -> aiohttp.ClientResponse:
            return await session.request('POST', url, **request_kwargs)

        try:
            response = await guarded(send(), cancel_token)
        except aiohttp.ClientError as e:
            raise self._translate(e, cancel_token)
        except asyncio.TimeoutError as e:
            raise self._timed_out(f"Request to {endpoint}", e, cancel_token)

        failed = True
        try:
            await self._check_response(response)
            yield response
            failed = False
        finally:
            if failed:
                # Drops the connection so a half-sent body is not reused
                response.close()
            else:
                response.release()

    async def _check_response(self, response: aiohttp.ClientResponse) -> None:
        """Raise IpfsAPIError for non-success statuses."""
        if 200 <= response.status < 300:
            return
        try:
            body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError):
            body = b''
        error = IpfsAPIError.from_response(response.status, body, response.reason)
        self._logger.error(f"Request failed: {error}")
        raise error

    async def iter_chunks(
        self,
        response: aiohttp.ClientResponse,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncIterator[bytes]:
        """
        Yield the response body as it arrives.

        Raises:
            TransportError: If the connection breaks or the timeout expires mid-body
            CancellationError: If the token fires while waiting for data
        """
        while True:
            try:
                chunk = await guarded(response.content.readany(), cancel_token)
            except aiohttp.ClientError as e:
                raise self._translate(e, cancel_token)
            except asyncio.TimeoutError as e:
                raise self._timed_out("Response", e, cancel_token)
            if not chunk:
                return
            yield chunk

    def _translate(
        self,
        error: aiohttp.ClientError,
        cancel_token: Optional[CancellationToken]
    ) -> IpfsException:
        """
        Map an aiohttp failure to the error the caller should see.

        aiohttp wraps exceptions raised while streaming the request body
        (e.g. by the body encoder) in ClientConnectionError; those are
        unwrapped so the original error surfaces.
        """
        if cancel_token is not None and cancel_token.cancelled:
            return CancellationError(cancel_token.reason or "Operation cancelled")

        cause = error.__cause__ or error.__context__
        while cause is not None:
            if isinstance(cause, IpfsException):
                return cause
            cause = cause.__cause__ or cause.__context__

        self._logger.error(f"Network error: {error}")
        transport_error = TransportError(f"Network error: {error}")
        transport_error.__cause__ = error
        return transport_error

    def _timed_out(
        self,
        what: str,
        error: BaseException,
        cancel_token: Optional[CancellationToken]
    ) -> IpfsException:
        """Map an expired timeout to TransportError, unless the token fired first."""
        if cancel_token is not None and cancel_token.cancelled:
            return CancellationError(cancel_token.reason or "Operation cancelled")

        self._logger.error(f"{what} timed out")
        transport_error = TransportError(f"{what} timed out")
        transport_error.__cause__ = error
        return transport_error

    async def request_json(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        """
        One-shot request returning the decoded JSON body.

        Raises:
            IpfsAPIError: If the node answers with a non-success status
            DecodeError: If the body is not valid JSON
        """
        async with self.post_stream(
            endpoint,
            params=params,
            headers=headers,
            cancel_token=cancel_token
        ) as response:
            try:
                body = await guarded(response.read(), cancel_token)
            except aiohttp.ClientError as e:
                raise TransportError(f"Network error while reading response: {e}") from e
            except asyncio.TimeoutError as e:
                raise self._timed_out(f"Request to {endpoint}", e, cancel_token)

        self._logger.debug(f"Response data: {body[:1000]!r}")
        try:
            return json.loads(body.decode('utf-8'))
        except (ValueError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid JSON response from {endpoint}: {e}", line=body[:200]) from e
