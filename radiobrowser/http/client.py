"""Radio Browser API HTTP client.

Sends one request per call, classifies the HTTP status and decodes the
body. No retries: a 5xx resets the mirror selection so that the next call
picks a fresh mirror, and the failing call still raises.
"""

import asyncio
import logging
import random
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx

from radiobrowser.config import RadioBrowserConfig
from radiobrowser.core.decoding import decode_logging
from radiobrowser.core.errors import (
    APIResponseError,
    DecodingError,
    NotFoundError,
    RadioBrowserError,
    RateLimitedError,
    ServerUnavailableError,
    TransportError,
)
from radiobrowser.core.queries import SortOrder
from radiobrowser.http.builder import build_request, to_curl
from radiobrowser.http.mirrors import MirrorSelector
from radiobrowser.utilities.logging import CategoryLogger, LogCategory

T = TypeVar("T")

NETWORK = LogCategory.NETWORK
DECODE = LogCategory.DECODE


class APIClient:
    """Low-level Radio Browser API client.

    Owns the transport and the mirror selector. Decoding is delegated to
    the decoder callable passed with each call.

    If http_client is given it is used as-is and not closed by close().
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        config: RadioBrowserConfig | None = None,
        logger: CategoryLogger | None = None,
        rng: random.Random | None = None,
    ):
        self._config = config or RadioBrowserConfig()
        self._log = logger or CategoryLogger(self._config.logging)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=10),
        )
        self._mirrors = MirrorSelector(
            self._client,
            fixed_url=self._config.base_url,
            bootstrap_url=self._config.bootstrap_url,
            timeout=self._config.timeout,
            user_agent=self._config.user_agent,
            logger=self._log,
            rng=rng,
        )

    @property
    def config(self) -> RadioBrowserConfig:
        return self._config

    @property
    def mirrors(self) -> MirrorSelector:
        return self._mirrors

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    async def get(
        self,
        path: str,
        decoder: Callable[[Any], T],
        *,
        order: SortOrder | None = None,
        reverse: bool | None = None,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool | None = None,
        additional_params: Mapping[str, str] | None = None,
    ) -> T:
        """GET an endpoint on the current mirror and decode the response."""
        base_url = await self._mirrors.get_base_url()
        request = build_request(
            base_url,
            path,
            order=order,
            reverse=reverse,
            offset=offset,
            limit=limit,
            hidebroken=hidebroken,
            additional_params=additional_params,
            user_agent=self._config.user_agent,
        )
        return await self.perform(request, decoder)

    async def post(self, path: str, body: Any, decoder: Callable[[Any], T]) -> T:
        """POST a JSON body to an endpoint on the current mirror."""
        base_url = await self._mirrors.get_base_url()
        request = build_request(
            base_url,
            path,
            method="POST",
            json_body=body,
            user_agent=self._config.user_agent,
        )
        return await self.perform(request, decoder)

    async def perform(self, request: httpx.Request, decoder: Callable[[Any], T]) -> T:
        """Send a built request, classify the status and decode the body."""
        request.extensions["timeout"] = httpx.Timeout(self._config.timeout).as_dict()
        self._log_request(request)

        try:
            response = await asyncio.wait_for(
                self._client.send(request), timeout=self._config.resource_timeout
            )
        except RadioBrowserError:
            raise
        except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
            self._log.error(
                NETWORK, "[NETWORK] %s %s failed: %r", request.method, request.url.path, e
            )
            raise TransportError(e) from e

        status = response.status_code
        self._log.debug(
            NETWORK, "[NETWORK] %s %s -> HTTP %d", request.method, request.url.path, status
        )

        if 200 <= status < 300:
            return self._decode(response, decoder)

        if status == 404:
            raise NotFoundError()

        if status == 429:
            self._log.warning(NETWORK, "[NETWORK] Rate limited by %s", request.url.host)
            raise RateLimitedError()

        if 500 <= status < 600:
            self._log.warning(
                NETWORK, "[NETWORK] HTTP %d from %s, resetting mirror", status, request.url.host
            )
            await self._mirrors.reset()
            raise ServerUnavailableError(status)

        raise APIResponseError(self._error_message(response))

    def _decode(self, response: httpx.Response, decoder: Callable[[Any], T]) -> T:
        try:
            payload = response.json()
        except ValueError as e:
            self._log.error(DECODE, "[DECODE] Invalid JSON from %s: %s", response.url.path, e)
            raise DecodingError(f"Invalid JSON response: {e}", e) from e

        try:
            with decode_logging(self._log):
                return decoder(payload)
        except DecodingError as e:
            self._log.error(DECODE, "[DECODE] %s: %s", response.url.path, e)
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._log.error(DECODE, "[DECODE] %s: %r", response.url.path, e)
            raise DecodingError(f"Unexpected response shape: {e}", e) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            text = response.content.decode("utf-8")
        except UnicodeDecodeError:
            text = ""
        return text or f"HTTP {response.status_code}"

    def _log_request(self, request: httpx.Request) -> None:
        if not self._log.is_enabled(logging.DEBUG, NETWORK):
            return
        query = request.url.query.decode("ascii", errors="replace")
        self._log.debug(
            NETWORK,
            "[NETWORK] %s %s%s",
            request.method,
            request.url.path,
            f"?{self._log.redact_query(query)}" if query else "",
        )
        if self._log.config.emit_curl:
            self._log.debug(NETWORK, "[NETWORK] %s", to_curl(request))

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
