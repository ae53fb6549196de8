"""Mirror selection for the Radio Browser API.

The API is served by a federation of equivalent mirrors. The selector
picks one at random from the bootstrap server list the first time a base
URL is needed, keeps it until a server failure resets it, and falls back
to the bootstrap host itself when discovery fails.

States:
- FIXED: a base URL was pinned at construction; it is never replaced
- UNDISCOVERED: no mirror chosen yet; the next lookup discovers one
- DISCOVERED: a mirror is cached and returned without network access
"""

import asyncio
import random
from enum import Enum

import httpx

from radiobrowser.config import DEFAULT_BOOTSTRAP_URL, USER_AGENT
from radiobrowser.core.decoding import decode_list, decode_logging
from radiobrowser.core.errors import RadioBrowserError
from radiobrowser.core.types import StreamingServerMirror
from radiobrowser.http.builder import build_request
from radiobrowser.utilities.logging import CategoryLogger, LogCategory

MIRRORS = LogCategory.MIRRORS


def _is_absolute(url: str) -> bool:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return False
    return bool(parsed.scheme) and bool(parsed.host)


class MirrorState(Enum):
    FIXED = "fixed"
    UNDISCOVERED = "undiscovered"
    DISCOVERED = "discovered"


class MirrorSelector:
    """Resolves the base URL for every outgoing request.

    All state changes happen under one asyncio.Lock, so a discovery in
    progress cannot interleave with a reset and concurrent callers share
    a single discovery.

    Usage:
        selector = MirrorSelector(http_client)
        base_url = await selector.get_base_url()
        ...
        await selector.reset()  # after a 5xx; next lookup rediscovers
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        fixed_url: str | None = None,
        bootstrap_url: str = DEFAULT_BOOTSTRAP_URL,
        timeout: float | None = None,
        user_agent: str = USER_AGENT,
        logger: CategoryLogger | None = None,
        rng: random.Random | None = None,
    ):
        self._http = http_client
        self._fixed_url = fixed_url
        self._bootstrap_url = bootstrap_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._log = logger or CategoryLogger()
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()
        self._current: str | None = None

        if fixed_url:
            self._state = MirrorState.FIXED
            self._log.info(MIRRORS, "[MIRRORS] Using fixed mirror: %s", fixed_url)
        else:
            self._state = MirrorState.UNDISCOVERED

    @property
    def state(self) -> MirrorState:
        return self._state

    @property
    def current_mirror(self) -> str | None:
        """Selected base URL, or None before discovery."""
        if self._state is MirrorState.FIXED:
            return self._fixed_url
        return self._current

    async def get_base_url(self) -> str:
        """Return the base URL to use, discovering a mirror if needed."""
        if self._state is MirrorState.FIXED:
            return self._fixed_url

        async with self._lock:
            if self._state is MirrorState.DISCOVERED and self._current:
                return self._current

            self._current = await self._discover()
            self._state = MirrorState.DISCOVERED
            return self._current

    async def reset(self) -> None:
        """Drop the cached mirror so the next lookup rediscovers.

        Has no effect on a fixed mirror or before discovery.
        """
        async with self._lock:
            if self._state is not MirrorState.DISCOVERED:
                return
            previous = self._current
            self._current = None
            self._state = MirrorState.UNDISCOVERED
            self._log.warning(MIRRORS, "[MIRRORS] Mirror reset requested (was: %s)", previous)

    async def _discover(self) -> str:
        """Pick a random mirror from the bootstrap list. Never raises."""
        self._log.debug(MIRRORS, "[MIRRORS] Discovering mirrors from %s", self._bootstrap_url)

        try:
            request = build_request(
                self._bootstrap_url, "/json/servers", user_agent=self._user_agent
            )
            if self._timeout is not None:
                request.extensions["timeout"] = httpx.Timeout(self._timeout).as_dict()
            response = await self._http.send(request)
        except (httpx.HTTPError, OSError, RadioBrowserError) as e:
            self._log.warning(
                MIRRORS,
                "[MIRRORS] Mirror discovery failed (%s), falling back to %s",
                e,
                self._bootstrap_url,
            )
            return self._bootstrap_url

        if response.status_code != 200:
            self._log.warning(
                MIRRORS,
                "[MIRRORS] Mirror discovery returned HTTP %d, falling back to %s",
                response.status_code,
                self._bootstrap_url,
            )
            return self._bootstrap_url

        try:
            with decode_logging(self._log):
                mirrors = decode_list(StreamingServerMirror.from_api)(response.json())
        except (ValueError, RadioBrowserError) as e:
            self._log.error(
                MIRRORS,
                "[MIRRORS] Failed to decode mirror list (%s), falling back to %s",
                e,
                self._bootstrap_url,
            )
            return self._bootstrap_url

        usable = [m for m in mirrors if _is_absolute(m.resolved_url)]
        if len(usable) < len(mirrors):
            self._log.warning(
                MIRRORS,
                "[MIRRORS] Ignoring %d mirror(s) without an absolute URL",
                len(mirrors) - len(usable),
            )

        if not usable:
            self._log.warning(
                MIRRORS, "[MIRRORS] No mirrors found, falling back to %s", self._bootstrap_url
            )
            return self._bootstrap_url

        mirror = self._rng.choice(usable)
        self._log.info(
            MIRRORS, "[MIRRORS] Selected mirror: %s (%s)", mirror.resolved_url, mirror.name
        )
        return mirror.resolved_url
