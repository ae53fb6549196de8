"""Radio Browser API facade.

One coroutine per API operation. Each method picks the endpoint path and
parameters, applies the endpoint's defaults, and delegates transport,
status handling and decoding to APIClient.
"""

import logging
import random
from typing import Any
from urllib.parse import quote

import httpx

from radiobrowser.config import RadioBrowserConfig
from radiobrowser.core.decoding import decode_list
from radiobrowser.core.errors import APIResponseError, InvalidRequestError
from radiobrowser.core.queries import AddStationRequest, SortOrder, StationSearchQuery
from radiobrowser.core.types import (
    AddStationResponse,
    ClickResponse,
    NamedCount,
    ServerConfig,
    ServerStats,
    StateCount,
    Station,
    StationCheck,
    StationClick,
    StreamingServerMirror,
    VoteResponse,
)
from radiobrowser.http.builder import COMMON_PARAMS
from radiobrowser.http.client import APIClient
from radiobrowser.http.mirrors import MirrorSelector
from radiobrowser.utilities.logging import CategoryLogger, LogCategory

API = LogCategory.API

_stations = decode_list(Station.from_api)
_named_counts = decode_list(NamedCount.from_api)


def _segment(term: str) -> str:
    """Percent-encode a value used as a single path segment."""
    return quote(term, safe="")


def _station_payload(payload: Any) -> list[Station]:
    # Write endpoints answer with a one-element array; some mirrors send the bare object
    if isinstance(payload, dict) and "stationuuid" in payload:
        return [Station.from_api(payload)]
    if payload is None:
        return []
    return _stations(payload)


class RadioBrowser:
    """Async client for the Radio Browser directory.

    Usage:
        async with RadioBrowser() as browser:
            for station in await browser.stations_by_tag("jazz", limit=10):
                print(station.name, station.url_resolved)

    Args:
        preferred_mirror: Pin all requests to this mirror (no discovery)
        timeout: Per-request timeout in seconds
        config: Full configuration; defaults to RadioBrowserConfig.from_env(),
            so RADIO_BROWSER_BASE_URL pins the mirror when set
        http_client: Externally managed httpx.AsyncClient
        logger: Logger used for all client messages
        rng: Random source for mirror selection
    """

    def __init__(
        self,
        preferred_mirror: str | None = None,
        timeout: float | None = None,
        *,
        config: RadioBrowserConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        logger: CategoryLogger | None = None,
        rng: random.Random | None = None,
    ):
        config = config or RadioBrowserConfig.from_env()
        if preferred_mirror and not config.base_url:
            config = config.with_overrides(base_url=preferred_mirror)
        if timeout is not None:
            config = config.with_overrides(timeout=timeout)
        self._config = config
        self._log = logger or CategoryLogger(config.logging)

        self._client = APIClient(http_client=http_client, config=config, logger=self._log, rng=rng)

    @property
    def client_config(self) -> RadioBrowserConfig:
        return self._config

    @property
    def mirror_selector(self) -> MirrorSelector:
        return self._client.mirrors

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "RadioBrowser":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # =========================================================================
    # LIST ENDPOINTS
    # =========================================================================

    async def _named_list(
        self,
        kind: str,
        filter: str | None,
        order: SortOrder,
        reverse: bool,
        offset: int | None,
        limit: int | None,
    ) -> list[NamedCount]:
        path = f"/json/{kind}/{_segment(filter)}" if filter else f"/json/{kind}"
        return await self._client.get(
            path, _named_counts, order=order, reverse=reverse, offset=offset, limit=limit
        )

    async def countries(
        self,
        filter: str | None = None,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[NamedCount]:
        """Countries with their station counts, optionally filtered by name."""
        return await self._named_list("countries", filter, order, reverse, offset, limit)

    async def languages(
        self,
        filter: str | None = None,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[NamedCount]:
        """Languages with their station counts, optionally filtered by name."""
        return await self._named_list("languages", filter, order, reverse, offset, limit)

    async def tags(
        self,
        filter: str | None = None,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[NamedCount]:
        """Tags with their station counts, optionally filtered by name."""
        return await self._named_list("tags", filter, order, reverse, offset, limit)

    async def codecs(
        self,
        filter: str | None = None,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[NamedCount]:
        """Codecs with their station counts, optionally filtered by name."""
        return await self._named_list("codecs", filter, order, reverse, offset, limit)

    async def states(
        self,
        country: str | None = None,
        filter: str | None = None,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[StateCount]:
        """States/regions, optionally restricted to one country.

        Both country and filter become path segments; country is also sent
        as a query parameter.
        """
        path = "/json/states"
        if country:
            path += f"/{_segment(country)}"
        if filter:
            path += f"/{_segment(filter)}"

        params = {"country": country} if country else {}
        return await self._client.get(
            path,
            decode_list(StateCount.from_api),
            order=order,
            reverse=reverse,
            offset=offset,
            limit=limit,
            additional_params=params,
        )

    # =========================================================================
    # STATION ENDPOINTS
    # =========================================================================

    async def _station_list(
        self,
        path: str,
        order: SortOrder,
        reverse: bool,
        offset: int | None,
        limit: int | None,
        hidebroken: bool,
    ) -> list[Station]:
        return await self._client.get(
            path,
            _stations,
            order=order,
            reverse=reverse,
            offset=offset,
            limit=limit,
            hidebroken=hidebroken,
        )

    async def _stations_by(
        self,
        field: str,
        term: str,
        exact: bool,
        order: SortOrder,
        reverse: bool,
        offset: int | None,
        limit: int | None,
        hidebroken: bool,
    ) -> list[Station]:
        variant = f"by{field}exact" if exact else f"by{field}"
        path = f"/json/stations/{variant}/{_segment(term)}"
        return await self._station_list(path, order, reverse, offset, limit, hidebroken)

    async def stations(
        self,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        """All stations. Pass a limit; the unpaginated list is very large."""
        return await self._station_list("/json/stations", order, reverse, offset, limit, hidebroken)

    async def stations_by_name(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "name", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_country(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "country", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_country_code(
        self,
        code: str,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        """Stations by ISO 3166-1 alpha-2 code (always an exact match)."""
        return await self._stations_by(
            "countrycode", code, True, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_state(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "state", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_language(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "language", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_tag(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "tag", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_codec(
        self,
        term: str,
        exact: bool = False,
        order: SortOrder = SortOrder.NAME,
        reverse: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        hidebroken: bool = True,
    ) -> list[Station]:
        return await self._stations_by(
            "codec", term, exact, order, reverse, offset, limit, hidebroken
        )

    async def stations_by_uuid(self, uuids: list[str]) -> list[Station]:
        """Batched lookup; the uuids are sent comma-joined in one parameter."""
        return await self._client.get(
            "/json/stations/byuuid",
            _stations,
            additional_params={"uuids": ",".join(uuids)},
        )

    async def stations_by_url(self, url: str) -> list[Station]:
        """Stations whose stream URL matches exactly (usually zero or one)."""
        try:
            url.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidRequestError(f"Invalid URL encoding: {url!r}") from e
        # Query values are percent-encoded once by the request builder
        return await self._client.get(
            "/json/stations/byurl",
            _stations,
            additional_params={"url": url},
        )

    # =========================================================================
    # RANKING ENDPOINTS
    # =========================================================================

    async def _ranking(self, kind: str, count: int) -> list[Station]:
        # count <= 0 leaves the endpoint default in charge
        path = f"/json/stations/{kind}/{count}" if count > 0 else f"/json/stations/{kind}"
        return await self._client.get(path, _stations)

    async def top_click(self, count: int = 10) -> list[Station]:
        return await self._ranking("topclick", count)

    async def top_vote(self, count: int = 10) -> list[Station]:
        return await self._ranking("topvote", count)

    async def last_click(self, count: int = 10) -> list[Station]:
        return await self._ranking("lastclick", count)

    async def last_change(self, count: int = 10) -> list[Station]:
        return await self._ranking("lastchange", count)

    async def broken(self, count: int = 10) -> list[Station]:
        return await self._ranking("broken", count)

    # =========================================================================
    # ADVANCED SEARCH
    # =========================================================================

    async def search(self, query: StationSearchQuery, use_post: bool = False) -> list[Station]:
        """Search stations with every filter set on the query ANDed together.

        A tag list can only be expressed in a JSON body, so a query with
        tag_list set is always POSTed. Otherwise GET is used unless
        use_post is True.
        """
        if use_post or query.tag_list is not None:
            self._log.debug(API, "[API] Searching stations via POST")
            return await self._client.post("/json/stations/search", query.to_post_body(), _stations)

        params = {k: v for k, v in query.to_query_params().items() if k not in COMMON_PARAMS}
        has_geo = query.geo_lat is not None or query.geo_long is not None
        if has_geo and self._log.is_enabled(logging.DEBUG, API):
            self._log.debug(
                API,
                "[API] Geo search around %s,%s",
                self._log.truncate_geo(query.geo_lat),
                self._log.truncate_geo(query.geo_long),
            )
        return await self._client.get(
            "/json/stations/search",
            _stations,
            order=query.order,
            reverse=query.reverse,
            offset=query.offset,
            limit=query.limit,
            hidebroken=query.hidebroken,
            additional_params=params,
        )

    # =========================================================================
    # INTERACTIONS (write endpoints)
    # =========================================================================

    async def click(self, station_uuid: str) -> ClickResponse:
        """Count a click for a station and return its playable URL.

        The API counts at most one click per station per IP per day.
        """
        stations = await self._client.get(f"/json/url/{_segment(station_uuid)}", _station_payload)
        if not stations:
            raise APIResponseError("Empty response from click endpoint")
        return ClickResponse.from_station(stations[0])

    async def vote(self, station_uuid: str) -> VoteResponse:
        """Vote for a station and return its updated vote count.

        The API accepts one vote per station per IP every 10 minutes.
        """
        stations = await self._client.get(f"/json/vote/{_segment(station_uuid)}", _station_payload)
        if not stations:
            raise APIResponseError("Empty response from vote endpoint")
        return VoteResponse.from_station(stations[0])

    async def add_station(self, request: AddStationRequest) -> AddStationResponse:
        """Submit a new station.

        Raises:
            InvalidRequestError: name or url is empty, or url has no scheme.
                Raised before any network access.
        """
        request.ensure_valid()
        try:
            parsed = httpx.URL(request.url)
        except httpx.InvalidURL as e:
            raise InvalidRequestError(f"Invalid URL format: {request.url}") from e
        if not parsed.scheme:
            raise InvalidRequestError(f"Invalid URL format: {request.url}")

        self._log.info(API, "[API] Adding station %r", request.name)
        return await self._client.post(
            "/json/add", request.to_post_body(), AddStationResponse.from_api
        )

    # =========================================================================
    # DIAGNOSTICS & HISTORY
    # =========================================================================

    async def clicks(
        self,
        station_uuid: str | None = None,
        seconds: int | None = None,
        last_click_uuid: str | None = None,
    ) -> list[StationClick]:
        """Click history, newest window first.

        For the next page pass the clickuuid of the last item received as
        last_click_uuid.
        """
        params: dict[str, str] = {}
        if station_uuid is not None:
            params["stationuuid"] = station_uuid
        if seconds is not None:
            params["seconds"] = str(seconds)
        if last_click_uuid is not None:
            params["lastclickuuid"] = last_click_uuid
        return await self._client.get(
            "/json/clicks", decode_list(StationClick.from_api), additional_params=params
        )

    async def checks(
        self,
        station_uuid: str | None = None,
        seconds: int | None = None,
        last_check_uuid: str | None = None,
    ) -> list[StationCheck]:
        """Health check history, for one station or all of them."""
        path = f"/json/checks/{_segment(station_uuid)}" if station_uuid else "/json/checks"
        params: dict[str, str] = {}
        if seconds is not None:
            params["seconds"] = str(seconds)
        if last_check_uuid is not None:
            params["lastcheckuuid"] = last_check_uuid
        return await self._client.get(
            path, decode_list(StationCheck.from_api), additional_params=params
        )

    # =========================================================================
    # SERVICE INFO
    # =========================================================================

    async def stats(self) -> ServerStats:
        return await self._client.get("/json/stats", ServerStats.from_api)

    async def servers(self) -> list[StreamingServerMirror]:
        return await self._client.get("/json/servers", decode_list(StreamingServerMirror.from_api))

    async def config(self) -> ServerConfig:
        return await self._client.get("/json/config", ServerConfig.from_api)
