"""Tests for the RadioBrowser facade.

Every endpoint is exercised against a fake mirror that records the
request, so these tests pin down paths, query parameters and bodies
as well as how responses are reshaped.
"""

import asyncio
import json

import httpx
import pytest

from radiobrowser import (
    AddStationRequest,
    APIResponseError,
    DecodingError,
    InvalidRequestError,
    MirrorState,
    RadioBrowser,
    RadioBrowserConfig,
    SortOrder,
    StationSearchQuery,
)

BASE = "https://mirror.test"

STATION = {"stationuuid": "abc", "name": "Test", "url": "http://x"}


class FakeMirror:
    """Answers every request with one payload and records what was sent."""

    def __init__(self, payload=None, status=200):
        self.payload = [] if payload is None else payload
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def params(self) -> list[tuple[str, str]]:
        return list(self.last.url.params.multi_items())

    @property
    def raw_path(self) -> bytes:
        return self.last.url.raw_path.split(b"?")[0]


def run(fake, operation, config=None):
    """Run operation(browser) against the fake mirror."""
    config = config or RadioBrowserConfig(base_url=BASE)

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as http:
            async with RadioBrowser(config=config, http_client=http) as browser:
                return await operation(browser)

    return asyncio.run(go())


DEFAULT_STATION_PARAMS = [("order", "name"), ("reverse", "false"), ("hidebroken", "true")]


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    def test_config_base_url_is_fixed(self):
        browser = RadioBrowser(config=RadioBrowserConfig(base_url=BASE))
        assert browser.mirror_selector.state is MirrorState.FIXED
        assert browser.mirror_selector.current_mirror == BASE

    def test_preferred_mirror_pins(self):
        browser = RadioBrowser("https://pinned.test", config=RadioBrowserConfig())
        assert browser.mirror_selector.state is MirrorState.FIXED
        assert browser.client_config.base_url == "https://pinned.test"

    def test_config_base_url_wins_over_preferred(self):
        browser = RadioBrowser("https://pinned.test", config=RadioBrowserConfig(base_url=BASE))
        assert browser.mirror_selector.current_mirror == BASE

    def test_without_base_url_discovers(self):
        browser = RadioBrowser(config=RadioBrowserConfig())
        assert browser.mirror_selector.state is MirrorState.UNDISCOVERED

    def test_timeout_override(self):
        browser = RadioBrowser(timeout=5.0, config=RadioBrowserConfig(base_url=BASE))
        assert browser.client_config.timeout == 5.0
        assert browser.client_config.resource_timeout == 10.0

    def test_env_base_url(self, monkeypatch):
        monkeypatch.setenv("RADIO_BROWSER_BASE_URL", "https://env.test")
        browser = RadioBrowser(config=RadioBrowserConfig.from_env())
        assert browser.mirror_selector.state is MirrorState.FIXED
        assert browser.mirror_selector.current_mirror == "https://env.test"

    def test_requests_go_to_discovered_mirror(self):
        hosts = []

        def handler(request):
            hosts.append(request.url.host)
            if request.url.path == "/json/servers":
                return httpx.Response(200, json=[{"name": "de1.example"}])
            return httpx.Response(200, json={"supported_stations": 1})

        stats = run(handler, lambda b: b.stats(), config=RadioBrowserConfig())
        assert stats.supported_stations == 1
        assert hosts == ["all.api.radio-browser.info", "de1.example"]

    def test_mirror_without_scheme_falls_back_to_bootstrap(self):
        hosts = []

        def handler(request):
            hosts.append(request.url.host)
            if request.url.path == "/json/servers":
                return httpx.Response(200, json=[{"name": "m1", "url": "m1.example"}])
            return httpx.Response(200, json=[])

        async def operation(browser):
            for _ in range(3):
                await browser.tags()

        run(handler, operation, config=RadioBrowserConfig())
        assert hosts == ["all.api.radio-browser.info"] * 4


# =============================================================================
# LIST ENDPOINTS
# =============================================================================


class TestListEndpoints:
    @pytest.mark.parametrize("kind", ["countries", "languages", "tags", "codecs"])
    def test_unfiltered(self, kind):
        fake = FakeMirror([{"name": "x", "stationcount": 3}])
        result = run(fake, lambda b: getattr(b, kind)())
        assert fake.last.url.path == f"/json/{kind}"
        assert fake.params == [("order", "name"), ("reverse", "false")]
        assert result[0].stationcount == 3

    def test_filter_is_path_segment(self):
        fake = FakeMirror()
        run(fake, lambda b: b.tags("drum & bass", order=SortOrder.CLICKCOUNT, limit=5))
        assert fake.raw_path == b"/json/tags/drum%20%26%20bass"
        assert fake.params == [("order", "clickcount"), ("reverse", "false"), ("limit", "5")]

    def test_reverse_and_offset(self):
        fake = FakeMirror()
        run(fake, lambda b: b.countries(reverse=True, offset=20))
        assert fake.params == [("order", "name"), ("reverse", "true"), ("offset", "20")]

    def test_states_for_country(self):
        fake = FakeMirror([{"name": "Bavaria", "country": "Germany", "stationcount": 80}])
        result = run(fake, lambda b: b.states("Germany", "Bav"))
        assert fake.last.url.path == "/json/states/Germany/Bav"
        assert fake.last.url.params["country"] == "Germany"
        assert result[0].id == "Germany-Bavaria"

    def test_states_unfiltered(self):
        fake = FakeMirror()
        run(fake, lambda b: b.states())
        assert fake.last.url.path == "/json/states"
        assert "country" not in fake.last.url.params


# =============================================================================
# STATION ENDPOINTS
# =============================================================================


class TestStationEndpoints:
    def test_stations(self):
        fake = FakeMirror([STATION])
        result = run(fake, lambda b: b.stations(limit=100))
        assert fake.last.url.path == "/json/stations"
        assert fake.params == [
            ("order", "name"),
            ("reverse", "false"),
            ("limit", "100"),
            ("hidebroken", "true"),
        ]
        assert result[0].id == "abc"

    @pytest.mark.parametrize(
        "method,variant",
        [
            ("stations_by_name", "byname"),
            ("stations_by_country", "bycountry"),
            ("stations_by_state", "bystate"),
            ("stations_by_language", "bylanguage"),
            ("stations_by_tag", "bytag"),
            ("stations_by_codec", "bycodec"),
        ],
    )
    def test_by_field(self, method, variant):
        fake = FakeMirror([STATION])
        run(fake, lambda b: getattr(b, method)("term"))
        assert fake.last.url.path == f"/json/stations/{variant}/term"
        assert fake.params == DEFAULT_STATION_PARAMS

    @pytest.mark.parametrize(
        "method,variant",
        [
            ("stations_by_name", "bynameexact"),
            ("stations_by_country", "bycountryexact"),
            ("stations_by_state", "bystateexact"),
            ("stations_by_language", "bylanguageexact"),
            ("stations_by_tag", "bytagexact"),
            ("stations_by_codec", "bycodecexact"),
        ],
    )
    def test_by_field_exact(self, method, variant):
        fake = FakeMirror()
        run(fake, lambda b: getattr(b, method)("term", exact=True))
        assert fake.last.url.path == f"/json/stations/{variant}/term"

    def test_by_country_code_always_exact(self):
        fake = FakeMirror()
        run(fake, lambda b: b.stations_by_country_code("DE"))
        assert fake.last.url.path == "/json/stations/bycountrycodeexact/DE"

    def test_term_encoded_as_single_segment(self):
        fake = FakeMirror()
        run(fake, lambda b: b.stations_by_name("AC/DC radio"))
        assert fake.raw_path == b"/json/stations/byname/AC%2FDC%20radio"

    def test_overrides(self):
        fake = FakeMirror()
        run(
            fake,
            lambda b: b.stations_by_tag(
                "jazz", order=SortOrder.VOTES, reverse=True, offset=5, limit=10, hidebroken=False
            ),
        )
        assert fake.params == [
            ("order", "votes"),
            ("reverse", "true"),
            ("offset", "5"),
            ("limit", "10"),
            ("hidebroken", "false"),
        ]

    def test_by_uuid_comma_joined(self):
        fake = FakeMirror([STATION])
        run(fake, lambda b: b.stations_by_uuid(["a-1", "b-2", "c-3"]))
        assert fake.last.url.path == "/json/stations/byuuid"
        assert fake.params == [("uuids", "a-1,b-2,c-3")]

    def test_by_url_encoded_once(self):
        stream = "http://stream.example/live?format=mp3&bitrate=128"
        fake = FakeMirror([STATION])
        run(fake, lambda b: b.stations_by_url(stream))
        assert fake.last.url.path == "/json/stations/byurl"
        assert fake.last.url.params["url"] == stream
        assert b"%25" not in fake.last.url.query

    def test_by_url_unencodable(self):
        fake = FakeMirror()
        with pytest.raises(InvalidRequestError):
            run(fake, lambda b: b.stations_by_url("http://x/\ud800"))
        assert fake.requests == []

    def test_station_decoding_failure(self):
        fake = FakeMirror([{"stationuuid": "abc"}])
        with pytest.raises(DecodingError):
            run(fake, lambda b: b.stations())


# =============================================================================
# RANKINGS
# =============================================================================


class TestRankings:
    @pytest.mark.parametrize(
        "method,kind",
        [
            ("top_click", "topclick"),
            ("top_vote", "topvote"),
            ("last_click", "lastclick"),
            ("last_change", "lastchange"),
            ("broken", "broken"),
        ],
    )
    def test_default_count(self, method, kind):
        fake = FakeMirror([STATION])
        run(fake, lambda b: getattr(b, method)())
        assert fake.last.url.path == f"/json/stations/{kind}/10"
        assert fake.params == []

    def test_explicit_count(self):
        fake = FakeMirror()
        run(fake, lambda b: b.top_vote(25))
        assert fake.last.url.path == "/json/stations/topvote/25"

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_count_omits_segment(self, count):
        fake = FakeMirror()
        run(fake, lambda b: b.top_click(count))
        assert fake.last.url.path == "/json/stations/topclick"


# =============================================================================
# ADVANCED SEARCH
# =============================================================================


class TestSearch:
    def test_get_by_default(self):
        fake = FakeMirror([STATION])
        query = StationSearchQuery(tag="jazz", countrycode="US", order=SortOrder.VOTES, limit=5)
        result = run(fake, lambda b: b.search(query))

        assert fake.last.method == "GET"
        assert fake.last.url.path == "/json/stations/search"
        assert fake.params == [
            ("order", "votes"),
            ("limit", "5"),
            ("countrycode", "US"),
            ("tag", "jazz"),
        ]
        assert result[0].id == "abc"

    def test_common_params_not_duplicated(self):
        fake = FakeMirror()
        query = StationSearchQuery(name="x", reverse=True, hidebroken=True, offset=3)
        run(fake, lambda b: b.search(query))
        for name in ("reverse", "hidebroken", "offset"):
            assert fake.last.url.params.get_list(name) == [fake.last.url.params[name]]

    def test_tag_list_forces_post(self):
        fake = FakeMirror([STATION])
        query = StationSearchQuery(tag_list=["jazz", "smooth"], limit=5)
        run(fake, lambda b: b.search(query, use_post=False))

        assert fake.last.method == "POST"
        assert fake.last.url.params == httpx.QueryParams()
        assert fake.last.headers["Content-Type"] == "application/json"
        assert json.loads(fake.last.content) == {"tagList": ["jazz", "smooth"], "limit": 5}

    def test_use_post(self):
        fake = FakeMirror()
        query = StationSearchQuery(name_exact=True, name="Radio Paradise")
        run(fake, lambda b: b.search(query, use_post=True))
        assert fake.last.method == "POST"
        assert json.loads(fake.last.content) == {"name": "Radio Paradise", "nameExact": True}

    def test_geo_search(self):
        fake = FakeMirror()
        query = StationSearchQuery(geo_lat=52.52, geo_long=13.405, geo_distance=10000.0)
        run(fake, lambda b: b.search(query))
        assert fake.last.url.params["geo_lat"] == "52.52"
        assert fake.last.url.params["geo_long"] == "13.405"


# =============================================================================
# INTERACTIONS
# =============================================================================


class TestClick:
    def test_click(self):
        fake = FakeMirror([{**STATION, "url_resolved": "https://resolved.example/live"}])
        response = run(fake, lambda b: b.click("abc"))
        assert fake.last.url.path == "/json/url/abc"
        assert response.url == "https://resolved.example/live"
        assert response.ok is True
        assert response.id == "abc"

    def test_click_bare_object(self):
        fake = FakeMirror({**STATION, "lastcheckok": 0})
        response = run(fake, lambda b: b.click("abc"))
        assert response.url == "http://x"
        assert response.ok is False

    def test_click_empty_array(self):
        with pytest.raises(APIResponseError, match="Empty response"):
            run(FakeMirror([]), lambda b: b.click("abc"))


class TestVote:
    def test_vote(self):
        fake = FakeMirror([{**STATION, "votes": 42}])
        response = run(fake, lambda b: b.vote("abc"))
        assert fake.last.url.path == "/json/vote/abc"
        assert response.votes == 42
        assert response.ok is True

    def test_vote_empty_array(self):
        with pytest.raises(APIResponseError):
            run(FakeMirror([]), lambda b: b.vote("abc"))


class TestAddStation:
    @pytest.mark.parametrize(
        "name,url",
        [("", "https://stream.example/live"), ("My Radio", ""), ("My Radio", "no-scheme")],
    )
    def test_invalid_fails_before_network(self, name, url):
        fake = FakeMirror()
        with pytest.raises(InvalidRequestError):
            run(fake, lambda b: b.add_station(AddStationRequest(name=name, url=url)))
        assert fake.requests == []

    def test_valid_is_posted(self):
        fake = FakeMirror({"ok": True, "message": "added station successfully", "uuid": "new-1"})
        request = AddStationRequest(
            name="My Radio", url="https://stream.example/live", countrycode="DE"
        )
        response = run(fake, lambda b: b.add_station(request))

        assert fake.last.method == "POST"
        assert fake.last.url.path == "/json/add"
        assert json.loads(fake.last.content) == {
            "name": "My Radio",
            "url": "https://stream.example/live",
            "countrycode": "DE",
        }
        assert response.ok is True
        assert response.stationuuid == "new-1"


# =============================================================================
# HISTORY
# =============================================================================


class TestHistory:
    def test_clicks_all_params(self):
        fake = FakeMirror([{"stationuuid": "abc", "clickuuid": "k1", "click_timestamp": 1}])
        result = run(fake, lambda b: b.clicks("abc", seconds=3600, last_click_uuid="k0"))
        assert fake.last.url.path == "/json/clicks"
        assert fake.params == [("stationuuid", "abc"), ("seconds", "3600"), ("lastclickuuid", "k0")]
        assert result[0].clickuuid == "k1"

    def test_clicks_no_params(self):
        fake = FakeMirror()
        run(fake, lambda b: b.clicks())
        assert fake.params == []

    def test_checks_for_station(self):
        fake = FakeMirror([{"stationuuid": "abc", "ok": 1, "checkuuid": "c1"}])
        result = run(fake, lambda b: b.checks("abc", seconds=60, last_check_uuid="c0"))
        assert fake.last.url.path == "/json/checks/abc"
        assert fake.params == [("seconds", "60"), ("lastcheckuuid", "c0")]
        assert result[0].ok is True

    def test_checks_all(self):
        fake = FakeMirror()
        run(fake, lambda b: b.checks())
        assert fake.last.url.path == "/json/checks"


# =============================================================================
# SERVICE INFO
# =============================================================================


class TestServiceInfo:
    def test_stats(self):
        fake = FakeMirror({"supported_stations": 45000, "broken_stations": 1200})
        stats = run(fake, lambda b: b.stats())
        assert fake.last.url.path == "/json/stats"
        assert stats.supported_stations == 45000

    def test_servers(self):
        fake = FakeMirror([{"name": "de1.api.radio-browser.info", "ip": "1.2.3.4"}])
        servers = run(fake, lambda b: b.servers())
        assert fake.last.url.path == "/json/servers"
        assert servers[0].resolved_url == "https://de1.api.radio-browser.info"

    def test_config(self):
        fake = FakeMirror({"check_enabled": 1, "click_interval": 86400})
        config = run(fake, lambda b: b.config())
        assert fake.last.url.path == "/json/config"
        assert config.check_enabled is True
        assert config.click_interval == 86400
