"""Response records for the Radio Browser API.

All records are frozen dataclasses built by a from_api() classmethod.
Required fields fail the decode; every other field decodes tolerantly
(see radiobrowser.core.decoding).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from radiobrowser.core.decoding import (
    decode_timestamp,
    decode_tristate,
    optional_float,
    optional_int,
    optional_str,
    require_int,
    require_object,
    require_str,
)
from radiobrowser.core.errors import DecodingError


@dataclass(frozen=True)
class Station:
    """A radio station in the directory."""

    stationuuid: str
    name: str
    url: str
    url_resolved: str | None = None
    homepage: str | None = None
    favicon: str | None = None
    countrycode: str | None = None
    state: str | None = None
    language: str | None = None  # comma-joined, left raw
    tags: str | None = None  # comma-joined, left raw
    codec: str | None = None
    bitrate: int | None = None  # kbps
    hls: bool | None = None
    votes: int | None = None
    lastcheckok: bool | None = None
    lastchecktime: datetime | None = None
    clickcount: int | None = None
    clicktrend: int | None = None
    geo_lat: float | None = None
    geo_long: float | None = None
    geo_distance: float | None = None
    has_extended_info: bool | None = None
    added: datetime | None = None
    lastchangetime: datetime | None = None

    @property
    def id(self) -> str:
        return self.stationuuid

    @classmethod
    def from_api(cls, data: Any) -> "Station":
        """Create from API response dict."""
        data = require_object(data, "station")
        return cls(
            stationuuid=require_str(data, "stationuuid"),
            name=require_str(data, "name"),
            url=require_str(data, "url"),
            url_resolved=optional_str(data, "url_resolved"),
            homepage=optional_str(data, "homepage"),
            favicon=optional_str(data, "favicon"),
            countrycode=optional_str(data, "countrycode"),
            state=optional_str(data, "state"),
            language=optional_str(data, "language"),
            tags=optional_str(data, "tags"),
            codec=optional_str(data, "codec"),
            bitrate=optional_int(data, "bitrate"),
            hls=decode_tristate(data, "hls"),
            votes=optional_int(data, "votes"),
            lastcheckok=decode_tristate(data, "lastcheckok"),
            lastchecktime=decode_timestamp(data, "lastchecktime"),
            clickcount=optional_int(data, "clickcount"),
            clicktrend=optional_int(data, "clicktrend"),
            geo_lat=optional_float(data, "geo_lat"),
            geo_long=optional_float(data, "geo_long"),
            geo_distance=optional_float(data, "geo_distance"),
            has_extended_info=decode_tristate(data, "has_extended_info"),
            added=decode_timestamp(data, "added"),
            lastchangetime=decode_timestamp(data, "lastchangetime"),
        )


@dataclass(frozen=True)
class NamedCount:
    """A country, language, tag or codec with its station count."""

    name: str
    stationcount: int

    @property
    def id(self) -> str:
        return self.name

    @classmethod
    def from_api(cls, data: Any) -> "NamedCount":
        data = require_object(data, "named count")
        stationcount = require_int(data, "stationcount")
        if stationcount < 0:
            raise DecodingError(f"Negative stationcount: {stationcount}")
        return cls(name=require_str(data, "name"), stationcount=stationcount)


@dataclass(frozen=True)
class StateCount:
    """A state/region within a country. Identity is (country, name)."""

    name: str
    country: str
    stationcount: int

    @property
    def id(self) -> str:
        return f"{self.country}-{self.name}"

    @classmethod
    def from_api(cls, data: Any) -> "StateCount":
        data = require_object(data, "state count")
        stationcount = require_int(data, "stationcount")
        if stationcount < 0:
            raise DecodingError(f"Negative stationcount: {stationcount}")
        return cls(
            name=require_str(data, "name"),
            country=require_str(data, "country"),
            stationcount=stationcount,
        )


@dataclass(frozen=True)
class ClickResponse:
    """Acknowledgement of a recorded click, carrying the playable URL."""

    stationuuid: str
    url: str
    ok: bool
    message: str | None = None

    @property
    def id(self) -> str:
        return self.stationuuid

    @classmethod
    def from_station(cls, station: Station) -> "ClickResponse":
        return cls(
            stationuuid=station.stationuuid,
            url=station.url_resolved or station.url,
            ok=station.lastcheckok if station.lastcheckok is not None else True,
        )


@dataclass(frozen=True)
class VoteResponse:
    """Acknowledgement of a recorded vote, carrying the new vote count."""

    stationuuid: str
    votes: int
    ok: bool
    message: str | None = None

    @property
    def id(self) -> str:
        return self.stationuuid

    @classmethod
    def from_station(cls, station: Station) -> "VoteResponse":
        return cls(
            stationuuid=station.stationuuid,
            votes=station.votes or 0,
            ok=station.lastcheckok if station.lastcheckok is not None else True,
        )


@dataclass(frozen=True)
class AddStationResponse:
    """Result of submitting a new station."""

    stationuuid: str
    ok: bool
    message: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> "AddStationResponse":
        data = require_object(data, "add station response")
        # Live mirrors answer with "uuid"; older ones with "stationuuid"
        uuid = optional_str(data, "uuid") or optional_str(data, "stationuuid")
        ok = decode_tristate(data, "ok")
        if uuid is None:
            if ok:
                raise DecodingError("Add station response is missing the station uuid")
            uuid = ""
        return cls(stationuuid=uuid, ok=bool(ok), message=optional_str(data, "message"))


@dataclass(frozen=True)
class StationClick:
    """One entry in the click history."""

    stationuuid: str
    click_timestamp: datetime | None = None
    ip: str | None = None
    user_agent: str | None = None
    clickuuid: str | None = None

    @property
    def id(self) -> str:
        if self.click_timestamp is not None:
            return f"{self.stationuuid}-{self.click_timestamp.timestamp()}"
        return self.stationuuid

    @classmethod
    def from_api(cls, data: Any) -> "StationClick":
        data = require_object(data, "station click")
        return cls(
            stationuuid=require_str(data, "stationuuid"),
            click_timestamp=decode_timestamp(data, "click_timestamp"),
            ip=optional_str(data, "ip"),
            user_agent=optional_str(data, "user_agent"),
            clickuuid=optional_str(data, "clickuuid"),
        )


@dataclass(frozen=True)
class StationCheckStep:
    """A single step of a station health check."""

    name: str
    ok: bool
    message: str | None = None

    @property
    def id(self) -> str:
        return self.name

    @classmethod
    def from_api(cls, data: Any) -> "StationCheckStep":
        data = require_object(data, "check step")
        return cls(
            name=require_str(data, "name"),
            ok=bool(decode_tristate(data, "ok")),
            message=optional_str(data, "message"),
        )


@dataclass(frozen=True)
class StationCheck:
    """Result of one health check run against a station."""

    stationuuid: str
    ok: bool
    timestamp: datetime | None = None
    steps: tuple[StationCheckStep, ...] | None = None
    checkuuid: str | None = None

    @property
    def id(self) -> str:
        if self.timestamp is not None:
            return f"{self.stationuuid}-{self.timestamp.timestamp()}"
        return self.stationuuid

    @classmethod
    def from_api(cls, data: Any) -> "StationCheck":
        data = require_object(data, "station check")
        ok = decode_tristate(data, "ok")
        if ok is None:
            # Older mirrors report the result as check_ok
            ok = decode_tristate(data, "check_ok")
        if ok is None:
            raise DecodingError("Station check is missing its result")

        steps = data.get("steps")
        return cls(
            stationuuid=require_str(data, "stationuuid"),
            ok=ok,
            timestamp=decode_timestamp(data, "timestamp"),
            steps=tuple(StationCheckStep.from_api(s) for s in steps)
            if isinstance(steps, list)
            else None,
            checkuuid=optional_str(data, "checkuuid"),
        )


@dataclass(frozen=True)
class StreamingServerMirror:
    """An API mirror as listed by the servers endpoint."""

    name: str
    url: str | None = None
    ip: str | None = None
    location: str | None = None

    @property
    def resolved_url(self) -> str:
        """Base URL for this mirror, built from the hostname when url is absent."""
        if self.url:
            return self.url
        if self.name.startswith(("http://", "https://")):
            return self.name
        return f"https://{self.name}"

    @property
    def id(self) -> str:
        return self.resolved_url

    @classmethod
    def from_api(cls, data: Any) -> "StreamingServerMirror":
        data = require_object(data, "server mirror")
        return cls(
            name=require_str(data, "name"),
            url=optional_str(data, "url"),
            ip=optional_str(data, "ip"),
            location=optional_str(data, "location"),
        )


@dataclass(frozen=True)
class ServerStats:
    """Aggregate counters reported by a mirror."""

    supported_stations: int | None = None
    broken_stations: int | None = None
    supported_countries: int | None = None
    supported_clicks: int | None = None
    last_update: datetime | None = None

    @classmethod
    def from_api(cls, data: Any) -> "ServerStats":
        data = require_object(data, "server stats")
        return cls(
            supported_stations=optional_int(data, "supported_stations"),
            broken_stations=optional_int(data, "broken_stations"),
            supported_countries=optional_int(data, "supported_countries"),
            supported_clicks=optional_int(data, "supported_clicks"),
            last_update=decode_timestamp(data, "last_update"),
        )


@dataclass(frozen=True)
class ServerConfig:
    """Operational parameters of a mirror."""

    check_interval: int | None = None
    click_interval: int | None = None
    vote_interval: int | None = None
    check_threads: int | None = None
    check_enabled: bool | None = None

    @classmethod
    def from_api(cls, data: Any) -> "ServerConfig":
        data = require_object(data, "server config")
        return cls(
            check_interval=optional_int(data, "check_interval"),
            click_interval=optional_int(data, "click_interval"),
            vote_interval=optional_int(data, "vote_interval"),
            check_threads=optional_int(data, "check_threads"),
            check_enabled=decode_tristate(data, "check_enabled"),
        )
