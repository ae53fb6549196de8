"""Async typed client for the Radio Browser internet radio directory.

Usage:
    from radiobrowser import RadioBrowser, StationSearchQuery

    async with RadioBrowser() as browser:
        stations = await browser.search(StationSearchQuery(tag="jazz", limit=5))
"""

from radiobrowser.browser import RadioBrowser
from radiobrowser.config import VERSION, RadioBrowserConfig
from radiobrowser.core import (
    AddStationRequest,
    AddStationResponse,
    APIResponseError,
    ClickResponse,
    DecodingError,
    InvalidRequestError,
    NamedCount,
    NotFoundError,
    RadioBrowserError,
    RateLimitedError,
    ServerConfig,
    ServerStats,
    ServerUnavailableError,
    SortOrder,
    StateCount,
    Station,
    StationCheck,
    StationCheckStep,
    StationClick,
    StationSearchQuery,
    StreamingServerMirror,
    TransportError,
    VoteResponse,
)
from radiobrowser.http.mirrors import MirrorSelector, MirrorState
from radiobrowser.utilities.logging import CategoryLogger, LogCategory, LogConfiguration

__version__ = VERSION

__all__ = [
    "RadioBrowser",
    "RadioBrowserConfig",
    "MirrorSelector",
    "MirrorState",
    "CategoryLogger",
    "LogCategory",
    "LogConfiguration",
    "AddStationRequest",
    "AddStationResponse",
    "ClickResponse",
    "NamedCount",
    "ServerConfig",
    "ServerStats",
    "SortOrder",
    "StateCount",
    "Station",
    "StationCheck",
    "StationCheckStep",
    "StationClick",
    "StationSearchQuery",
    "StreamingServerMirror",
    "VoteResponse",
    "RadioBrowserError",
    "TransportError",
    "DecodingError",
    "APIResponseError",
    "RateLimitedError",
    "InvalidRequestError",
    "NotFoundError",
    "ServerUnavailableError",
]
