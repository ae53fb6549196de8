"""Core types for the Radio Browser client: records, queries and errors."""

from radiobrowser.core.errors import (
    APIResponseError,
    DecodingError,
    InvalidRequestError,
    NotFoundError,
    RadioBrowserError,
    RateLimitedError,
    ServerUnavailableError,
    TransportError,
)
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
    StationCheckStep,
    StationClick,
    StreamingServerMirror,
    VoteResponse,
)

__all__ = [
    "AddStationRequest",
    "AddStationResponse",
    "APIResponseError",
    "ClickResponse",
    "DecodingError",
    "InvalidRequestError",
    "NamedCount",
    "NotFoundError",
    "RadioBrowserError",
    "RateLimitedError",
    "ServerConfig",
    "ServerStats",
    "ServerUnavailableError",
    "SortOrder",
    "StateCount",
    "Station",
    "StationCheck",
    "StationCheckStep",
    "StationClick",
    "StationSearchQuery",
    "StreamingServerMirror",
    "TransportError",
    "VoteResponse",
]
