"""Request-side models: sort keys, advanced search query, new station."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from radiobrowser.core.errors import InvalidRequestError


class SortOrder(str, Enum):
    """Sort keys accepted by the `order` query parameter."""

    NAME = "name"
    URL = "url"
    HOMEPAGE = "homepage"
    FAVICON = "favicon"
    TAGS = "tags"
    COUNTRY = "country"
    STATE = "state"
    LANGUAGE = "language"
    VOTES = "votes"
    CODEC = "codec"
    BITRATE = "bitrate"
    LASTCHECKOK = "lastcheckok"
    LASTCHECKTIME = "lastchecktime"
    CLICKCOUNT = "clickcount"
    CLICKTREND = "clicktrend"
    RANDOM = "random"


def format_param(value: bool | int | float | str | SortOrder) -> str:
    """Serialize a query parameter value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, SortOrder):
        return value.value
    return str(value)


class StationSearchQuery(BaseModel):
    """Filters for the advanced station search.

    Every field is optional and all set fields are ANDed by the server.
    Attributes use Python names; the wire names are the aliases.

    Usage:
        query = StationSearchQuery(tag_list=["jazz", "smooth"], limit=20)
        query.countrycode = "US"
        stations = await browser.search(query)
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    name: str | None = None
    name_exact: bool | None = Field(default=None, alias="nameExact")
    country: str | None = None
    country_exact: bool | None = Field(default=None, alias="countryExact")
    countrycode: str | None = None
    state: str | None = None
    state_exact: bool | None = Field(default=None, alias="stateExact")
    language: str | None = None
    language_exact: bool | None = Field(default=None, alias="languageExact")
    tag: str | None = None
    tag_exact: bool | None = Field(default=None, alias="tagExact")
    # List filters only travel in a POST body
    tag_list: list[str] | None = Field(default=None, alias="tagList")
    codec: str | None = None
    bitrate_min: int | None = Field(default=None, alias="bitrateMin")
    bitrate_max: int | None = Field(default=None, alias="bitrateMax")
    is_https: bool | None = None
    has_geo_info: bool | None = None
    has_extended_info: bool | None = None
    geo_lat: float | None = None
    geo_long: float | None = None
    geo_distance: float | None = None

    order: SortOrder | None = None
    reverse: bool | None = None
    offset: int | None = None
    limit: int | None = None
    hidebroken: bool | None = None

    def to_query_params(self) -> dict[str, str]:
        """Flatten set fields into GET query parameters.

        tagList is never included; use to_post_body() for list filters.
        """
        params: dict[str, str] = {}
        for field_name, info in type(self).model_fields.items():
            if field_name == "tag_list":
                continue
            value = getattr(self, field_name)
            if value is None:
                continue
            params[info.alias or field_name] = format_param(value)
        return params

    def to_post_body(self) -> dict:
        """Set fields as a JSON-ready dict keyed by wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AddStationRequest(BaseModel):
    """A new station submission. name and url must be non-empty."""

    name: str
    url: str
    homepage: str | None = None
    favicon: str | None = None
    countrycode: str | None = None
    state: str | None = None
    language: str | None = None
    tags: str | None = None

    def ensure_valid(self) -> None:
        """Raise InvalidRequestError if a required field is empty."""
        if not self.name:
            raise InvalidRequestError("Station name is required")
        if not self.url:
            raise InvalidRequestError("Station URL is required")

    def to_post_body(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
