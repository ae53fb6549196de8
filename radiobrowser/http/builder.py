"""Request construction for the Radio Browser API.

Turns a base mirror URL, an endpoint path and a set of query parameters
into an httpx.Request. Only parameters that are explicitly set are
added; endpoint defaults live in the facade.
"""

import json
import shlex
from collections.abc import Mapping
from typing import Any

import httpx

from radiobrowser.config import USER_AGENT
from radiobrowser.core.errors import InvalidRequestError
from radiobrowser.core.queries import SortOrder, format_param

# Parameters understood by every list endpoint, in the order they are sent
COMMON_PARAMS = ("order", "reverse", "offset", "limit", "hidebroken")

_REDACTED_HEADERS = ("authorization", "cookie")


def _parse_base_url(base_url: str) -> httpx.URL:
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidRequestError(f"Invalid base URL: {base_url!r}") from e
    if not url.scheme or not url.host:
        raise InvalidRequestError(f"Invalid base URL: {base_url!r}")
    return url


def build_request(
    base_url: str,
    path: str,
    *,
    method: str = "GET",
    order: SortOrder | None = None,
    reverse: bool | None = None,
    offset: int | None = None,
    limit: int | None = None,
    hidebroken: bool | None = None,
    additional_params: Mapping[str, str] | None = None,
    json_body: Any = None,
    user_agent: str = USER_AGENT,
) -> httpx.Request:
    """Build a request against a mirror.

    Args:
        base_url: Absolute mirror URL, e.g. "https://de1.api.radio-browser.info"
        path: Endpoint path, e.g. "/json/stations/topvote/10"
        order/reverse/offset/limit/hidebroken: Common list parameters (omitted when None)
        additional_params: Endpoint-specific query parameters, appended after the common ones
        json_body: Encoded as the JSON request body when not None

    Raises:
        InvalidRequestError: Base URL is not absolute, the final URL cannot be
            built, or the body cannot be encoded as JSON
    """
    base = _parse_base_url(base_url)

    params: list[tuple[str, str]] = []
    common = {
        "order": order,
        "reverse": reverse,
        "offset": offset,
        "limit": limit,
        "hidebroken": hidebroken,
    }
    for name in COMMON_PARAMS:
        value = common[name]
        if value is not None:
            params.append((name, format_param(value)))
    for key, value in (additional_params or {}).items():
        params.append((key, value))

    full_path = base.path.rstrip("/") + "/" + path.lstrip("/")
    try:
        url = base.copy_with(path=full_path)
        if params:
            url = url.copy_merge_params(params)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise InvalidRequestError(f"Failed to construct URL for {path!r}: {e}") from e

    headers = {
        "User-Agent": user_agent,
        "Accept": "application/json",
    }

    content = None
    if json_body is not None:
        try:
            content = json.dumps(json_body).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"Failed to encode request body: {e}") from e
        headers["Content-Type"] = "application/json"

    return httpx.Request(method, url, headers=headers, content=content)


def to_curl(request: httpx.Request, redact_headers: bool = True) -> str:
    """Render a request as an equivalent cURL command for debug logs."""
    parts = ["curl"]
    if request.method != "GET":
        parts.append(f"-X {request.method}")

    for key, value in sorted(request.headers.items()):
        if key.lower() in ("host", "content-length"):
            continue
        if redact_headers and key.lower() in _REDACTED_HEADERS:
            value = "[REDACTED]"
        parts.append(f"-H {shlex.quote(f'{key}: {value}')}")

    body = request.content
    if body:
        parts.append(f"-d {shlex.quote(body.decode('utf-8', errors='replace'))}")

    parts.append(shlex.quote(str(request.url)))
    return " \\\n  ".join(parts)
