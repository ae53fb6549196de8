"""HTTP layer: request building, mirror selection and the transport client."""

from radiobrowser.http.builder import build_request, to_curl
from radiobrowser.http.client import APIClient
from radiobrowser.http.mirrors import MirrorSelector, MirrorState

__all__ = ["APIClient", "MirrorSelector", "MirrorState", "build_request", "to_curl"]
