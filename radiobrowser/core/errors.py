"""Exception hierarchy for the Radio Browser client.

Every failure surfaced to callers is a RadioBrowserError subclass.
Lower layers raise these directly; upper layers re-raise them unchanged.
"""


class RadioBrowserError(Exception):
    """Base class for all client errors."""


class TransportError(RadioBrowserError):
    """Connection, DNS, TLS or timeout failure below the HTTP layer."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Transport error: {cause}")
        self.cause = cause


class DecodingError(RadioBrowserError):
    """Response JSON violates a required-field contract."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class APIResponseError(RadioBrowserError):
    """Server answered with an unexpected status or an unusable payload."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateLimitedError(RadioBrowserError):
    """HTTP 429 from the mirror."""

    def __init__(self):
        super().__init__("Rate limit exceeded")


class InvalidRequestError(RadioBrowserError):
    """Caller input could not be turned into a valid request."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RadioBrowserError):
    """HTTP 404 from the mirror."""

    def __init__(self):
        super().__init__("Resource not found")


class ServerUnavailableError(RadioBrowserError):
    """HTTP 5xx from the mirror. The mirror selection has been reset."""

    def __init__(self, status_code: int | None = None):
        detail = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"Server unavailable{detail}")
        self.status_code = status_code
