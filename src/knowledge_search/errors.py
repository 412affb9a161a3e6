"""Error taxonomy for the webhook client."""

from __future__ import annotations


class EmptyQueryError(ValueError):
    """Raised when a query is blank after trimming."""

    def __init__(self, message: str = "Query must not be empty") -> None:
        super().__init__(message)


class SearchClientError(RuntimeError):
    """Base class for failures of a single webhook round trip."""

    kind = "error"


class RequestTimeoutError(SearchClientError, TimeoutError):
    """Raised when the webhook does not answer within the configured timeout."""

    kind = "timeout"

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"The request timed out (no answer after {timeout_seconds:g} seconds)")


class TransportError(SearchClientError):
    """Raised when the request could not be completed at the network level."""

    kind = "transport"

    def __init__(self, message: str, *, is_connectivity: bool = False) -> None:
        self.is_connectivity = is_connectivity
        super().__init__(message)


class HttpStatusError(SearchClientError):
    """Raised when the webhook answers with a non-2xx status."""

    kind = "http_status"

    def __init__(self, status_code: int, reason_phrase: str = "") -> None:
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        super().__init__(f"HTTP error: {status_code} {reason_phrase}".rstrip())


class DecodeError(SearchClientError):
    """Raised when the response body is not a JSON object."""

    kind = "decode"


__all__ = [
    "DecodeError",
    "EmptyQueryError",
    "HttpStatusError",
    "RequestTimeoutError",
    "SearchClientError",
    "TransportError",
]
