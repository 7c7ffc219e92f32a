from typing import Optional


class AggregatorError(Exception):
    """Base class for errors raised by the activity aggregator."""


class InvalidQueryError(AggregatorError, ValueError):
    """Query arguments that cannot be applied (negative page values, bad dates)."""


class UpstreamError(AggregatorError):
    """
    An upstream API could not be read: transport failure or a non-2xx answer.
    """

    def __init__(self, source: str, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.source = source
        self.status_code = status_code
        self.body = body
        detail = f"{source}: {message}"
        if status_code is not None:
            detail = f"{detail} (HTTP {status_code})"
        super().__init__(detail)


class MalformedEventError(AggregatorError):
    """A raw upstream record lacks the fields a valid Activity needs."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")
