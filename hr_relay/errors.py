"""Errors raised while relaying a heart rate sample."""

from typing import Optional


class RelayError(Exception):
    """Base class for relay failures."""


class MalformedInput(RelayError):
    """The inbound sample is missing a field or has the wrong shape."""


class TimestampParseError(MalformedInput, ValueError):
    """The timestamp string matches none of the recognized formats."""

    def __init__(self, timestamp: str):
        self.timestamp = timestamp
        super().__init__(f"Unrecognized timestamp format: {timestamp!r}")


class DownstreamUnavailable(RelayError):
    """The database write failed to connect, timed out or returned non-2xx."""

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"GreptimeDB error: {body}"
        else:
            message = f"GreptimeDB error: HTTP {status_code}: {body}"
        super().__init__(message)
