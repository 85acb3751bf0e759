from __future__ import annotations


class ConfigError(ValueError):
    """Raised when the probe configuration cannot be loaded or validated."""


class ProbeFailure(Exception):
    """A single probe did not pass. Never aborts the remaining probes."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class NetworkError(ProbeFailure):
    """The request could not complete (DNS, connection refused, timeout)."""

    kind = "network_error"


class CheckFailed(ProbeFailure):
    """The request completed but a checker rejected the response."""

    kind = "check_failed"

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(url, message)
        self.status_code = status_code
