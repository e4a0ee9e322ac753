from __future__ import annotations


class GMonitorError(Exception):
    """Base class for all gmonitor errors."""


class ValidationError(GMonitorError, ValueError):
    """A required argument is missing or invalid. Always raised synchronously."""


class TransportError(GMonitorError):
    """The Monitoring API rejected a request or could not be reached."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthError(GMonitorError):
    """Credentials could not be loaded or refreshed."""
