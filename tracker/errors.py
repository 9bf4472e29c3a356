"""
Error types raised by the tracker core and rendered by the HTTP layer.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base error carrying a client-facing message and HTTP status."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidTenant(TrackerError):
    status_code = 400
    default_message = "Invalid user type"


class AuthenticationFailed(TrackerError):
    status_code = 401
    default_message = "Invalid username or password"


class UnknownField(TrackerError):
    status_code = 400
    default_message = "Invalid field"


class MalformedBody(TrackerError):
    status_code = 400
    default_message = "Malformed request body"


class StorageUnavailable(TrackerError):
    """Backend failure. The message is generic so no internals leak out."""

    status_code = 500
    default_message = "Storage unavailable"
