"""
Exception hierarchy for the grade monitor.
"""


class GradeWatchError(Exception):
    """Base class for all monitor errors."""


class TransportError(GradeWatchError):
    """Network-level failure: connect, timeout, TLS, DNS or bad HTTP status."""

    def __init__(self, message: str, url: str = None, cause: Exception = None):
        super().__init__(message)
        self.url = url
        self.cause = cause


class ParseError(GradeWatchError):
    """The upstream payload could not be turned into grade records."""


class EmptyResultError(ParseError):
    """The payload was well formed but contained no grade records yet."""


class ChannelError(GradeWatchError):
    """A notification channel rejected or could not deliver a message."""


class TokenRefreshError(ChannelError):
    """A token-based channel could not obtain a fresh access token."""


class ConfigurationError(GradeWatchError):
    """Required settings are missing or invalid."""
