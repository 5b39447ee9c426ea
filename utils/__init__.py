"""
Utils package - Shared utility functions.
"""

from utils.exceptions import (
    GradeWatchError,
    TransportError,
    ParseError,
    EmptyResultError,
    ChannelError,
    TokenRefreshError,
    ConfigurationError,
)
from utils.logger import setup_logging
from utils.debug_dump import write_debug_payload

__all__ = [
    'GradeWatchError',
    'TransportError',
    'ParseError',
    'EmptyResultError',
    'ChannelError',
    'TokenRefreshError',
    'ConfigurationError',
    'setup_logging',
    'write_debug_payload',
]
