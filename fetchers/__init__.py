"""
Fetchers package - Upstream retrieval and the shared HTTP transport.
"""

from fetchers.http_client import HTTPClient
from fetchers.base_fetcher import BaseFetcher
from fetchers.grade_fetcher import GradeFetcher

__all__ = [
    'HTTPClient',
    'BaseFetcher',
    'GradeFetcher',
]
