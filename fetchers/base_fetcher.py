"""
Abstract base fetcher for upstream data sources.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging

from fetchers.http_client import HTTPClient
from models.fetch_result import FetchResult
from models.subject import Subject


class BaseFetcher(ABC):
    """Abstract base class for per-subject fetchers."""

    def __init__(
        self,
        config: Dict[str, Any],
        settings: Dict[str, Any] = None,
        client: HTTPClient = None
    ):
        """
        Initialize fetcher with source configuration.

        Args:
            config: Source configuration dictionary
            settings: Application settings (for the HTTP client)
            client: Optional transport; built from settings when omitted
        """
        self.config = config
        self.settings = settings or {}
        self.client = client or HTTPClient(self.settings)
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def fetch(self, subject: Subject) -> FetchResult:
        """
        Retrieve the raw record for one subject.

        Returns:
            FetchResult; never raises for network problems
        """
        pass

    def handle_error(self, subject: Subject, result: FetchResult) -> None:
        self.logger.error(
            f"Error fetching data for {subject.subject_id}: {result.error_message}"
        )
