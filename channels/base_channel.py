"""
Abstract base channel for notification delivery.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging

from fetchers.http_client import HTTPClient
from models.delivery_result import DeliveryResult
from models.notification import Notification


class BaseChannel(ABC):
    """Abstract base class for all notification channels."""

    def __init__(
        self,
        config: Dict[str, Any],
        settings: Dict[str, Any] = None,
        client: HTTPClient = None
    ):
        """
        Initialize channel with its configuration.

        Args:
            config: Channel configuration dictionary
            settings: Application settings (for the HTTP client)
            client: Optional transport; built from settings when omitted
        """
        self.config = config
        self.settings = settings or {}
        self.client = client or HTTPClient(self.settings)
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def name(self) -> str:
        return self.config.get('name') or self.get_channel_name()

    @abstractmethod
    def send(self, notification: Notification) -> DeliveryResult:
        """
        Deliver one notification.

        Returns:
            DeliveryResult describing success or the failure reason
        """
        pass

    @abstractmethod
    def get_channel_name(self) -> str:
        pass

    def succeeded(self, message_id: str = None) -> DeliveryResult:
        return DeliveryResult(channel=self.name, success=True, message_id=message_id)

    def failed(self, error: str) -> DeliveryResult:
        self.logger.error(f"Delivery via {self.name} failed: {error}")
        return DeliveryResult(channel=self.name, success=False, error=error)
