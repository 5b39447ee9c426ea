"""
Notification Dispatcher - Best-effort broadcast over all configured channels.
"""

import logging
from typing import List

from channels.base_channel import BaseChannel
from models.delivery_result import DeliveryResult
from models.notification import Notification


class NotificationDispatcher:
    """Sends a notification through every channel, isolating failures per channel."""

    def __init__(self, channels: List[BaseChannel] = None):
        self.channels = list(channels or [])
        self.logger = logging.getLogger('NotificationDispatcher')

    @property
    def has_channels(self) -> bool:
        return bool(self.channels)

    def dispatch(self, notification: Notification) -> List[DeliveryResult]:
        """
        Attempt delivery on each channel.

        A failing channel never prevents the remaining channels from being
        tried, and nothing is raised to the caller.

        Returns:
            One DeliveryResult per channel, in channel order
        """
        results = []
        for channel in self.channels:
            try:
                result = channel.send(notification)
            except Exception as e:
                self.logger.exception(f"Channel {channel.name} raised during send")
                result = DeliveryResult(
                    channel=channel.name,
                    success=False,
                    error=f"{type(e).__name__}: {e}"
                )

            if result.success:
                self.logger.info(f"Notification delivered via {result.channel}")
            results.append(result)

        return results
