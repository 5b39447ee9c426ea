"""
Generic webhook channel.
Sends the message text URL-encoded as a query parameter, e.g. a Telegram
bot sendMessage URL with the chat id already in it.
"""

import json
from typing import Dict, Any

from channels.base_channel import BaseChannel
from fetchers.http_client import HTTPClient
from models.delivery_result import DeliveryResult
from models.notification import Notification


class WebhookChannel(BaseChannel):
    """Channel that pushes the text to a preconfigured URL."""

    def __init__(
        self,
        config: Dict[str, Any],
        settings: Dict[str, Any] = None,
        client: HTTPClient = None
    ):
        super().__init__(config, settings, client)
        self.url = config.get('url', '')
        self.method = str(config.get('method', 'POST')).upper()
        self.text_param = config.get('text_param', 'text')

    def get_channel_name(self) -> str:
        return "webhook"

    def send(self, notification: Notification) -> DeliveryResult:
        if not self.url:
            return self.failed("No webhook url configured")

        self.logger.info(f"Pushing notification to webhook ({self.method})")
        result = self.client.request(
            self.method,
            self.url,
            params={self.text_param: notification.text},
            max_retries=1
        )
        if not result.is_success:
            return self.failed(result.error_message)

        return self._check_body(result.body)

    def _check_body(self, body: str) -> DeliveryResult:
        """Bot-style APIs answer 200 with {"ok": false} on rejection."""
        try:
            payload = json.loads(body) if body else None
        except json.JSONDecodeError:
            payload = None

        if isinstance(payload, dict) and payload.get('ok') is False:
            return self.failed(payload.get('description') or 'Webhook rejected the message')

        message_id = None
        if isinstance(payload, dict) and isinstance(payload.get('result'), dict):
            message_id = payload['result'].get('message_id')
        return self.succeeded(str(message_id) if message_id is not None else None)
