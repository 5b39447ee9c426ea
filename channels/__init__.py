"""
Channels package - Notification delivery implementations.
"""

from channels.base_channel import BaseChannel
from channels.webhook_channel import WebhookChannel
from channels.wecom_channel import WeComChannel
from channels.token_manager import AccessTokenManager, TokenState

__all__ = [
    'BaseChannel',
    'WebhookChannel',
    'WeComChannel',
    'AccessTokenManager',
    'TokenState',
]
