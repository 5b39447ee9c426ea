"""
Delivery Result model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class DeliveryResult:
    """Outcome of sending one notification through one channel."""

    channel: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None
    attempted_at: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        if self.success:
            return f"[{self.channel}] delivered"
        return f"[{self.channel}] failed: {self.error}"

    def to_dict(self) -> dict:
        return {
            'channel': self.channel,
            'success': self.success,
            'error': self.error,
            'message_id': self.message_id,
            'attempted_at': self.attempted_at.isoformat(),
        }
