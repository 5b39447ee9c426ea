"""
Notification model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Notification:
    """A formatted message to broadcast through the configured channels."""

    text: str
    subject_id: Optional[str] = None
    recipient: Optional[str] = None
    title: str = "Grade update"
    created_at: datetime = field(default_factory=datetime.now)
