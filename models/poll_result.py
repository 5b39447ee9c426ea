"""
Poll Result model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from models.delivery_result import DeliveryResult
from models.grade import ObservationSnapshot


@dataclass
class PollResult:
    """Represents the outcome of one subject's turn in a polling round."""

    subject_id: str
    snapshot: Optional[ObservationSnapshot] = None
    changed: bool = False
    first_observation: bool = False
    no_data: bool = False
    previous_count: Optional[int] = None
    current_count: Optional[int] = None
    error: Optional[str] = None
    deliveries: List[DeliveryResult] = field(default_factory=list)
    check_time: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        if self.error:
            return f"[{self.subject_id}] ERROR: {self.error}"
        if self.no_data:
            return f"[{self.subject_id}] No grades yet."

        text = self.snapshot.format_report().rstrip("\n") if self.snapshot else ''
        if self.changed:
            text += f"\n  Updated: {self.previous_count} -> {self.current_count} items"
            for delivery in self.deliveries:
                text += f"\n  {delivery}"
        return text

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        snapshot = self.snapshot
        return {
            'subject_id': self.subject_id,
            'status': self.status,
            'changed': self.changed,
            'previous_count': self.previous_count,
            'current_count': self.current_count,
            'student_name': snapshot.student_name if snapshot else None,
            'weighted_average': snapshot.weighted_average if snapshot else None,
            'error': self.error,
            'deliveries': [delivery.to_dict() for delivery in self.deliveries],
            'check_time': self.check_time.isoformat() if self.check_time else None,
        }

    @property
    def is_success(self) -> bool:
        """A turn succeeds when it produced data or legitimately found none."""
        return self.error is None

    @property
    def notified(self) -> bool:
        return any(delivery.success for delivery in self.deliveries)

    @property
    def status(self) -> str:
        if self.error:
            return 'error'
        if self.no_data:
            return 'no_data'
        if self.first_observation:
            return 'baseline'
        return 'updated' if self.changed else 'unchanged'
