"""
Subject models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def mask_credential(credential: Optional[str]) -> str:
    """Return a log-safe rendering of an opaque credential."""
    if not credential:
        return ''
    if len(credential) <= 8:
        return '***'
    return f"{credential[:4]}***{credential[-2:]}"


@dataclass
class Subject:
    """A tracked student whose grade record is polled."""

    subject_id: str
    credential: str
    push_target: Optional[str] = None
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Subject':
        """Create a Subject from a configuration entry."""
        return cls(
            subject_id=str(data.get('id', '')).strip(),
            credential=str(data.get('credential') or ''),
            push_target=data.get('push_target') or None,
            label=data.get('label') or None,
        )

    @property
    def display_name(self) -> str:
        return self.label or self.subject_id

    def __repr__(self) -> str:
        return (
            f"Subject(subject_id={self.subject_id!r}, "
            f"credential={mask_credential(self.credential)!r}, "
            f"push_target={self.push_target!r})"
        )


@dataclass
class SubjectState:
    """Mutable per-subject polling state: the baseline for change detection."""

    subject_id: str
    last_count: Optional[int] = None
    last_signature: Optional[str] = None
    first_observation: bool = True
    last_success: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'last_count': self.last_count,
            'last_signature': self.last_signature,
            'first_observation': self.first_observation,
            'last_success': self.last_success.isoformat() if self.last_success else None,
        }

    @classmethod
    def from_dict(cls, subject_id: str, data: dict) -> 'SubjectState':
        last_success = data.get('last_success')
        if last_success:
            try:
                last_success = datetime.fromisoformat(last_success)
            except (TypeError, ValueError):
                last_success = None
        return cls(
            subject_id=subject_id,
            last_count=data.get('last_count'),
            last_signature=data.get('last_signature'),
            first_observation=bool(data.get('first_observation', True)),
            last_success=last_success or None,
        )
