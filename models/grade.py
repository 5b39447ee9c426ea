"""
Grade record models.
"""

import hashlib
from dataclasses import dataclass, field
from typing import List, Optional


def format_number(value: float) -> str:
    """Render 90.0 as '90' and 2.5 as '2.5'."""
    return f"{value:g}"


@dataclass(frozen=True)
class GradedItem:
    """One graded course as reported by the upstream source."""

    score: float
    credit: float
    course: str
    grade_point: Optional[float] = None

    def sort_key(self) -> tuple:
        """
        Total order for display: score descending, then credit descending,
        then course name ascending.
        """
        return (-self.score, -self.credit, self.course)

    def __str__(self) -> str:
        return f"{format_number(self.score)}\t{self.course}[{format_number(self.credit)}]"


@dataclass
class ObservationSnapshot:
    """The grade items and derived metrics from one successful poll."""

    student_name: str
    items: List[GradedItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_credit(self) -> float:
        return sum(item.credit for item in self.items)

    @property
    def weighted_average(self) -> Optional[float]:
        """
        Credit-weighted mean score.

        Returns:
            The average, or None when the total credit is zero
        """
        total_credit = self.total_credit
        if total_credit == 0:
            return None
        return sum(item.score * item.credit for item in self.items) / total_credit

    @property
    def gpa(self) -> Optional[float]:
        """Credit-weighted grade point average, None if any grade point is missing."""
        if not self.items or any(item.grade_point is None for item in self.items):
            return None
        total_credit = self.total_credit
        if total_credit == 0:
            return None
        return sum(item.grade_point * item.credit for item in self.items) / total_credit

    @property
    def signature(self) -> str:
        """Content hash over the sorted items, used by signature-based change detection."""
        digest = hashlib.sha1()
        for item in self.items:
            digest.update(
                f"{item.course}\x1f{item.score!r}\x1f{item.credit!r}\x1e".encode('utf-8')
            )
        return digest.hexdigest()

    def format_report(self) -> str:
        lines = [f"[{self.student_name}]"]
        lines.extend(str(item) for item in self.items)

        average = self.weighted_average
        lines.append(
            f"Weighted average: {average:.2f}" if average is not None
            else "Weighted average: N/A"
        )

        gpa = self.gpa
        if gpa is not None:
            lines.append(f"Current GPA: {gpa:.2f}")

        return "\n".join(lines) + "\n"
