"""
Change detection between consecutive successful observations.
"""

from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True)
class ChangeDecision:
    changed: bool
    # Whether the caller should store the current value as the new baseline.
    record: bool


def detect_change(
    previous: Optional[Hashable],
    current: Hashable,
    first_observation: bool
) -> ChangeDecision:
    """
    Decide whether a subject's record changed.

    The first observation only establishes the baseline and never signals a
    change, so a restart does not notify about grades that were already there.

    Args:
        previous: Baseline value (item count or signature)
        current: Value from the current successful observation
        first_observation: True until a baseline has been recorded

    Returns:
        ChangeDecision
    """
    if first_observation:
        return ChangeDecision(changed=False, record=True)

    changed = current != previous
    return ChangeDecision(changed=changed, record=changed)
