"""
Fetch Result model.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class FetchResult:
    """Outcome of a single HTTP request: a body, or the error that prevented one."""

    url: str
    body: Optional[str] = None
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.error is None and self.body is not None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__
