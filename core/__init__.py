"""
Core package - Contains main business logic.
"""

from core.registry import SubjectRegistry
from core.state_manager import StateManager
from core.extractor import RecordExtractor
from core.change_detector import ChangeDecision, detect_change
from core.dispatcher import NotificationDispatcher
from core.monitor import GradeMonitor

__all__ = [
    'SubjectRegistry',
    'StateManager',
    'RecordExtractor',
    'ChangeDecision',
    'detect_change',
    'NotificationDispatcher',
    'GradeMonitor',
]
