"""
Models package - Data classes for the application.
"""

from models.subject import Subject, SubjectState
from models.grade import GradedItem, ObservationSnapshot
from models.fetch_result import FetchResult
from models.notification import Notification
from models.delivery_result import DeliveryResult
from models.poll_result import PollResult

__all__ = [
    'Subject',
    'SubjectState',
    'GradedItem',
    'ObservationSnapshot',
    'FetchResult',
    'Notification',
    'DeliveryResult',
    'PollResult',
]
