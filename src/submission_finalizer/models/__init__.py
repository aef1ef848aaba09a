"""
Data models for the submission finalizer.
"""

from .outcome import (
    NotificationKind,
    NotificationOutcome,
    NotificationResult,
    OutcomeRecord,
    next_timestamp_ms,
)
from .submission import SubmissionRequest

__all__ = [
    'NotificationKind',
    'NotificationOutcome',
    'NotificationResult',
    'OutcomeRecord',
    'SubmissionRequest',
    'next_timestamp_ms',
]
