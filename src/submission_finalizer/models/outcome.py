"""
Outcome models: notification results and the audit record.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationKind(str, Enum):
    """Which template the submitter receives."""

    SUCCESS = 'success'
    FAIL = 'fail'


class NotificationOutcome(str, Enum):
    """What the email backend did with the message."""

    SENT = 'sent'
    BACKEND_ERROR = 'backend_error'
    CONFIG_ERROR = 'config_error'


@dataclass(frozen=True)
class NotificationResult:
    """Result of handing one message to the email backend."""

    recipient: str
    kind: NotificationKind
    outcome: NotificationOutcome
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.outcome is NotificationOutcome.SENT

    def status(self, best_effort: bool = False) -> bool:
        """
        Boolean stored in the audit record.

        With best_effort, backend errors still count as delivered (legacy
        audit semantics); only a send that was never attempted is False.
        """
        if best_effort:
            return self.outcome is not NotificationOutcome.CONFIG_ERROR
        return self.sent


class _MillisecondClock:
    """Epoch milliseconds, strictly increasing within the process."""

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        with self._lock:
            current = max(int(time.time() * 1000), self._last + 1)
            self._last = current
            return current


_clock = _MillisecondClock()


def next_timestamp_ms() -> int:
    """Record-creation timestamp; never repeats or goes backwards in this process."""
    return _clock.now_ms()


class OutcomeRecord(BaseModel):
    """
    One audit entry per invocation, keyed by submission ID.

    Serialized with camelCase attribute names via `to_item()`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description='Submission ID (primary key)')
    user_id: str = Field(..., alias='userId')
    email: str
    assignment_id: str = Field(..., alias='assignmentId')
    submission_status: bool = Field(..., alias='submissionStatus')
    storage_status: bool = Field(..., alias='storageStatus')
    notification_status: bool = Field(..., alias='notificationStatus')
    notification_outcome: NotificationOutcome | None = Field(
        default=None, alias='notificationOutcome'
    )
    timestamp: int = Field(default_factory=next_timestamp_ms)

    def to_item(self) -> dict[str, Any]:
        """Attribute map as written to the audit store."""
        return self.model_dump(by_alias=True, mode='json', exclude_none=True)
