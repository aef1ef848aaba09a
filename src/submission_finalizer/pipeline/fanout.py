"""
Concurrent storage + success-notification step.

Both operations are launched together with asyncio.gather(return_exceptions=True)
and always awaited to completion. A failure in one never cancels or blocks the
other; each slot of the result is filled independently.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..clients.archive_fetcher import FetchedArchive
from ..clients.mailgun_client import MailgunNotifier
from ..clients.s3_store import S3ArtifactStore
from ..models.outcome import NotificationKind, NotificationOutcome, NotificationResult

logger = structlog.get_logger(__name__)


@dataclass
class FanOutResult:
    """Storage and notification outcomes collected as a pair."""

    storage_status: bool
    notification: NotificationResult
    duration_ms: int | None = None

    # Exceptions that escaped a step's own error handling
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'storage_status': self.storage_status,
            'notification_outcome': self.notification.outcome.value,
            'duration_ms': self.duration_ms,
            'errors': self.errors,
        }


class OutcomeFanOut:
    """Runs the storage write and the success email side by side."""

    def __init__(self, store: S3ArtifactStore, notifier: MailgunNotifier):
        self.store = store
        self.notifier = notifier

    async def run(self, archive: FetchedArchive, key: str, recipient: str) -> FanOutResult:
        """
        Store the archive under `key` and email `recipient`, concurrently.

        Args:
            archive: Open download to stream into storage
            key: Destination object key
            recipient: Submitter email address

        Returns:
            FanOutResult with both outcomes
        """
        t0 = time.monotonic()
        log = logger.bind(key=key, recipient=recipient)
        log.info('fan_out.started')

        storage_outcome, notify_outcome = await asyncio.gather(
            self.store.store(key, archive.iter_chunks()),
            self.notifier.notify(recipient, NotificationKind.SUCCESS),
            return_exceptions=True,
        )

        errors: list[str] = []

        if isinstance(storage_outcome, BaseException):
            log.error(
                'fan_out.storage_raised',
                error=str(storage_outcome),
                error_type=type(storage_outcome).__name__,
            )
            errors.append(f'storage: {type(storage_outcome).__name__}: {storage_outcome}')
            storage_status = False
        else:
            storage_status = bool(storage_outcome)

        if isinstance(notify_outcome, BaseException):
            log.error(
                'fan_out.notification_raised',
                error=str(notify_outcome),
                error_type=type(notify_outcome).__name__,
            )
            errors.append(f'notification: {type(notify_outcome).__name__}: {notify_outcome}')
            notification = NotificationResult(
                recipient=recipient,
                kind=NotificationKind.SUCCESS,
                outcome=NotificationOutcome.BACKEND_ERROR,
                error=str(notify_outcome),
            )
        else:
            notification = notify_outcome

        result = FanOutResult(
            storage_status=storage_status,
            notification=notification,
            duration_ms=int((time.monotonic() - t0) * 1000),
            errors=errors,
        )
        log.info('fan_out.complete', **result.to_dict())
        return result
