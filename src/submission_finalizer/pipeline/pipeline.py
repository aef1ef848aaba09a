"""
Submission finalization pipeline.

Provides end-to-end processing of one parsed submission:
1. Open the archive URL as a stream
2. On failure, send the failure email only
3. On success, store the archive and send the success email concurrently
4. Record one audit entry with the three outcome booleans
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..clients.archive_fetcher import ArchiveFetcher
from ..clients.dynamodb_recorder import DynamoDBAuditRecorder
from ..clients.mailgun_client import MailgunNotifier
from ..clients.s3_store import S3ArtifactStore
from ..config import FinalizerSettings
from ..logging import PipelineTimer, get_logger, logging_context
from ..models.outcome import NotificationKind, NotificationResult, OutcomeRecord
from ..models.submission import SubmissionRequest
from .fanout import OutcomeFanOut

logger = get_logger(__name__)


class PipelineStage(str, Enum):
    """Progress of one invocation."""

    START = 'start'
    PARSED = 'parsed'
    FETCH_OK = 'fetch_ok'
    FETCH_FAIL = 'fetch_fail'
    FANNED_OUT = 'fanned_out'
    NOTIFIED_FAIL_ONLY = 'notified_fail_only'
    RECORDED = 'recorded'
    DONE = 'done'
    ABORTED = 'aborted'


@dataclass
class PipelineResult:
    """Result of finalizing one submission."""

    submission_id: str
    assignment_id: str
    user_id: str

    stage: PipelineStage = PipelineStage.PARSED

    # Outcomes
    submission_status: bool = False
    storage_status: bool = False
    notification: NotificationResult | None = None
    notification_status: bool = False
    audit_status: bool = False
    storage_key: str | None = None
    record: OutcomeRecord | None = None

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    processing_time_ms: int | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'submission_id': self.submission_id,
            'assignment_id': self.assignment_id,
            'user_id': self.user_id,
            'stage': self.stage.value,
            'submission_status': self.submission_status,
            'storage_status': self.storage_status,
            'notification_status': self.notification_status,
            'notification_outcome': (
                self.notification.outcome.value if self.notification else None
            ),
            'audit_status': self.audit_status,
            'storage_key': self.storage_key,
            'processing_time_ms': self.processing_time_ms,
            'stage_timings': self.stage_timings,
            'errors': self.errors,
        }


class SubmissionPipeline:
    """
    Orchestrates fetch, fan-out and audit for one submission.

    Collaborators are injected so each can be substituted in tests:
    - ArchiveFetcher: streaming download
    - S3ArtifactStore: archive persistence
    - MailgunNotifier: outcome emails
    - DynamoDBAuditRecorder: outcome record

    Usage:
        pipeline = SubmissionPipeline.from_settings(get_settings())
        result = await pipeline.finalize(request)
    """

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        store: S3ArtifactStore,
        notifier: MailgunNotifier,
        recorder: DynamoDBAuditRecorder,
        artifact_extension: str = 'zip',
        best_effort_notification_status: bool = False,
    ):
        """
        Args:
            fetcher: Opens submission URLs as streams
            store: Writes archives to object storage
            notifier: Sends outcome emails
            recorder: Writes the audit record
            artifact_extension: Extension appended to the storage key
            best_effort_notification_status: Count backend email errors as
                delivered in the audit record (legacy semantics)
        """
        self.fetcher = fetcher
        self.store = store
        self.notifier = notifier
        self.recorder = recorder
        self.artifact_extension = artifact_extension
        self.best_effort_notification_status = best_effort_notification_status
        self.fan_out = OutcomeFanOut(store, notifier)

    @classmethod
    def from_settings(cls, settings: FinalizerSettings) -> SubmissionPipeline:
        """Build the pipeline and its clients from settings."""
        return cls(
            fetcher=ArchiveFetcher(timeout_seconds=settings.FETCH_TIMEOUT_SECONDS),
            store=S3ArtifactStore(
                bucket=settings.ARTIFACT_BUCKET_NAME,
                part_size=settings.STORAGE_PART_SIZE_BYTES,
                region_name=settings.AWS_REGION,
            ),
            notifier=MailgunNotifier(
                api_key=settings.EMAIL_API_KEY,
                domain=settings.EMAIL_DOMAIN,
                sender=settings.sender_address,
                base_url=settings.EMAIL_API_BASE_URL,
                timeout_seconds=settings.EMAIL_TIMEOUT_SECONDS,
            ),
            recorder=DynamoDBAuditRecorder(
                table_name=settings.AUDIT_TABLE_NAME,
                region_name=settings.AWS_REGION,
            ),
            artifact_extension=settings.ARTIFACT_EXTENSION,
            best_effort_notification_status=settings.NOTIFICATION_STATUS_BEST_EFFORT,
        )

    async def finalize(self, request: SubmissionRequest) -> PipelineResult:
        """
        Run the pipeline for a parsed submission.

        Fetch, storage, notification and audit failures are recorded in the
        result; anything else propagates to the caller and no audit record
        is written.

        Args:
            request: Parsed submission metadata

        Returns:
            PipelineResult with every outcome and the written record
        """
        timer = PipelineTimer()

        with logging_context(
            submission_id=request.submission_id,
            assignment_id=request.assignment_id,
            user_id=request.user_id,
        ):
            logger.info('pipeline.started', url=request.submission_url)

            result = PipelineResult(
                submission_id=request.submission_id,
                assignment_id=request.assignment_id,
                user_id=request.user_id,
            )

            async with AsyncExitStack() as stack:
                with timer.stage('fetch'):
                    archive = await stack.enter_async_context(
                        self.fetcher.fetch(request.submission_url)
                    )

                if archive is None:
                    result.stage = PipelineStage.FETCH_FAIL
                    with timer.stage('notify_fail'):
                        result.notification = await self.notifier.notify(
                            request.email, NotificationKind.FAIL
                        )
                    result.stage = PipelineStage.NOTIFIED_FAIL_ONLY
                else:
                    result.submission_status = True
                    result.stage = PipelineStage.FETCH_OK
                    result.storage_key = request.storage_key(self.artifact_extension)
                    with timer.stage('fan_out'):
                        fan_out = await self.fan_out.run(
                            archive, result.storage_key, request.email
                        )
                    result.storage_status = fan_out.storage_status
                    result.notification = fan_out.notification
                    result.errors.extend(fan_out.errors)
                    result.stage = PipelineStage.FANNED_OUT

            result.notification_status = result.notification.status(
                best_effort=self.best_effort_notification_status
            )

            logger.info(
                'pipeline.status',
                submission_status=result.submission_status,
                storage_status=result.storage_status,
                notification_status=result.notification_status,
                notification_outcome=result.notification.outcome.value,
            )

            result.record = OutcomeRecord(
                id=request.submission_id,
                user_id=request.user_id,
                email=request.email,
                assignment_id=request.assignment_id,
                submission_status=result.submission_status,
                storage_status=result.storage_status,
                notification_status=result.notification_status,
                notification_outcome=result.notification.outcome,
            )
            with timer.stage('audit'):
                result.audit_status = await self.recorder.record(result.record)
            result.stage = PipelineStage.RECORDED

            result.completed_at = datetime.now()
            result.processing_time_ms = int(timer.total_ms)
            result.stage_timings = timer.stages.copy()
            result.stage = PipelineStage.DONE

            logger.info(
                'pipeline.complete',
                audit_status=result.audit_status,
                **timer.summary(),
            )

        return result
