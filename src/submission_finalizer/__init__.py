"""
Submission Finalizer

Event-triggered handler that downloads a submitted assignment archive, stores
it in S3, emails the submitter and writes an audit record to DynamoDB.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .pipeline import (
    FanOutResult,
    OutcomeFanOut,
    PipelineResult,
    PipelineStage,
    SubmissionPipeline,
)
from .models import (
    NotificationKind,
    NotificationOutcome,
    NotificationResult,
    OutcomeRecord,
    SubmissionRequest,
)
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    FinalizerError,
    EnvelopeError,
    ConfigurationError,
    FetchError,
    StorageError,
    NotificationError,
    AuditError,
)

__all__ = [
    # Version
    '__version__',
    # Pipeline
    'SubmissionPipeline',
    'PipelineResult',
    'PipelineStage',
    'OutcomeFanOut',
    'FanOutResult',
    # Models
    'SubmissionRequest',
    'OutcomeRecord',
    'NotificationKind',
    'NotificationOutcome',
    'NotificationResult',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'FinalizerError',
    'EnvelopeError',
    'ConfigurationError',
    'FetchError',
    'StorageError',
    'NotificationError',
    'AuditError',
]
