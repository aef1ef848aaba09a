"""
Custom exceptions and error handling for the submission finalizer.

Provides:
- Typed exception hierarchy for the different failure modes
- Error context preservation for debugging
- Wrappers that turn backend exceptions into typed errors before logging
"""

from typing import Any


class FinalizerError(Exception):
    """Base exception for all submission finalizer errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Input / Configuration Errors
# =============================================================================


class EnvelopeError(FinalizerError):
    """Trigger payload could not be parsed into a submission request."""

    pass


class ConfigurationError(FinalizerError):
    """A setting required by a step is missing."""

    pass


# =============================================================================
# Step Errors
# =============================================================================


class StepError(FinalizerError):
    """Base class for errors raised inside a pipeline step."""

    pass


class FetchError(StepError):
    """Archive could not be downloaded."""

    pass


class StorageError(StepError):
    """Archive could not be written to object storage."""

    pass


class NotificationError(StepError):
    """Email delivery backend rejected or failed the message."""

    pass


class AuditError(StepError):
    """Outcome record could not be written to the audit store."""

    pass


# =============================================================================
# Error Handling Utilities
# =============================================================================


def _error_context(exc: Exception, context: dict[str, Any] | None) -> dict[str, Any]:
    ctx = dict(context or {})
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__
    return ctx


def wrap_storage_error(exc: Exception, context: dict[str, Any] | None = None) -> StorageError:
    """
    Wrap an S3/botocore or stream read exception in a StorageError.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        StorageError carrying the original error details
    """
    if isinstance(exc, StorageError):
        return exc
    return StorageError(f"Storage write failed: {exc}", context=_error_context(exc, context))


def wrap_notification_error(
    exc: Exception, context: dict[str, Any] | None = None
) -> NotificationError:
    """Wrap an HTTP exception from the email backend in a NotificationError."""
    if isinstance(exc, NotificationError):
        return exc
    return NotificationError(
        f"Email delivery failed: {exc}", context=_error_context(exc, context)
    )


def wrap_audit_error(exc: Exception, context: dict[str, Any] | None = None) -> AuditError:
    """Wrap a DynamoDB exception in an AuditError."""
    if isinstance(exc, AuditError):
        return exc
    return AuditError(f"Audit write failed: {exc}", context=_error_context(exc, context))
