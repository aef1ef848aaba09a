"""
External service clients for the submission finalizer.
"""

from .archive_fetcher import ArchiveFetcher, FetchedArchive
from .dynamodb_recorder import DynamoDBAuditRecorder
from .mailgun_client import TEMPLATES, EmailTemplate, MailgunNotifier
from .s3_store import S3ArtifactStore

__all__ = [
    'ArchiveFetcher',
    'FetchedArchive',
    'DynamoDBAuditRecorder',
    'EmailTemplate',
    'MailgunNotifier',
    'TEMPLATES',
    'S3ArtifactStore',
]
