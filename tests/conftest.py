"""
Pytest configuration and shared fixtures.

Key fixtures:
- aws_credentials: fake AWS credentials so moto never reaches real AWS
- submission_message: the decoded SNS message body for a valid submission
- sns_event: a Lambda SNS event wrapping submission_message
- make_archive: builds a FetchedArchive around an in-memory body
"""

import json
import os
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from submission_finalizer.clients.archive_fetcher import FetchedArchive  # noqa: E402


SUBMISSION_URL = 'https://x/a.zip'
EMAIL = 'u@e.com'
USER_ID = '42'
SUBMISSION_ID = 's1'
ASSIGNMENT_ID = 'hw1'


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def submission_message() -> dict[str, str]:
    """Decoded SNS message body."""
    return {
        'submissionUrl': SUBMISSION_URL,
        'email': EMAIL,
        'userId': USER_ID,
        'submissionId': SUBMISSION_ID,
        'assignmentId': ASSIGNMENT_ID,
    }


def make_sns_event(message: str) -> dict:
    """Wrap a raw message string in a Lambda SNS event."""
    return {
        'Records': [
            {
                'EventSource': 'aws:sns',
                'EventVersion': '1.0',
                'EventSubscriptionArn': 'arn:aws:sns:us-east-1:123:submissions:abc',
                'Sns': {
                    'Type': 'Notification',
                    'MessageId': 'msg-1',
                    'TopicArn': 'arn:aws:sns:us-east-1:123:submissions',
                    'Subject': None,
                    'Message': message,
                    'Timestamp': '2026-01-15T10:30:00.000Z',
                    'SignatureVersion': '1',
                    'Signature': '',
                    'SigningCertUrl': '',
                    'UnsubscribeUrl': '',
                    'MessageAttributes': {},
                },
            }
        ]
    }


@pytest.fixture
def sns_event(submission_message) -> dict:
    """Lambda SNS event carrying a valid submission."""
    return make_sns_event(json.dumps(submission_message))


def make_archive(body: bytes = b'PK\x03\x04archive', url: str = SUBMISSION_URL) -> FetchedArchive:
    """FetchedArchive over an in-memory 200 response."""
    response = httpx.Response(200, content=body, request=httpx.Request('GET', url))
    return FetchedArchive(response=response, status_code=200, source_url=url)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove finalizer settings that may leak in from the developer environment."""
    for name in (
        'ARTIFACT_BUCKET_NAME',
        'ARTIFACT_EXTENSION',
        'STORAGE_PART_SIZE_BYTES',
        'AUDIT_TABLE_NAME',
        'EMAIL_API_KEY',
        'EMAIL_DOMAIN',
        'EMAIL_SENDER',
        'NOTIFICATION_STATUS_BEST_EFFORT',
        'FETCH_TIMEOUT_SECONDS',
    ):
        monkeypatch.delenv(name, raising=False)
    return os.environ
