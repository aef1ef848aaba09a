"""Parse the SNS trigger event into a SubmissionRequest."""

import json

from aws_lambda_powertools.utilities.data_classes import SNSEvent
from pydantic import ValidationError

from ..errors import EnvelopeError
from ..models.submission import SubmissionRequest


def parse_sns_event(event: dict) -> SubmissionRequest:
    """
    Extract the submission from the first record of an SNS-triggered event.

    Event format:
    {
        "Records": [
            {
                "EventSource": "aws:sns",
                "Sns": {
                    "Message": "{\"submissionUrl\": ..., \"email\": ..., ...}",
                    ...
                }
            }
        ]
    }

    Raises:
        EnvelopeError: If the event or its message does not carry a complete submission
    """
    try:
        records = list(SNSEvent(event).records)
        message = records[0].sns.message
    except (KeyError, IndexError, TypeError) as e:
        raise EnvelopeError(
            f"Event is not an SNS notification: {type(e).__name__}: {e}",
            context={'keys': sorted(event) if isinstance(event, dict) else None},
        ) from e

    return parse_submission_message(message)


def parse_submission_message(message: str) -> SubmissionRequest:
    """
    Parse the decoded SNS message body.

    Raises:
        EnvelopeError: On invalid JSON, a non-object body, or missing fields
    """
    try:
        body = json.loads(message)
    except (json.JSONDecodeError, TypeError) as e:
        raise EnvelopeError(f"Invalid JSON in SNS message: {e}") from e

    if not isinstance(body, dict):
        raise EnvelopeError(
            "SNS message must be a JSON object",
            context={'type': type(body).__name__},
        )

    try:
        return SubmissionRequest.model_validate(body)
    except ValidationError as e:
        fields = sorted({str(err['loc'][0]) for err in e.errors() if err['loc']})
        raise EnvelopeError(
            f"Submission message is missing or has invalid fields: {', '.join(fields)}",
            context={'fields': fields, 'keys': sorted(body)},
        ) from e
