"""
Submission request model parsed from the trigger message body.
"""

from pydantic import BaseModel, ConfigDict, Field


class SubmissionRequest(BaseModel):
    """
    Submission metadata delivered by the trigger.

    Field names follow Python conventions; the message body uses camelCase
    keys, accepted through the aliases. All five fields are required.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    submission_url: str = Field(..., alias='submissionUrl', min_length=1)
    email: str = Field(..., min_length=1)
    user_id: str = Field(..., alias='userId', min_length=1)
    assignment_id: str = Field(..., alias='assignmentId', min_length=1)
    submission_id: str = Field(..., alias='submissionId', min_length=1)

    def storage_key(self, extension: str = 'zip') -> str:
        """Destination object key; depends only on assignment and user."""
        suffix = f'.{extension.lstrip(".")}' if extension else ''
        return f'{self.assignment_id}/{self.user_id}{suffix}'
