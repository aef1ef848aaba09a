"""
DynamoDB audit recorder for submission outcomes.
"""

from __future__ import annotations

import asyncio
from typing import Any

import boto3
import structlog

from ..config import require_config
from ..errors import wrap_audit_error
from ..models.outcome import OutcomeRecord

logger = structlog.get_logger(__name__)


class DynamoDBAuditRecorder:
    """
    Upserts one OutcomeRecord per submission into a DynamoDB table.

    Best effort: `record()` logs and swallows every failure so the audit step
    can never change the outcome of the steps it records.
    """

    def __init__(
        self,
        table_name: str,
        region_name: str | None = None,
        resource: Any | None = None,
    ):
        """
        Args:
            table_name: Audit table (may be empty; checked per call)
            region_name: AWS region for the resource (default chain if None)
            resource: Pre-built boto3 DynamoDB resource, mainly for tests
        """
        self.table_name = table_name
        self.region_name = region_name
        self._resource = resource

    @property
    def resource(self) -> Any:
        if self._resource is None:
            self._resource = boto3.resource('dynamodb', region_name=self.region_name)
        return self._resource

    async def record(self, outcome: OutcomeRecord) -> bool:
        """
        Write `outcome` keyed by its id.

        Returns:
            True if the item was written, False otherwise
        """
        item = outcome.to_item()
        logger.info('audit.inserting', table=self.table_name, item=item)

        try:
            require_config(AUDIT_TABLE_NAME=self.table_name)
            table = self.resource.Table(self.table_name)
            response = await asyncio.to_thread(table.put_item, Item=item)
        except Exception as e:
            error = wrap_audit_error(e, context={'table': self.table_name, 'id': outcome.id})
            logger.error(
                'audit.failed',
                table=self.table_name,
                error=error.message,
                error_type=error.context.get('error_type', type(error).__name__),
            )
            return False

        logger.info(
            'audit.inserted',
            table=self.table_name,
            request_id=response.get('ResponseMetadata', {}).get('RequestId'),
        )
        return True
