"""
S3 object store for submission archives.

Streams an async byte iterator into S3 without holding the whole archive in
memory: small bodies go up in a single put_object, anything larger than one
part becomes a multipart upload that is aborted on error.
"""

from __future__ import annotations

import asyncio
import mimetypes
from typing import Any, AsyncIterable

import boto3
import structlog

from ..config import MIN_PART_SIZE_BYTES, require_config
from ..errors import wrap_storage_error

logger = structlog.get_logger(__name__)


class S3ArtifactStore:
    """
    Writes archives to a single bucket.

    `store()` never raises: every failure is logged and reported as False.
    Concurrent writes to the same key are last-writer-wins.
    """

    def __init__(
        self,
        bucket: str,
        part_size: int = 8 * 1024 * 1024,
        region_name: str | None = None,
        client: Any | None = None,
    ):
        """
        Args:
            bucket: Destination bucket name (may be empty; checked per call)
            part_size: Multipart part size in bytes (>= 5 MiB)
            region_name: AWS region for the client (default chain if None)
            client: Pre-built boto3 S3 client, mainly for tests
        """
        if part_size < MIN_PART_SIZE_BYTES:
            raise ValueError(f'part_size must be at least {MIN_PART_SIZE_BYTES} bytes')
        self.bucket = bucket
        self.part_size = part_size
        self.region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client('s3', region_name=self.region_name)
        return self._client

    async def store(self, key: str, chunks: AsyncIterable[bytes]) -> bool:
        """
        Stream `chunks` to `s3://{bucket}/{key}`.

        Returns:
            True once the backend confirms the object, False on any error
        """
        logger.info('storage.started', bucket=self.bucket, key=key)
        try:
            size = await self._upload(key, chunks)
        except Exception as e:
            error = wrap_storage_error(e, context={'bucket': self.bucket, 'key': key})
            logger.error(
                'storage.failed',
                bucket=self.bucket,
                key=key,
                error=error.message,
                error_type=error.context.get('error_type', type(error).__name__),
            )
            return False

        logger.info('storage.complete', bucket=self.bucket, key=key, size_bytes=size)
        return True

    async def _upload(self, key: str, chunks: AsyncIterable[bytes]) -> int:
        require_config(ARTIFACT_BUCKET_NAME=self.bucket)

        content_type = mimetypes.guess_type(key)[0] or 'application/octet-stream'
        buffer = bytearray()
        upload_id: str | None = None
        parts: list[dict[str, Any]] = []
        size = 0

        try:
            async for chunk in chunks:
                buffer.extend(chunk)
                size += len(chunk)
                while len(buffer) >= self.part_size:
                    if upload_id is None:
                        upload_id = await self._start_multipart(key, content_type)
                    part = bytes(buffer[: self.part_size])
                    del buffer[: self.part_size]
                    parts.append(await self._upload_part(key, upload_id, len(parts) + 1, part))

            if upload_id is None:
                await asyncio.to_thread(
                    self.client.put_object,
                    Bucket=self.bucket,
                    Key=key,
                    Body=bytes(buffer),
                    ContentType=content_type,
                )
                return size

            if buffer:
                parts.append(
                    await self._upload_part(key, upload_id, len(parts) + 1, bytes(buffer))
                )
            await asyncio.to_thread(
                self.client.complete_multipart_upload,
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={'Parts': parts},
            )
            return size
        except Exception:
            if upload_id is not None:
                await self._abort_multipart(key, upload_id)
            raise

    async def _start_multipart(self, key: str, content_type: str) -> str:
        response = await asyncio.to_thread(
            self.client.create_multipart_upload,
            Bucket=self.bucket,
            Key=key,
            ContentType=content_type,
        )
        return response['UploadId']

    async def _upload_part(
        self, key: str, upload_id: str, part_number: int, body: bytes
    ) -> dict[str, Any]:
        response = await asyncio.to_thread(
            self.client.upload_part,
            Bucket=self.bucket,
            Key=key,
            UploadId=upload_id,
            PartNumber=part_number,
            Body=body,
        )
        logger.debug('storage.part_uploaded', key=key, part_number=part_number, size=len(body))
        return {'ETag': response['ETag'], 'PartNumber': part_number}

    async def _abort_multipart(self, key: str, upload_id: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.abort_multipart_upload,
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
            )
        except Exception as e:
            # The original write error is what gets reported.
            logger.warning('storage.abort_failed', key=key, error=str(e))
