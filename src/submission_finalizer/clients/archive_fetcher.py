"""
Streaming HTTP fetcher for submission archives.

The body is never buffered here: callers receive the open response and
consume it chunk by chunk while the fetch context is active.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog

from ..errors import FetchError

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class FetchedArchive:
    """A successfully opened archive download."""

    response: httpx.Response
    status_code: int
    source_url: str

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Async iterator over the raw response body."""
        return self.response.aiter_bytes(chunk_size)


class ArchiveFetcher:
    """
    Opens submission URLs as streaming downloads.

    Any transport error, invalid URL or non-2xx status is reported as a
    failed fetch (None); error subtypes are only logged.
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout_seconds: Connect/read timeout for the download
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @asynccontextmanager
    async def fetch(self, url: str) -> AsyncIterator[FetchedArchive | None]:
        """
        Open `url` for streaming.

        Usage:
            async with fetcher.fetch(url) as archive:
                if archive is None:
                    ...  # fetch failed
                else:
                    async for chunk in archive.iter_chunks():
                        ...

        Yields:
            FetchedArchive on a 2xx response, otherwise None
        """
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await self._open(client, url)
            if response is None:
                yield None
                return

            try:
                archive = FetchedArchive(
                    response=response,
                    status_code=response.status_code,
                    source_url=str(response.url),
                )
                logger.info(
                    'fetch.complete',
                    status=archive.status_code,
                    url=archive.source_url,
                )
                yield archive
            finally:
                await response.aclose()

    async def _open(self, client: httpx.AsyncClient, url: str) -> httpx.Response | None:
        try:
            request = client.build_request('GET', url)
            response = await client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._log_failure(
                FetchError(
                    f"Download failed: {e}",
                    context={'url': url, 'error_type': type(e).__name__},
                )
            )
            return None

        if not response.is_success:
            await response.aclose()
            self._log_failure(
                FetchError(
                    f"Download returned HTTP {response.status_code}",
                    context={'url': url, 'status': response.status_code},
                )
            )
            return None

        return response

    @staticmethod
    def _log_failure(error: FetchError) -> None:
        logger.error('fetch.failed', error=error.message, **error.context)
