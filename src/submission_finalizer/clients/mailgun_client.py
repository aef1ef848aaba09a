"""
Mailgun client for submission outcome emails.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from ..config import require_config
from ..errors import ConfigurationError, wrap_notification_error
from ..models.outcome import NotificationKind, NotificationOutcome, NotificationResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    text: str


TEMPLATES: dict[NotificationKind, EmailTemplate] = {
    NotificationKind.SUCCESS: EmailTemplate(
        subject='Assignment submission accepted',
        text='Your submission was successfully received and verified. Thank you.',
    ),
    NotificationKind.FAIL: EmailTemplate(
        subject='Assignment submission failed',
        text='Your submission could not be downloaded. Please verify the URL and resubmit.',
    ),
}


class MailgunNotifier:
    """
    Sends fixed-template outcome emails through the Mailgun messages API.

    `notify()` never raises; the returned NotificationResult says whether the
    backend accepted the message, rejected it, or was never called because of
    missing or malformed configuration.
    """

    def __init__(
        self,
        api_key: str,
        domain: str,
        sender: str,
        base_url: str = 'https://api.mailgun.net/v3',
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.domain = domain
        self.sender = sender
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def notify(self, recipient: str, kind: NotificationKind) -> NotificationResult:
        """
        Send the `kind` template to `recipient`.

        Args:
            recipient: Submitter email address
            kind: SUCCESS or FAIL template

        Returns:
            NotificationResult with the backend outcome
        """
        try:
            require_config(EMAIL_API_KEY=self.api_key, EMAIL_DOMAIN=self.domain)
        except ConfigurationError as e:
            logger.error('email.config_missing', recipient=recipient, error=e.message)
            return NotificationResult(
                recipient=recipient,
                kind=kind,
                outcome=NotificationOutcome.CONFIG_ERROR,
                error=e.message,
            )

        template = TEMPLATES[kind]
        data = {
            'from': self.sender,
            'to': recipient,
            'subject': template.subject,
            'text': template.text,
        }

        try:
            url = httpx.URL(f"{self.base_url.rstrip('/')}/{self.domain}/messages")
        except httpx.InvalidURL as e:
            error = ConfigurationError(
                'Invalid email endpoint configuration',
                context={'original_error': str(e), 'domain': self.domain},
            )
            logger.error(
                'email.config_invalid',
                recipient=recipient,
                error=error.message,
                **error.context,
            )
            return NotificationResult(
                recipient=recipient,
                kind=kind,
                outcome=NotificationOutcome.CONFIG_ERROR,
                error=error.message,
            )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(url, data=data, auth=('api', self.api_key))
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = wrap_notification_error(e, context={'kind': kind.value})
            logger.error(
                'email.failed',
                recipient=recipient,
                kind=kind.value,
                error=error.message,
            )
            return NotificationResult(
                recipient=recipient,
                kind=kind,
                outcome=NotificationOutcome.BACKEND_ERROR,
                error=error.message,
            )

        logger.info('email.sent', recipient=recipient, kind=kind.value)
        return NotificationResult(
            recipient=recipient,
            kind=kind,
            outcome=NotificationOutcome.SENT,
        )
