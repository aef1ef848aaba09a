"""Tests for the Mailgun notifier."""

import base64
from urllib.parse import parse_qs

import httpx
import pytest

from submission_finalizer.clients.mailgun_client import TEMPLATES, MailgunNotifier
from submission_finalizer.models import NotificationKind, NotificationOutcome


def _notifier(handler, api_key='key-123', domain='mg.example.edu') -> MailgunNotifier:
    return MailgunNotifier(
        api_key=api_key,
        domain=domain,
        sender='Submission notifications <notifications@mg.example.edu>',
        transport=httpx.MockTransport(handler),
    )


class TestTemplates:
    def test_success_template(self):
        template = TEMPLATES[NotificationKind.SUCCESS]
        assert template.subject == 'Assignment submission accepted'
        assert template.text == (
            'Your submission was successfully received and verified. Thank you.'
        )

    def test_fail_template(self):
        template = TEMPLATES[NotificationKind.FAIL]
        assert template.subject == 'Assignment submission failed'
        assert template.text == (
            'Your submission could not be downloaded. Please verify the URL and resubmit.'
        )


class TestNotify:
    @pytest.mark.asyncio
    async def test_posts_message_to_domain(self):
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={'id': '<msg@mg>', 'message': 'Queued'})

        result = await _notifier(handler).notify('u@e.com', NotificationKind.SUCCESS)

        assert result.outcome is NotificationOutcome.SENT
        assert result.sent is True
        assert len(captured) == 1

        request = captured[0]
        assert str(request.url) == 'https://api.mailgun.net/v3/mg.example.edu/messages'
        expected_auth = base64.b64encode(b'api:key-123').decode()
        assert request.headers['Authorization'] == f'Basic {expected_auth}'

        form = parse_qs(request.content.decode())
        assert form['to'] == ['u@e.com']
        assert form['subject'] == ['Assignment submission accepted']
        assert form['from'] == ['Submission notifications <notifications@mg.example.edu>']

    @pytest.mark.asyncio
    async def test_fail_kind_uses_fail_template(self):
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200)

        result = await _notifier(handler).notify('u@e.com', NotificationKind.FAIL)

        assert result.kind is NotificationKind.FAIL
        form = parse_qs(captured[0].content.decode())
        assert form['subject'] == ['Assignment submission failed']

    @pytest.mark.asyncio
    async def test_backend_rejection_does_not_raise(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text='Forbidden')

        result = await _notifier(handler).notify('u@e.com', NotificationKind.SUCCESS)

        assert result.outcome is NotificationOutcome.BACKEND_ERROR
        assert result.error is not None

    @pytest.mark.asyncio
    async def test_network_error_does_not_raise(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('unreachable', request=request)

        result = await _notifier(handler).notify('u@e.com', NotificationKind.FAIL)

        assert result.outcome is NotificationOutcome.BACKEND_ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize('api_key, domain', [('', 'mg.example.edu'), ('key', '')])
    async def test_missing_config_skips_backend(self, api_key, domain):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        result = await _notifier(handler, api_key=api_key, domain=domain).notify(
            'u@e.com', NotificationKind.SUCCESS
        )

        assert result.outcome is NotificationOutcome.CONFIG_ERROR
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize('kind', [NotificationKind.SUCCESS, NotificationKind.FAIL])
    async def test_malformed_domain_is_config_error(self, kind):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        result = await _notifier(handler, domain='mg.example.edu\n').notify('u@e.com', kind)

        assert result.outcome is NotificationOutcome.CONFIG_ERROR
        assert result.kind is kind
        assert result.error is not None
        assert calls == []

    @pytest.mark.asyncio
    async def test_malformed_base_url_does_not_raise(self):
        notifier = MailgunNotifier(
            api_key='key-123',
            domain='mg.example.edu',
            sender='Submission notifications <notifications@mg.example.edu>',
            base_url='https://[bad',
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )

        result = await notifier.notify('u@e.com', NotificationKind.FAIL)

        assert result.sent is False
        assert result.outcome in (
            NotificationOutcome.CONFIG_ERROR,
            NotificationOutcome.BACKEND_ERROR,
        )
