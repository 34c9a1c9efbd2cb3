"""
Tests for the email send service

Tests cover:
- Message composition and attachment loading
- Successful delivery statistics
- Failures reported through SendStats
- No network activity when the attachment cannot be read
"""
from unittest.mock import AsyncMock, MagicMock

import aiosmtplib
import pytest

from smtpsend.core.email.builder import MessageBuilder
from smtpsend.core.email.services.send import EmailSendService, SendStats
from smtpsend.core.email.smtp.session import SMTPSession, encode_data
from smtpsend.utils.errors import AttachmentReadError, EnvelopeError

from .test_helpers import MessageTestHelper, SMTPTestHelper


def _service_with_client(config, client):
    """Build a service whose sessions use the given mock client"""
    def factory(cfg):
        return SMTPTestHelper.create_session(client, **cfg.model_dump())

    return EmailSendService(config, session_factory=factory)


class TestCompose:
    """Tests for building MailMessage values"""

    def test_compose_without_attachment(self, send_config):
        """Test composing a plain message"""
        service = EmailSendService(send_config)
        message = service.compose('a@x.com', 'b@x.com,c@x.com', 'Subject', 'Body')

        assert message.recipients == ['b@x.com', 'c@x.com']
        assert message.attachment is None

    def test_compose_reads_attachment(self, send_config, attachment_file):
        """Test the attachment file is loaded during composition"""
        service = EmailSendService(send_config)
        message = service.compose('a@x.com', 'b@x.com', attachment_path=str(attachment_file))

        assert message.attachment.filename == 'data.bin'

    def test_missing_attachment_before_any_connection(self, send_config, tmp_path):
        """Test an unreadable attachment fails before a session is created"""
        session_factory = MagicMock()
        service = EmailSendService(send_config, session_factory=session_factory)

        with pytest.raises(AttachmentReadError):
            service.compose('a@x.com', 'b@x.com', attachment_path=str(tmp_path / 'missing.zip'))

        session_factory.assert_not_called()


class TestSendEmail:
    """Tests for the send workflow"""

    @pytest.mark.asyncio
    async def test_successful_send(self, send_config, mock_client, test_message):
        """Test a delivered message is reported as success"""
        service = _service_with_client(send_config, mock_client)

        stats = await service.send_email(test_message)

        assert isinstance(stats, SendStats)
        assert stats.success is True
        assert stats.error is None
        assert stats.error_message is None
        assert stats.recipients_accepted == ['recipient@example.com']
        assert stats.message_size == len(MessageBuilder().build(test_message))

    @pytest.mark.asyncio
    async def test_payload_is_built_message(self, send_config, mock_client):
        """Test the DATA payload is the builder output"""
        builder = MessageBuilder(boundary_factory=lambda: 'fixedboundary')
        message = MessageTestHelper.create_message(
            attachment=MessageTestHelper.create_attachment()
        )
        service = EmailSendService(
            send_config,
            builder=builder,
            session_factory=lambda cfg: SMTPTestHelper.create_session(mock_client),
        )

        await service.send_email(message)

        sent = mock_client.protocol.write.call_args.args[0]
        assert sent == encode_data(builder.build(message))

    @pytest.mark.asyncio
    async def test_tls_flag_reported(self, mock_client, test_message):
        """Test a negotiated STARTTLS is reflected in the stats"""
        from smtpsend.utils.config import SendConfig

        config = SendConfig(server='smtp.test.com', use_tls=True)
        service = _service_with_client(config, mock_client)

        stats = await service.send_email(test_message)

        assert stats.tls_negotiated is True
        mock_client.starttls.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_returned_not_raised(self, send_config, mock_client):
        """Test a rejected recipient ends up in SendStats"""
        mock_client.rcpt.side_effect = aiosmtplib.SMTPRecipientRefused(550, 'unknown', 'b@x.com')
        message = MessageTestHelper.create_message(recipients=['b@x.com'])
        service = _service_with_client(send_config, mock_client)

        stats = await service.send_email(message)

        assert stats.success is False
        assert isinstance(stats.error, EnvelopeError)
        assert stats.error_message.startswith('Failed to set a recipient')
        assert stats.recipients_accepted == []

    @pytest.mark.asyncio
    async def test_one_session_per_send(self, send_config, test_message):
        """Test each send creates a fresh session and never retries"""
        session = MagicMock(spec=SMTPSession)
        session.send = AsyncMock(side_effect=EnvelopeError('sender', 'a@x.com'))
        session.tls_negotiated = False
        session_factory = MagicMock(return_value=session)
        service = EmailSendService(send_config, session_factory=session_factory)

        stats = await service.send_email(test_message)

        assert stats.success is False
        session_factory.assert_called_once_with(send_config)
        session.send.assert_awaited_once()
