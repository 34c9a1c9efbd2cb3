"""
Test helper functions and utilities for reducing duplicate code across test modules
"""
import asyncio
from unittest.mock import MagicMock, create_autospec

import aiosmtplib
from aiosmtplib import SMTPResponse
from aiosmtplib.protocol import SMTPProtocol

from smtpsend.core.email.smtp.connection import SMTPConnection
from smtpsend.core.email.smtp.session import SMTPSession
from smtpsend.core.models.message import Attachment, MailMessage
from smtpsend.utils.config import SendConfig


class SMTPTestHelper:
    """Helper methods for SMTP session testing"""

    @staticmethod
    def create_mock_client(starttls_supported=True):
        """Create a transport client mock, spec'd on aiosmtplib, that accepts every command"""
        client = create_autospec(aiosmtplib.SMTP, instance=True)
        client.is_connected = True
        client.connect.return_value = SMTPResponse(220, "smtp.test.com ESMTP ready")
        client.ehlo.return_value = SMTPResponse(250, "smtp.test.com")
        client.supports_extension.return_value = starttls_supported
        client.starttls.return_value = SMTPResponse(220, "Ready to start TLS")
        client.mail.return_value = SMTPResponse(250, "2.1.0 Ok")
        client.rcpt.return_value = SMTPResponse(250, "2.1.5 Ok")
        client.execute_command.return_value = SMTPResponse(
            354, "End data with <CR><LF>.<CR><LF>"
        )
        client.rset.return_value = SMTPResponse(250, "2.0.0 Ok")
        client.quit.return_value = SMTPResponse(221, "2.0.0 Bye")

        protocol = create_autospec(SMTPProtocol, instance=True)
        protocol._command_lock = asyncio.Lock()
        protocol._response_pending = False
        protocol.read_response.return_value = SMTPResponse(250, "2.0.0 Ok: queued as 12345")
        client.protocol = protocol
        return client

    @staticmethod
    def create_session(client, **config_overrides):
        """Create an SMTPSession whose connection hands out the given client"""
        values = {"server": "smtp.test.com", "port": 25}
        values.update(config_overrides)
        config = SendConfig(**values)
        factory = MagicMock(return_value=client)
        connection = SMTPConnection(config, client_factory=factory)
        return SMTPSession(config, connection=connection)

    @staticmethod
    def command_names(client):
        """Names of the client methods called, in call order"""
        return [name for name, _args, _kwargs in client.mock_calls]

    @staticmethod
    def rollback_calls(client):
        """RSET/QUIT calls in the order they were made"""
        return [
            name for name in SMTPTestHelper.command_names(client)
            if name in ("rset", "quit")
        ]


class MessageTestHelper:
    """Helper methods for building test messages"""

    @staticmethod
    def create_message(**kwargs):
        """Create a MailMessage with default values"""
        defaults = {
            'sender': 'sender@example.com',
            'recipients': ['recipient@example.com'],
            'subject': 'Test Subject',
            'body': 'Test body',
        }
        defaults.update(kwargs)
        return MailMessage(**defaults)

    @staticmethod
    def create_attachment(filename='report.bin', content=b'\x00\x01\x02binary\xff'):
        """Create an in-memory attachment"""
        return Attachment(filename=filename, content=content)
