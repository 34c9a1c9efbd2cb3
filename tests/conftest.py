"""
Shared test fixtures and configuration for pytest
"""
import pytest

from smtpsend.utils.config import SendConfig

from .test_helpers import MessageTestHelper, SMTPTestHelper


@pytest.fixture
def send_config():
    """Plain SMTP settings for a test server"""
    return SendConfig(server='smtp.test.com', port=25)


@pytest.fixture
def mock_client():
    """Mock transport client advertising STARTTLS and accepting everything"""
    return SMTPTestHelper.create_mock_client()


@pytest.fixture
def session(mock_client):
    """SMTPSession wired to the mock client"""
    return SMTPTestHelper.create_session(mock_client)


@pytest.fixture
def test_message():
    """Sample message without attachment"""
    return MessageTestHelper.create_message()


@pytest.fixture
def attachment_file(tmp_path):
    """Attachment file on disk with binary content"""
    path = tmp_path / 'data.bin'
    path.write_bytes(bytes(range(256)) * 3 + b'tail')
    return path
