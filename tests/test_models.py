"""
Tests for the mail message model
"""
import pytest

from smtpsend.core.models.message import (
    DEFAULT_BODY,
    MailMessage,
    split_recipients,
)
from smtpsend.utils.errors import MissingRequiredFieldError


class TestMailMessage:
    """Tests for MailMessage invariants"""

    def test_defaults(self):
        """Test body defaults and the To header is derived from recipients"""
        message = MailMessage(sender='a@x.com', recipients=['b@x.com', 'c@x.com'])

        assert message.body == DEFAULT_BODY
        assert message.to_header == 'b@x.com,c@x.com'
        assert message.has_attachment is False

    def test_missing_sender(self):
        """Test an empty sender is rejected"""
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            MailMessage(sender='', recipients=['b@x.com'])

        assert exc_info.value.details['field'] == 'sender'

    @pytest.mark.parametrize("recipients", [[], [''], ['', '']])
    def test_missing_recipients(self, recipients):
        """Test a message needs at least one non-empty recipient"""
        with pytest.raises(MissingRequiredFieldError):
            MailMessage(sender='a@x.com', recipients=recipients)

    def test_from_recipient_string(self):
        """Test recipients are split on commas and kept uninterpreted"""
        message = MailMessage.from_recipient_string('a@x.com', 'b@x.com,not-an-address')

        assert message.recipients == ['b@x.com', 'not-an-address']
        assert message.to_header == 'b@x.com,not-an-address'


class TestSplitRecipients:
    """Tests for recipient list splitting"""

    def test_order_preserved(self):
        """Test the input order is kept"""
        assert split_recipients('z@x.com,a@x.com,m@x.com') == ['z@x.com', 'a@x.com', 'm@x.com']

    def test_empty(self):
        """Test an empty string gives no recipients"""
        assert split_recipients('') == []

    def test_single(self):
        """Test a single address"""
        assert split_recipients('a@x.com') == ['a@x.com']
