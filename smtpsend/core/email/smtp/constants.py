"""SMTP constants and configuration values."""

from enum import Enum


class SMTPResponse:
    """Standard SMTP response codes used by the session."""

    # 2xx Success
    OK = 250  # Requested mail action okay, completed
    USER_NOT_LOCAL = 251  # User not local; will forward

    # 3xx Intermediate
    START_MAIL = 354  # Start mail input; end with <CRLF>.<CRLF>

    @classmethod
    def is_accepted(cls, code: int) -> bool:
        """Check if a MAIL/RCPT/end-of-data reply code means success.

        Args:
            code: SMTP response code

        Returns:
            True for 250 and 251
        """
        return code in (cls.OK, cls.USER_NOT_LOCAL)


class SMTPExtension:
    """ESMTP extension keywords as advertised in the EHLO reply."""

    STARTTLS = "starttls"


class SessionState(str, Enum):
    """States an SMTPSession moves through, in order."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    TLS_NEGOTIATED = "tls_negotiated"
    ENVELOPE_SET = "envelope_set"
    RECIPIENTS_ACCEPTED = "recipients_accepted"
    DATA_OPEN = "data_open"
    CLOSED = "closed"
    ABORTED = "aborted"
