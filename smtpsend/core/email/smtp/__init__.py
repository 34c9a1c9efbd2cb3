"""SMTP protocol implementation.

Low-level SMTP components used by the send service:
- SMTPConnection: transport client lifecycle and TLS context
- SMTPSession: the command sequence for one message, with rollback

Direct Usage
------------
    >>> from smtpsend.core.email.smtp import SMTPSession
    >>> from smtpsend.utils.config import SendConfig
    >>>
    >>> config = SendConfig(server="mail.example.com", use_tls=True)
    >>> await SMTPSession(config).send(
    ...     "sender@example.com", ["recipient@example.com"], payload
    ... )

Most callers should use EmailSendService instead, which also builds the
message and reports the outcome as SendStats.
"""

from .connection import SMTPConnection, create_relaxed_tls_context
from .constants import SessionState
from .session import SMTPSession

__all__ = [
    "SMTPConnection",
    "SMTPSession",
    "SessionState",
    "create_relaxed_tls_context",
]
