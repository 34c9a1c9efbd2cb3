"""Email construction and delivery.

- builder: MIME message construction (MessageBuilder)
- smtp: SMTP session protocol driver (SMTPSession)
- services: end-to-end send workflow (EmailSendService)
"""

from .builder import MessageBuilder, build_message
from .smtp import SMTPSession

__all__ = [
    "MessageBuilder",
    "SMTPSession",
    "build_message",
]
