"""Email services - end-to-end workflows built on the SMTP layer."""

from .send import EmailSendService, SendStats

__all__ = ["EmailSendService", "SendStats"]
