"""Domain models"""

from .message import Attachment, MailMessage, split_recipients

__all__ = ["Attachment", "MailMessage", "split_recipients"]
