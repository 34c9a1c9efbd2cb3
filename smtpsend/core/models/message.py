"""Mail message domain models"""

from dataclasses import dataclass, field
from typing import List, Optional

from smtpsend.utils.errors import MissingRequiredFieldError

DEFAULT_BODY = "This is a test message"


@dataclass(frozen=True)
class Attachment:
    """A single file to attach, already read into memory."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class MailMessage:
    """An outgoing message and its envelope addresses.

    Recipients are kept exactly as given, in order; no address syntax
    checking is done.
    """

    sender: str
    recipients: List[str]
    subject: str = ""
    body: str = DEFAULT_BODY
    attachment: Optional[Attachment] = None
    to_header: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.sender:
            raise MissingRequiredFieldError(
                "Mail sender required", details={"field": "sender"}
            )

        if not self.recipients or not any(self.recipients):
            raise MissingRequiredFieldError(
                "Mail recipient(s) required", details={"field": "recipients"}
            )

        if self.to_header is None:
            self.to_header = ",".join(self.recipients)

    @classmethod
    def from_recipient_string(
        cls,
        sender: str,
        recipients: str,
        subject: str = "",
        body: str = DEFAULT_BODY,
        attachment: Optional[Attachment] = None,
    ) -> "MailMessage":
        """Create a message from a comma-separated recipient list.

        The ``To:`` header keeps the input unsplit.
        """
        return cls(
            sender=sender,
            recipients=split_recipients(recipients),
            subject=subject,
            body=body,
            attachment=attachment,
            to_header=recipients,
        )

    @property
    def has_attachment(self) -> bool:
        return self.attachment is not None


def split_recipients(value: str) -> List[str]:
    """Split a comma-separated recipient list, preserving order."""
    if not value:
        return []
    return value.split(",")
