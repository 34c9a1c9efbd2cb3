"""Email send service - builds a message and delivers it in one SMTP session."""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from smtpsend.core.attachments import load_attachment
from smtpsend.core.email.builder import MessageBuilder
from smtpsend.core.email.smtp.session import SMTPSession
from smtpsend.core.models.message import DEFAULT_BODY, MailMessage
from smtpsend.utils.config import SendConfig
from smtpsend.utils.errors import SmtpSendError, format_error_message
from smtpsend.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[SendConfig], SMTPSession]


@dataclass
class SendStats:
    """Outcome of a single send attempt."""

    success: bool = False
    message_size: int = 0
    tls_negotiated: bool = False
    recipients_accepted: List[str] = field(default_factory=list)
    duration: float = 0.0
    error: Optional[SmtpSendError] = None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return format_error_message(self.error)


class EmailSendService:
    """Sends one message per call, with no retries."""

    def __init__(
        self,
        config: SendConfig,
        builder: Optional[MessageBuilder] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        """Initialise email send service.

        Args:
            config: SMTP server settings
            builder: MessageBuilder used to produce the DATA payload
            session_factory: Creates the SMTPSession for each send
        """
        self.config = config
        self._builder = builder or MessageBuilder()
        self._session_factory = session_factory or SMTPSession

    def compose(
        self,
        sender: str,
        recipients: str,
        subject: str = "",
        body: str = DEFAULT_BODY,
        attachment_path: Optional[str] = None,
    ) -> MailMessage:
        """Create a MailMessage, reading the attachment if one is given.

        Raises:
            MissingRequiredFieldError: If sender or recipients are empty
            AttachmentReadError: If the attachment cannot be read
        """
        attachment = load_attachment(attachment_path) if attachment_path else None

        return MailMessage.from_recipient_string(
            sender=sender,
            recipients=recipients,
            subject=subject,
            body=body,
            attachment=attachment,
        )

    @async_log_call
    async def send_email(self, message: MailMessage) -> SendStats:
        """Build and send a message.

        Protocol failures are returned in ``SendStats.error`` rather than
        raised.

        Args:
            message: Message to send

        Returns:
            SendStats describing the attempt
        """
        stats = SendStats()
        start_time = time.time()

        payload = self._builder.build(message)
        stats.message_size = len(payload)

        logger.info(
            "Sending email",
            extra={
                "server": self.config.address,
                "recipients": len(message.recipients),
                "subject": message.subject[:50],
                "has_attachment": message.has_attachment,
            },
        )

        session = self._session_factory(self.config)

        try:
            await session.send(message.sender, message.recipients, payload)
            stats.success = True
            stats.recipients_accepted = session.accepted_recipients

        except SmtpSendError as e:
            stats.error = e

        stats.duration = time.time() - start_time
        stats.tls_negotiated = session.tls_negotiated

        if stats.success:
            logger.info(
                "Message Sent",
                extra={
                    "duration_seconds": round(stats.duration, 2),
                    "size_bytes": stats.message_size,
                    "tls": stats.tls_negotiated,
                },
            )
        else:
            logger.error(
                "Failed to send email",
                extra={
                    "duration_seconds": round(stats.duration, 2),
                    "error": stats.error_message,
                },
            )

        return stats
