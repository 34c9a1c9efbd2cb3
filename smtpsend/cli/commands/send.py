"""Send command - compose the message and deliver it"""

from typing import Optional

from rich.console import Console

from smtpsend.core.email.services.send import EmailSendService
from smtpsend.utils.config import SendConfig
from smtpsend.utils.console import print_error, print_success
from smtpsend.utils.errors import SmtpSendError, format_error_message
from smtpsend.utils.logging import async_log_call, get_logger

from ..cli_parser import default_subject

logger = get_logger(__name__)


@async_log_call
async def handle_send(
    args,
    config: SendConfig,
    console: Optional[Console] = None,
    service: Optional[EmailSendService] = None,
) -> bool:
    """Compose and send one message from parsed CLI arguments.

    The attachment is read before any connection is opened.

    Returns:
        True if the server accepted the message
    """
    service = service or EmailSendService(config)
    subject = args.subject if args.subject is not None else default_subject()

    try:
        message = service.compose(
            sender=args.sender,
            recipients=args.recipients,
            subject=subject,
            body=args.body,
            attachment_path=args.attachment,
        )

    except SmtpSendError as e:
        logger.error(f"Cannot compose message: {e.message}")
        await print_error(format_error_message(e), console)
        return False

    stats = await service.send_email(message)

    if stats.success:
        await print_success("Message Sent", console)
        return True

    await print_error(stats.error_message or "Failed to send email", console)
    return False
