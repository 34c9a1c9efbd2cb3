"""MIME message construction.

Builds the raw bytes handed to the SMTP DATA phase. The layout is fixed
and simple on purpose:

- a plain ``text/plain`` message when there is no attachment
- ``multipart/mixed`` with the text part and one base64 attachment otherwise

No header folding or line wrapping is performed, long lines are emitted
as they are.
"""

import base64
import secrets
import string
from typing import Callable, List

from smtpsend.core.models.message import Attachment, MailMessage

from .constants import MIME

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def generate_boundary(length: int = MIME.BOUNDARY_LENGTH) -> str:
    """Generate a random base-36 MIME boundary token."""
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def encoded_length(size: int) -> int:
    """Length of the base64 encoding of ``size`` bytes."""
    return (size + 2) // 3 * 4


def encode_attachment(data: bytes) -> bytes:
    """Base64-encode attachment bytes as one unwrapped line."""
    return base64.b64encode(data)


class MessageBuilder:
    """Assemble a MailMessage into the bytes sent as DATA."""

    def __init__(self, boundary_factory: Callable[[], str] = generate_boundary):
        self._boundary_factory = boundary_factory

    def build(self, message: MailMessage) -> bytes:
        """Build the full message (headers and body) as UTF-8 bytes.

        Args:
            message: Message to build

        Returns:
            Message bytes ready for the DATA phase
        """
        parts: List[bytes] = [self._headers(message)]

        if message.attachment is None:
            parts.append(self._text_part(message.body))
            return b"".join(parts)

        boundary = self._boundary_factory()
        parts.append(
            f'Content-Type: multipart/mixed; boundary="{boundary}"\n'.encode()
        )
        parts.append(f"--{boundary}\n".encode())
        parts.append(self._text_part(message.body))
        parts.append(self._attachment_part(message.attachment, boundary))

        return b"".join(parts)

    def _headers(self, message: MailMessage) -> bytes:
        lines = [
            f"From: {message.sender}\n",
            f"To: {message.to_header}\n",
            f"Subject: {message.subject}\n",
            f"MIME-version: {MIME.VERSION};\n",
        ]
        return "".join(lines).encode("utf-8")

    def _text_part(self, body: str) -> bytes:
        header = f'Content-Type: text/plain; charset="{MIME.CHARSET}";\n\n'
        return (header + body).encode("utf-8")

    def _attachment_part(self, attachment: Attachment, boundary: str) -> bytes:
        encoded = encode_attachment(attachment.content)
        name = attachment.filename

        headers = (
            f"\n\n--{boundary}\n"
            f'Content-Type: application/octet-stream; name="{name}"\n'
            f"Content-Description: {name}\n"
            f'Content-Disposition: attachment; filename="{name}"; size={len(encoded)}\n'
            "Content-Transfer-Encoding: base64\n\n"
        )

        return headers.encode("utf-8") + encoded + f"\n--{boundary}--".encode()


def build_message(message: MailMessage) -> bytes:
    """Build a message with a freshly generated boundary."""
    return MessageBuilder().build(message)
