"""Attachment loading for outgoing messages."""

import os
from pathlib import Path
from typing import Union

from smtpsend.core.models.message import Attachment
from smtpsend.utils.errors import AttachmentReadError
from smtpsend.utils.logging import get_logger, log_call

logger = get_logger(__name__)


@log_call
def load_attachment(path: Union[str, os.PathLike]) -> Attachment:
    """Read an attachment file fully into memory.

    Args:
        path: Path of the file to attach

    Returns:
        Attachment named after the file's base name

    Raises:
        AttachmentReadError: If the file cannot be read
    """
    file_path = Path(path)

    try:
        content = file_path.read_bytes()

    except OSError as e:
        logger.error(f"Problem reading the given attachment: {e}")
        raise AttachmentReadError(
            details={"path": str(file_path), "error": str(e)}
        ) from e

    logger.debug(
        "Attachment loaded",
        extra={"attachment": file_path.name, "size_bytes": len(content)},
    )
    return Attachment(filename=file_path.name, content=content)
