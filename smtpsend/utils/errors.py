"""Centralized error handling module."""

from enum import Enum
from typing import Any, Dict, Optional


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    NETWORK = "network"
    VALIDATION = "validation"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


## Custom Exceptions


class SmtpSendError(Exception):
    """Base exception for all smtpsend errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise SmtpSendError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


## Network Errors


class NetworkError(SmtpSendError):
    """Base exception for network-related errors."""

    category = ErrorCategory.NETWORK
    user_message = "A network error occurred"


class SMTPError(NetworkError):
    """Exception for SMTP protocol errors."""

    user_message = "Failed to send email"


class SMTPConnectionError(SMTPError):
    """Exception when the SMTP connection cannot be opened."""

    user_message = "Error creating SMTP connection"


class TLSNegotiationError(SMTPError):
    """Exception when STARTTLS is advertised but the upgrade fails."""

    user_message = "Failed to establish TLS session"


class EnvelopeError(SMTPError):
    """Exception when the server rejects a MAIL FROM or RCPT TO address."""

    SENDER = "sender"
    RECIPIENT = "recipient"

    user_message = "The server rejected an envelope address"

    def __init__(
        self,
        role: str,
        address: str,
        message: str | None = None,
        details: Dict[str, Any] | None = None,
    ):
        self.role = role
        self.address = address
        details = dict(details or {})
        details.setdefault("role", role)
        details.setdefault("address", address)
        super().__init__(message, details)


class DataError(SMTPError):
    """Exception when the server refuses the DATA command."""

    user_message = "Failed to issue DATA command"


class TransferError(SMTPError):
    """Exception when writing or terminating the message data fails."""

    user_message = "Failed to write DATA"


## Validation Errors


class ValidationError(SmtpSendError):
    """Base exception for validation-related errors."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid input"


class MissingRequiredFieldError(ValidationError):
    """Exception for missing required fields."""

    user_message = "A required field is missing"


## File System Errors


class FileSystemError(SmtpSendError):
    """Base exception for file system-related errors."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"


class AttachmentReadError(FileSystemError):
    """Exception when the attachment file cannot be read."""

    user_message = "Problem reading the given attachment"


## Configuration Errors


class ConfigurationError(SmtpSendError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Internal Errors


class SessionStateError(SmtpSendError):
    """Exception when an SMTP session step is called out of order."""

    category = ErrorCategory.INTERNAL
    user_message = "SMTP session step called in the wrong state"


## Utility Functions


def format_error_message(error: Exception) -> str:
    """Format an error message for display."""
    if isinstance(error, SmtpSendError):
        cause = error.details.get("error")
        if cause and cause not in error.message:
            return f"{error.message}: {cause}"
        return error.message
    else:
        return f"An unexpected error occurred: {error}"


def describe_exception(error: Optional[BaseException]) -> str:
    """Render an underlying transport/protocol exception as text."""
    if error is None:
        return ""
    text = str(error).strip()
    return text or error.__class__.__name__
