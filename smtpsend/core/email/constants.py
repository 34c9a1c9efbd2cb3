"""Shared constants for message construction.

Centralised values for the MIME layout produced by MessageBuilder.
"""


class MIME:
    """MIME header values."""

    VERSION = "1.0"
    CHARSET = "UTF-8"
    BOUNDARY_LENGTH = 24  # base-36 characters, ~124 bits of randomness
