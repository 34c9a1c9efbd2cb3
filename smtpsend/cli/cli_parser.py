"""Argument parser configuration for the smtpsend CLI"""

import argparse
from datetime import datetime

from smtpsend import __version__
from smtpsend.core.models.message import DEFAULT_BODY


def default_subject() -> str:
    """Subject used when none is given."""
    return f"smtpsend test - {datetime.now()}"


## Argument Adding Utilities

def add_message_arguments(parser: argparse.ArgumentParser) -> None:
    """Add sender, recipients, and content arguments to the parser."""

    message_group = parser.add_argument_group("message", "Message content and addresses")

    message_group.add_argument(
        "--from",
        dest="sender",
        default="",
        help="Set the mail sender"
    )
    message_group.add_argument(
        "--to",
        dest="recipients",
        default="",
        help="Set the mail recipient(s). Separate multiple entries with commas"
    )
    message_group.add_argument(
        "--subject",
        default=None,
        help="Set the mail subject (default: 'smtpsend test - <current time>')"
    )
    message_group.add_argument(
        "--body",
        default=DEFAULT_BODY,
        help=f"Set the body of the message (default: '{DEFAULT_BODY}')"
    )
    message_group.add_argument(
        "--attachment",
        default=None,
        help="Include the attachment with the message"
    )

def add_server_arguments(parser: argparse.ArgumentParser) -> None:
    """Add SMTP server arguments to the parser.

    Defaults are None so values from the config file are only overridden
    when an option is actually given.
    """

    server_group = parser.add_argument_group("server", "SMTP server settings")

    server_group.add_argument(
        "--server",
        default=None,
        help="Set the SMTP server"
    )
    server_group.add_argument(
        "--port",
        type=int,
        default=None,
        help="Set the SMTP server port (default: 25)"
    )
    server_group.add_argument(
        "--tls",
        dest="use_tls",
        action="store_true",
        default=None,
        help="If given, will try and send the message with STARTTLS"
    )
    server_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each server reply (default: 60)"
    )


## Main Parser

def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup the main argument parser for the smtpsend CLI."""

    parser = argparse.ArgumentParser(
        prog="smtpsend",
        description="Send a single email over SMTP, optionally with STARTTLS and one attachment",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"smtpsend {__version__}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON configuration file (default: ~/.smtpsend/config.json)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Console log level (default: WARNING)"
    )

    add_message_arguments(parser)
    add_server_arguments(parser)

    return parser
