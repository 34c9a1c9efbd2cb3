"""Main CLI entry point."""

import asyncio
import sys
from typing import List, Optional

from rich.console import Console

from smtpsend.utils.config import ConfigManager, SendConfig
from smtpsend.utils.errors import (
    InvalidConfigError,
    MissingRequiredFieldError,
    SmtpSendError,
    format_error_message,
)
from smtpsend.utils.logging import async_log_call, get_logger, init_logging

from .cli_parser import setup_argument_parser
from .commands.send import handle_send

logger = get_logger(__name__)


def validate_required(args, config: SendConfig) -> None:
    """Check the options a send cannot do without.

    Raises:
        MissingRequiredFieldError: For the first missing option
    """
    if not config.server:
        raise MissingRequiredFieldError("SMTP server required", details={"field": "server"})

    if not args.sender:
        raise MissingRequiredFieldError("Mail sender required", details={"field": "sender"})

    if not args.recipients:
        raise MissingRequiredFieldError(
            "Mail recipient(s) required", details={"field": "recipients"}
        )


def load_settings(args) -> SendConfig:
    """Load the config file, set up logging, and apply CLI overrides."""
    manager = ConfigManager(args.config)
    log_config = manager.config.logging

    try:
        init_logging(
            args.log_level or log_config.log_level,
            log_to_file=log_config.log_to_file,
            max_file_size=log_config.max_file_size,
            backup_count=log_config.backup_count,
        )
    except ValueError as e:
        raise InvalidConfigError(str(e)) from e

    return manager.with_overrides(
        server=args.server,
        port=args.port,
        use_tls=args.use_tls,
        timeout=args.timeout,
    )


@async_log_call
async def dispatch_command(args, config: SendConfig, console: Console) -> int:
    """Run the send command.

    Args:
        args: Parsed arguments
        config: SMTP settings
        console: Rich console

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        success = await handle_send(args, config, console)
        return 0 if success else 1

    except Exception as e:
        logger.exception(f"Command failed: {e}")
        console.print(f"Unexpected error: {e}", style="red", markup=False)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    console = Console()

    try:
        parser = setup_argument_parser()
        args = parser.parse_args(argv)

        try:
            config = load_settings(args)
            validate_required(args, config)

        except SmtpSendError as e:
            logger.debug(f"Configuration error: {e.message}")
            console.print(format_error_message(e), style="red", markup=False)
            return 1

        return asyncio.run(dispatch_command(args, config, console))

    except KeyboardInterrupt:
        console.print("\nInterrupted by user", style="yellow")
        return 130  # Standard SIGINT exit code


if __name__ == "__main__":
    sys.exit(main())
