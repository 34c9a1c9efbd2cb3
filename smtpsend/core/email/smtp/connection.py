"""SMTP connection management - transport setup, TLS context, and cleanup."""

import asyncio
import ssl
import time
from typing import Callable, Optional

import aiosmtplib

from smtpsend.utils.config import SendConfig
from smtpsend.utils.errors import SMTPConnectionError, describe_exception
from smtpsend.utils.logging import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[..., aiosmtplib.SMTP]


def create_relaxed_tls_context() -> ssl.SSLContext:
    """Create the TLS context used for STARTTLS.

    The server name is still sent for SNI, but the certificate chain and
    host name are not verified.
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class SMTPConnection:
    """Owns the transport client for a single SMTP session."""

    def __init__(
        self,
        config: SendConfig,
        client_factory: Optional[ClientFactory] = None,
    ):
        """Initialise the connection.

        Args:
            config: Server settings
            client_factory: Callable building the transport client, for tests
        """
        self.config = config
        self._client_factory = client_factory or aiosmtplib.SMTP
        self._client: Optional[aiosmtplib.SMTP] = None

    @property
    def client(self) -> Optional[aiosmtplib.SMTP]:
        return self._client

    def _create_client(self) -> aiosmtplib.SMTP:
        """Build an unconnected client with STARTTLS left to the session."""
        return self._client_factory(
            hostname=self.config.server,
            port=self.config.port,
            local_hostname=self.config.local_hostname,
            timeout=self.config.timeout,
            use_tls=False,
            start_tls=False,
        )

    async def open(self) -> aiosmtplib.SMTP:
        """Connect to the server and read its greeting.

        Returns:
            Connected aiosmtplib.SMTP client instance

        Raises:
            SMTPConnectionError: If the connection or greeting fails
        """
        start_time = time.time()
        logger.info(
            "Connecting to SMTP server",
            extra={"server": self.config.server, "port": self.config.port},
        )

        client = self._create_client()

        try:
            await client.connect()

        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            logger.error(
                "Failed to connect to SMTP server",
                extra={
                    "server": self.config.server,
                    "port": self.config.port,
                    "error": describe_exception(e),
                },
            )
            self._release(client)
            raise SMTPConnectionError(
                details={
                    "server": self.config.server,
                    "port": self.config.port,
                    "error": describe_exception(e),
                },
            ) from e

        self._client = client
        logger.debug(
            "SMTP connection established",
            extra={
                "server": self.config.server,
                "duration_seconds": round(time.time() - start_time, 2),
            },
        )
        return client

    def close(self) -> None:
        """Release the transport without talking to the server."""
        if self._client is not None:
            self._release(self._client)
            self._client = None

    @staticmethod
    def _release(client: aiosmtplib.SMTP) -> None:
        try:
            if client.is_connected:
                client.close()
        except Exception as e:
            logger.debug(f"Error releasing SMTP transport: {e}")
