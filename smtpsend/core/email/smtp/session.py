"""SMTP session - drives one message through the SMTP command sequence.

Steps, in order::

    connect -> [start_tls] -> set_sender -> add_recipients -> open_data
            -> transfer -> quit

Each step checks the session state before touching the network. When a
step after ``connect`` fails, the session issues RSET and then QUIT
(errors from those two are swallowed), releases the transport, moves to
``ABORTED`` and raises the typed error for that step. Nothing is retried.
"""

import asyncio
import re
from typing import Callable, Iterable, List, Optional

import aiosmtplib

from smtpsend.utils.config import SendConfig
from smtpsend.utils.errors import (
    DataError,
    EnvelopeError,
    MissingRequiredFieldError,
    SessionStateError,
    SMTPError,
    TLSNegotiationError,
    TransferError,
    describe_exception,
)
from smtpsend.utils.logging import async_log_call, get_logger

from .connection import SMTPConnection, create_relaxed_tls_context
from .constants import SessionState, SMTPExtension, SMTPResponse

logger = get_logger(__name__)

# Failures raised by the transport while a command is in flight
TRANSPORT_ERRORS = (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError)

LINE_ENDINGS = re.compile(rb"\r\n|\n|\r(?!\n)")
LEADING_PERIOD = re.compile(rb"(?m)^\.")
DATA_TERMINATOR = b".\r\n"


def encode_data(payload: bytes) -> bytes:
    """Prepare a message for the DATA phase: CRLF lines, dot-stuffed, terminated."""
    data = LINE_ENDINGS.sub(b"\r\n", payload)
    if not data.endswith(b"\r\n"):
        data += b"\r\n"
    return LEADING_PERIOD.sub(b"..", data) + DATA_TERMINATOR


class SMTPSession:
    """One SMTP transaction for a single message."""

    def __init__(
        self,
        config: SendConfig,
        connection: Optional[SMTPConnection] = None,
        tls_context_factory: Callable = create_relaxed_tls_context,
    ):
        """Initialise the session.

        Args:
            config: Server settings
            connection: Transport owner, created from config when omitted
            tls_context_factory: Builds the SSLContext used by STARTTLS
        """
        self.config = config
        self._connection = connection or SMTPConnection(config)
        self._tls_context_factory = tls_context_factory
        self._state = SessionState.DISCONNECTED
        self._tls_negotiated = False
        self._accepted: List[str] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def tls_negotiated(self) -> bool:
        return self._tls_negotiated

    @property
    def accepted_recipients(self) -> List[str]:
        return list(self._accepted)

    @property
    def _client(self) -> aiosmtplib.SMTP:
        client = self._connection.client
        if client is None:
            raise SessionStateError(details={"state": self._state.value})
        return client

    def _require_state(self, *states: SessionState) -> None:
        if self._state not in states:
            raise SessionStateError(
                f"SMTP session is {self._state.value}, expected "
                + " or ".join(s.value for s in states),
                details={"state": self._state.value},
            )

    ## Protocol Steps

    @async_log_call
    async def connect(self) -> None:
        """Open the connection and read the server greeting.

        Raises:
            SMTPConnectionError: If the server cannot be reached
        """
        self._require_state(SessionState.DISCONNECTED)

        try:
            await self._connection.open()
        except SMTPError:
            self._state = SessionState.ABORTED
            raise

        self._state = SessionState.CONNECTED

    @async_log_call
    async def start_tls(self) -> bool:
        """Upgrade the connection with STARTTLS if the server offers it.

        Returns:
            True if the channel is now encrypted, False if the server does
            not advertise STARTTLS and the session stays in plaintext

        Raises:
            TLSNegotiationError: If STARTTLS is advertised but the upgrade fails
        """
        self._require_state(SessionState.CONNECTED)
        client = self._client

        try:
            await client.ehlo()
        except TRANSPORT_ERRORS as e:
            logger.debug(f"EHLO failed while checking for STARTTLS: {e}")

        if not client.supports_extension(SMTPExtension.STARTTLS):
            logger.warning(
                "Server doesn't support TLS.. Sending over an unencrypted channel",
                extra={"server": self.config.server},
            )
            return False

        try:
            await client.starttls(
                server_hostname=self.config.server,
                tls_context=self._tls_context_factory(),
            )

        except TRANSPORT_ERRORS as e:
            await self._abort(
                TLSNegotiationError(
                    details={
                        "server": self.config.server,
                        "error": describe_exception(e),
                    },
                ),
                e,
            )

        self._tls_negotiated = True
        self._state = SessionState.TLS_NEGOTIATED
        logger.info("TLS negotiated, sending over an encrypted channel")
        return True

    @async_log_call
    async def set_sender(self, sender: str) -> None:
        """Issue MAIL FROM for the envelope sender.

        Raises:
            EnvelopeError: If the server rejects the sender
        """
        self._require_state(SessionState.CONNECTED, SessionState.TLS_NEGOTIATED)

        try:
            await self._client.mail(sender)

        except TRANSPORT_ERRORS as e:
            await self._abort(
                EnvelopeError(
                    EnvelopeError.SENDER,
                    sender,
                    message="Failed to set the From address",
                    details={"error": describe_exception(e)},
                ),
                e,
            )

        self._state = SessionState.ENVELOPE_SET
        logger.debug("Envelope sender accepted", extra={"sender": sender})

    @async_log_call
    async def add_recipients(self, recipients: Iterable[str]) -> None:
        """Issue RCPT TO for each recipient, in order.

        Stops at the first rejected recipient; addresses accepted before it
        are not reported separately.

        Raises:
            EnvelopeError: If the server rejects a recipient
        """
        self._require_state(SessionState.ENVELOPE_SET)
        recipients = list(recipients)

        if not recipients:
            raise MissingRequiredFieldError(
                "Mail recipient(s) required", details={"field": "recipients"}
            )

        for recipient in recipients:
            try:
                await self._client.rcpt(recipient)

            except TRANSPORT_ERRORS as e:
                await self._abort(
                    EnvelopeError(
                        EnvelopeError.RECIPIENT,
                        recipient,
                        message="Failed to set a recipient",
                        details={"error": describe_exception(e)},
                    ),
                    e,
                )

            self._accepted.append(recipient)

        self._state = SessionState.RECIPIENTS_ACCEPTED
        logger.debug(
            "Envelope recipients accepted", extra={"count": len(self._accepted)}
        )

    @async_log_call
    async def open_data(self) -> None:
        """Issue DATA and wait for the server to ask for the message.

        Raises:
            DataError: If the server does not answer 354
        """
        self._require_state(SessionState.RECIPIENTS_ACCEPTED)

        try:
            response = await self._client.execute_command(
                b"DATA", timeout=self.config.timeout
            )
        except TRANSPORT_ERRORS as e:
            await self._abort(DataError(details={"error": describe_exception(e)}), e)

        if response.code != SMTPResponse.START_MAIL:
            await self._abort(
                DataError(
                    details={
                        "code": response.code,
                        "error": f"{response.code} {response.message}",
                    }
                )
            )

        self._state = SessionState.DATA_OPEN

    @async_log_call
    async def transfer(self, payload: bytes) -> None:
        """Write the message and end the DATA phase.

        Line endings are normalised to CRLF, lines starting with ``.`` are
        dot-stuffed and the terminating ``.`` line is appended before the
        payload is written. The final reply is read under the same command
        lock aiosmtplib holds for its own commands.

        Raises:
            TransferError: If writing fails or the server rejects the message
        """
        self._require_state(SessionState.DATA_OPEN)
        protocol = self._client.protocol
        data = encode_data(payload)
        stage = "write"

        try:
            if protocol is None or protocol._command_lock is None:
                raise aiosmtplib.SMTPServerDisconnected("Server not connected")

            async with protocol._command_lock:
                # aiosmtplib drops replies that arrive while no response is pending
                protocol._response_pending = True
                protocol.write(data)
                stage = "close"
                response = await protocol.read_response(timeout=self.config.timeout)

        except TRANSPORT_ERRORS as e:
            await self._abort(self._transfer_error(stage, describe_exception(e)), e)

        if not SMTPResponse.is_accepted(response.code):
            await self._abort(
                self._transfer_error(
                    "close", f"{response.code} {response.message}", code=response.code
                )
            )

        self._state = SessionState.CLOSED
        logger.debug("Message accepted", extra={"size_bytes": len(data)})

    @staticmethod
    def _transfer_error(stage: str, error: str, **details) -> TransferError:
        message = "Failed to close the DATA stream" if stage == "close" else None
        return TransferError(message, details={"stage": stage, "error": error, **details})

    @async_log_call
    async def quit(self) -> None:
        """Issue QUIT and release the connection; errors are not fatal."""
        self._require_state(SessionState.CLOSED)

        try:
            await self._client.quit()
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Error during QUIT: {e}")
        finally:
            self._connection.close()

    ## Full Sequence

    async def send(
        self,
        sender: str,
        recipients: Iterable[str],
        payload: bytes,
        use_tls: Optional[bool] = None,
    ) -> None:
        """Run the whole session for one message.

        Args:
            sender: Envelope sender (MAIL FROM)
            recipients: Envelope recipients (RCPT TO), in order
            payload: Message bytes for the DATA phase
            use_tls: Try STARTTLS, defaults to the configured setting

        Raises:
            SMTPError: Subclass describing the failed step
        """
        if use_tls is None:
            use_tls = self.config.use_tls

        async with self:
            await self.connect()

            if use_tls:
                await self.start_tls()

            await self.set_sender(sender)
            await self.add_recipients(recipients)
            await self.open_data()
            await self.transfer(payload)
            await self.quit()

    ## Failure Handling

    async def _abort(
        self, error: SMTPError, cause: Optional[BaseException] = None
    ) -> None:
        """Reset and quit the session, then raise ``error``."""
        logger.error(
            error.message,
            extra={"state": self._state.value, "error": error.details.get("error")},
        )
        await self._rollback()
        if cause is not None:
            raise error from cause
        raise error

    async def _rollback(self) -> None:
        """Send RSET then QUIT, swallowing their errors, and release the stream."""
        client = self._connection.client

        if client is not None:
            try:
                await client.rset()
            except Exception as e:
                logger.debug(f"Error during RSET: {e}")

            try:
                await client.quit()
            except Exception as e:
                logger.debug(f"Error during QUIT: {e}")

        self._connection.close()
        self._state = SessionState.ABORTED

    ## Context Manager Support

    async def __aenter__(self):
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, releasing the transport on every path."""
        active = self._state not in (
            SessionState.DISCONNECTED,
            SessionState.CLOSED,
            SessionState.ABORTED,
        )
        if exc_type is not None and active:
            await self._rollback()
        self._connection.close()
