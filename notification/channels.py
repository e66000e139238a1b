#!/usr/bin/env python3
"""
Mail Transports

One call per recipient: send(from_address, to_address, subject, body).
A transport either returns normally or raises DeliveryError once its retry
budget is spent.

Usage:
    from notification.channels import MailTransportFactory

    transport = MailTransportFactory.create(config.mail)
    transport.send('bot@example.com', 'user@example.com', 'Subject', 'Body')
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import logging
import smtplib
import socket
from email.mime.text import MIMEText

from tenacity import (
    Retrying, stop_after_attempt, wait_exponential, retry_if_exception, RetryError
)

from core.config_loader import MailConfig
from core.exceptions import DeliveryError
from core.utils import mask_email

logger = logging.getLogger(__name__)

# Connection-level failures are always worth another attempt
CONNECTION_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    socket.timeout,
    ConnectionError,
)


def is_transient(error: BaseException) -> bool:
    """Connection errors and 4xx replies are retried; 5xx replies (e.g. 550, bad auth) fail fast."""
    if isinstance(error, CONNECTION_ERRORS):
        return True
    if isinstance(error, smtplib.SMTPResponseException):
        return 400 <= error.smtp_code < 500
    return False


class MailTransport(ABC):
    """
    Abstract base class for mail transports.

    Any transport can be substituted for another, including in tests.
    """

    @property
    @abstractmethod
    def transport_type(self) -> str:
        """Return the transport type identifier."""
        pass

    @abstractmethod
    def send(self, from_address: str, to_address: str, subject: str, body: str) -> None:
        """
        Deliver one message to one recipient.

        Raises:
            DeliveryError: If the message could not be delivered.
        """
        pass

    def validate_config(self) -> bool:
        return True


class SmtpMailTransport(MailTransport):
    """Plain-text email via SMTP with STARTTLS, bounded timeout and retry."""

    def __init__(self, config: MailConfig):
        self.config = config

    @property
    def transport_type(self) -> str:
        return 'smtp'

    def validate_config(self) -> bool:
        return bool(self.config.smtp_server and self.config.username and self.config.password)

    def send(self, from_address: str, to_address: str, subject: str, body: str) -> None:
        if not self.validate_config():
            raise DeliveryError(to_address, "SMTP transport not configured (server, username, password)")

        msg = MIMEText(body, 'plain', 'utf-8')
        msg['From'] = from_address
        msg['To'] = to_address
        msg['Subject'] = subject

        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=self.config.backoff_seconds, max=self.config.backoff_max_seconds),
            retry=retry_if_exception(is_transient),
            reraise=False,
        )
        try:
            for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"Retrying email to {mask_email(to_address)} "
                            f"(attempt {attempt.retry_state.attempt_number}/{self.config.max_attempts})"
                        )
                    self._deliver(msg)
        except RetryError as e:
            last = e.last_attempt.exception()
            raise DeliveryError(
                to_address,
                f"Gave up after {self.config.max_attempts} attempts: {last}",
                attempts=self.config.max_attempts
            ) from last
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(to_address, str(e), attempts=1) from e

        logger.info(f"Email sent to {mask_email(to_address)}")

    def _deliver(self, msg: MIMEText) -> None:
        with smtplib.SMTP(self.config.smtp_server, self.config.smtp_port,
                          timeout=self.config.timeout_seconds) as server:
            if self.config.use_starttls:
                server.starttls()
            server.login(self.config.username, self.config.password)
            server.send_message(msg)


class DryRunMailTransport(MailTransport):
    """Logs messages instead of sending them. Keeps the last messages for inspection."""

    def __init__(self, config: Optional[MailConfig] = None, keep: int = 100):
        self.keep = keep
        self.sent: List[Tuple[str, str, str, str]] = []

    @property
    def transport_type(self) -> str:
        return 'dry_run'

    def send(self, from_address: str, to_address: str, subject: str, body: str) -> None:
        logger.info(f"[DRY_RUN] To: {mask_email(to_address)}, Subject: {subject}")
        self.sent.append((from_address, to_address, subject, body))
        if len(self.sent) > self.keep:
            del self.sent[0]


class MailTransportFactory:
    """Builds the configured transport. New transports can be registered at runtime."""

    _transports: Dict[str, type] = {
        'smtp': SmtpMailTransport,
        'dry_run': DryRunMailTransport,
    }

    @classmethod
    def create(cls, config: MailConfig) -> MailTransport:
        transport_class = cls._transports.get(config.transport.lower())
        if not transport_class:
            raise ValueError(f"Unknown mail transport: {config.transport}. "
                             f"Available: {', '.join(cls._transports.keys())}")

        transport = transport_class(config)
        if not transport.validate_config():
            logger.warning(f"Mail transport '{config.transport}' is not fully configured; sends will fail")
        return transport

    @classmethod
    def register_transport(cls, transport_type: str, transport_class: type) -> None:
        if not issubclass(transport_class, MailTransport):
            raise ValueError("Transport class must extend MailTransport")
        cls._transports[transport_type.lower()] = transport_class
        logger.info(f"Registered new mail transport: {transport_type}")

    @classmethod
    def list_transports(cls) -> list:
        return list(cls._transports.keys())
