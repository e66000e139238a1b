#!/usr/bin/env python3
"""
Delivery Fan-out

Sends one notification body to every distinct subscriber email of a guild
through the configured MailTransport. Each recipient is attempted
independently: a failure for one address never stops the rest.

Usage:
    from notification.service import DeliveryFanout

    fanout = DeliveryFanout(subscribers, transport, from_address='bot@example.com')
    report = fanout.deliver(guild_id, body)
    if report.attempted:
        rate_limiter.record_send(guild_id)
"""

import logging
from dataclasses import dataclass, field
from typing import List

from core.exceptions import DeliveryError
from core.subscribers import SubscriberRegistry
from core.utils import mask_email
from notification.channels import MailTransport
from notification.message_builder import NotificationBody

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReport:
    """Outcome of one fan-out."""
    guild_id: str
    succeeded: int = 0
    failed_emails: List[str] = field(default_factory=list)
    errors: List[DeliveryError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_emails)

    @property
    def recipients(self) -> int:
        return self.succeeded + self.failed

    @property
    def attempted(self) -> bool:
        """True once any recipient was tried, whatever the outcome."""
        return self.recipients > 0


class DeliveryFanout:
    """Fan-out coordinator with per-recipient failure isolation."""

    def __init__(self, subscribers: SubscriberRegistry, transport: MailTransport, from_address: str):
        self.subscribers = subscribers
        self.transport = transport
        self.from_address = from_address

    def deliver(self, guild_id: str, body: NotificationBody) -> DeliveryReport:
        """
        Send body to every subscriber of the guild.

        Returns:
            DeliveryReport. With no subscribers it reports zero recipients
            and nothing is sent.

        Raises:
            StoreError: If the recipient list could not be read.
        """
        report = DeliveryReport(guild_id=guild_id)
        emails = sorted(self.subscribers.list_emails(guild_id))

        if not emails:
            logger.debug(f"No subscribers for guild {guild_id}; nothing to deliver")
            return report

        for email in emails:
            try:
                self.transport.send(self.from_address, email, body.subject, body.text)
                report.succeeded += 1
            except DeliveryError as e:
                report.failed_emails.append(email)
                report.errors.append(e)
                logger.error(f"Delivery to {mask_email(email)} failed for guild {guild_id}: {e}")
            except Exception as e:
                # Transport broke its contract; still isolate the recipient
                logger.error(f"Unexpected transport error for {mask_email(email)}: {e}", exc_info=True)
                report.failed_emails.append(email)
                report.errors.append(DeliveryError(email, str(e)))

        if report.failed:
            logger.warning(
                f"Guild {guild_id} fan-out: {report.succeeded} sent, {report.failed} failed "
                f"({', '.join(mask_email(e) for e in report.failed_emails)})"
            )
        else:
            logger.info(f"Guild {guild_id} fan-out: {report.succeeded} sent")
        return report

    def send_confirmation(self, email: str, body: NotificationBody) -> bool:
        """Registration confirmation to a single address. Returns False on failure."""
        try:
            self.transport.send(self.from_address, email, body.subject, body.text)
            return True
        except DeliveryError as e:
            logger.error(f"Confirmation email to {mask_email(email)} failed: {e}")
            return False
