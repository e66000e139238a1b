#!/usr/bin/env python3
"""
Notification Orchestrator

Runs once per inbound message:

1. Drop bot-authored messages.
2. Drop messages from excluded channels.
3. Append the message to the log (failures are logged, never blocking).
4. Under the guild's lock: check the cooldown, fan out, and record the
   attempt if any recipient was tried.

on_message never raises; a failing event is logged and the next one is
served normally.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.events import MessageEvent
from core.exceptions import StoreError
from core.exclusions import ExclusionFilter
from core.rate_limiter import RateLimiter, GuildLockRegistry
from database.database import Store
from database.repositories import MessageRepository
from notification.message_builder import NotificationMessageBuilder
from notification.service import DeliveryFanout, DeliveryReport

logger = logging.getLogger(__name__)


class MessageOutcome(Enum):
    IGNORED_BOT = "ignored_bot"
    EXCLUDED = "excluded"
    RATE_LIMITED = "rate_limited"
    NO_SUBSCRIBERS = "no_subscribers"
    DELIVERED = "delivered"
    ERROR = "error"


@dataclass
class MessageResult:
    outcome: MessageOutcome
    report: Optional[DeliveryReport] = None
    persisted: bool = False


class NotificationOrchestrator:
    """Composes exclusion, rate limiting and fan-out for each inbound message."""

    def __init__(
        self,
        store: Store,
        exclusions: ExclusionFilter,
        rate_limiter: RateLimiter,
        fanout: DeliveryFanout,
        message_builder: NotificationMessageBuilder,
        locks: Optional[GuildLockRegistry] = None
    ):
        self.store = store
        self.exclusions = exclusions
        self.rate_limiter = rate_limiter
        self.fanout = fanout
        self.message_builder = message_builder
        self.locks = locks or GuildLockRegistry()

    def on_message(self, event: MessageEvent) -> MessageResult:
        if event.author_is_bot:
            return MessageResult(MessageOutcome.IGNORED_BOT)

        try:
            if self.exclusions.is_excluded(event.guild_id, event.channel_id):
                logger.debug(f"Message {event.id} in excluded channel {event.channel_id}")
                return MessageResult(MessageOutcome.EXCLUDED)
        except StoreError as e:
            logger.error(f"Exclusion check failed for message {event.id}: {e}")
            return MessageResult(MessageOutcome.ERROR)

        persisted = self._persist_message(event)

        try:
            with self.locks.hold(event.guild_id):
                return self._notify(event, persisted)
        except Exception as e:
            logger.error(f"Notification for message {event.id} in guild {event.guild_id} failed: {e}",
                         exc_info=not isinstance(e, StoreError))
            return MessageResult(MessageOutcome.ERROR, persisted=persisted)

    def _notify(self, event: MessageEvent, persisted: bool) -> MessageResult:
        """Check, deliver and record. Caller holds the guild's lock."""
        if not self.rate_limiter.can_send(event.guild_id):
            logger.debug(f"Skipping notification for guild {event.guild_id} due to rate limit")
            return MessageResult(MessageOutcome.RATE_LIMITED, persisted=persisted)

        body = self.message_builder.build_new_message(event)
        report = self.fanout.deliver(event.guild_id, body)

        if not report.attempted:
            # An empty recipient set does not consume the cooldown window
            return MessageResult(MessageOutcome.NO_SUBSCRIBERS, report=report, persisted=persisted)

        self.rate_limiter.record_send(event.guild_id)
        return MessageResult(MessageOutcome.DELIVERED, report=report, persisted=persisted)

    def _persist_message(self, event: MessageEvent) -> bool:
        try:
            with self.store.session_scope() as session:
                MessageRepository(session).save(
                    message_id=event.id,
                    guild_id=event.guild_id,
                    channel_id=event.channel_id,
                    author_id=event.author_id,
                    content=event.content
                )
            return True
        except StoreError as e:
            logger.error(f"Failed to persist message {event.id}: {e}")
            return False
