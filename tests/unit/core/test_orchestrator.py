#!/usr/bin/env python3
"""
Unit tests for NotificationOrchestrator.

Tests cover:
1. Production guild: first message fans out and starts the cooldown
2. Production guild: second message inside the window is suppressed
3. Development guild: cooldown bypassed
4. Excluded channels and bot authors: no transport calls, no cooldown
5. Partial delivery failure still consumes the window
6. Empty recipient set does not consume the window
7. Store failures are contained and never raised
8. Concurrent events for one guild produce a single fan-out
"""

import os
import shutil
import tempfile
import threading
import unittest
from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from core.clock import as_utc
from core.exceptions import StoreError
from core.exclusions import ExclusionFilter
from core.guild_mode import GuildModeStore
from core.orchestrator import NotificationOrchestrator, MessageOutcome
from core.rate_limiter import RateLimiter
from core.subscribers import SubscriberRegistry
from database.database import Store
from database.repositories import MessageRepository, CooldownRepository
from notification.message_builder import NotificationMessageBuilder
from notification.service import DeliveryFanout
from tests.mocks.notifier_mocks import make_store, make_event, FakeClock, RecordingTransport


def build_orchestrator(store, clock, transport):
    exclusions = ExclusionFilter(store)
    modes = GuildModeStore(store)
    limiter = RateLimiter(store, modes, clock=clock)
    subscribers = SubscriberRegistry(store)
    fanout = DeliveryFanout(subscribers, transport, from_address="bot@example.com")
    orchestrator = NotificationOrchestrator(
        store=store,
        exclusions=exclusions,
        rate_limiter=limiter,
        fanout=fanout,
        message_builder=NotificationMessageBuilder()
    )
    return orchestrator, subscribers, modes, exclusions, limiter


class TestNotificationOrchestrator(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.clock = FakeClock()
        self.transport = RecordingTransport()
        (self.orchestrator, self.subscribers, self.modes,
         self.exclusions, self.limiter) = build_orchestrator(self.store, self.clock, self.transport)

        self.subscribers.register("u1", "G1", "a@b.com")
        self.subscribers.register("u2", "G1", "c@d.com")

    def tearDown(self):
        self.store.close()

    def _last_sent_at(self, guild_id):
        with self.store.session_scope() as session:
            return CooldownRepository(session).get_last_sent_at(guild_id)

    def test_first_message_delivers_to_every_subscriber(self):
        result = self.orchestrator.on_message(make_event(channel_id="C"))

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(sorted(self.transport.recipients), ["a@b.com", "c@d.com"])
        self.assertEqual(result.report.succeeded, 2)
        self.assertIsNotNone(self._last_sent_at("G1"))

    def test_message_inside_window_is_suppressed(self):
        self.orchestrator.on_message(make_event(message_id="m1"))
        first_sent_at = as_utc(self._last_sent_at("G1"))
        self.assertEqual(first_sent_at, self.clock())
        self.clock.advance(minutes=10)

        result = self.orchestrator.on_message(make_event(message_id="m2"))

        self.assertEqual(result.outcome, MessageOutcome.RATE_LIMITED)
        self.assertEqual(len(self.transport.sent), 2)
        self.assertEqual(as_utc(self._last_sent_at("G1")), first_sent_at)

    def test_suppressed_then_delivered_after_window(self):
        """M1 delivers, M2 right after is suppressed, M3 61 minutes later delivers and moves the cooldown."""
        self.orchestrator.on_message(make_event(message_id="m1"))
        first_sent_at = as_utc(self._last_sent_at("G1"))

        self.assertEqual(self.orchestrator.on_message(make_event(message_id="m2")).outcome,
                         MessageOutcome.RATE_LIMITED)
        self.assertEqual(as_utc(self._last_sent_at("G1")), first_sent_at)

        self.clock.advance(minutes=61)
        result = self.orchestrator.on_message(make_event(message_id="m3"))

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(len(self.transport.sent), 4)
        third_sent_at = as_utc(self._last_sent_at("G1"))
        self.assertEqual(third_sent_at, self.clock())
        self.assertGreater(third_sent_at, first_sent_at)

    def test_message_after_window_delivers_again(self):
        self.orchestrator.on_message(make_event(message_id="m1"))
        self.clock.advance(hours=1)

        result = self.orchestrator.on_message(make_event(message_id="m2"))

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(len(self.transport.sent), 4)

    def test_dev_mode_delivers_every_message(self):
        self.modes.set_mode("G1", True)

        self.orchestrator.on_message(make_event(message_id="m1"))
        self.clock.advance(seconds=1)
        result = self.orchestrator.on_message(make_event(message_id="m2"))

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(len(self.transport.sent), 4)

    def test_excluded_channel_makes_no_transport_calls(self):
        self.exclusions.add("G1", "X")

        result = self.orchestrator.on_message(make_event(channel_id="X"))

        self.assertEqual(result.outcome, MessageOutcome.EXCLUDED)
        self.assertEqual(self.transport.attempts, [])
        self.assertIsNone(self._last_sent_at("G1"))
        with self.store.session_scope() as session:
            self.assertIsNone(MessageRepository(session).get("m1"))

    def test_excluded_channel_does_not_use_window(self):
        self.exclusions.add("G1", "X")
        self.orchestrator.on_message(make_event(message_id="m1", channel_id="X"))

        result = self.orchestrator.on_message(make_event(message_id="m2", channel_id="C"))

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)

    def test_bot_message_ignored(self):
        result = self.orchestrator.on_message(make_event(author_is_bot=True))

        self.assertEqual(result.outcome, MessageOutcome.IGNORED_BOT)
        self.assertEqual(self.transport.attempts, [])
        with self.store.session_scope() as session:
            self.assertIsNone(MessageRepository(session).get("m1"))

    def test_message_is_logged(self):
        result = self.orchestrator.on_message(make_event(message_id="m9", content="hi there"))

        self.assertTrue(result.persisted)
        with self.store.session_scope() as session:
            message = MessageRepository(session).get("m9")
            self.assertEqual(message.content, "hi there")
            self.assertEqual(message.channel_id, "C")

    def test_partial_failure_still_records_send(self):
        self.transport.fail_for = {"a@b.com"}

        result = self.orchestrator.on_message(make_event())

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(self.transport.recipients, ["c@d.com"])
        self.assertEqual(result.report.failed_emails, ["a@b.com"])
        self.assertEqual(self.transport.attempts.count("a@b.com"), 1)
        self.assertFalse(self.limiter.can_send("G1"))

    def test_all_recipients_failing_still_records_send(self):
        self.transport.fail_for = {"a@b.com", "c@d.com"}

        result = self.orchestrator.on_message(make_event())

        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)
        self.assertEqual(result.report.succeeded, 0)
        self.assertIsNotNone(self._last_sent_at("G1"))

    def test_guild_without_subscribers_does_not_consume_window(self):
        result = self.orchestrator.on_message(make_event(guild_id="G2"))

        self.assertEqual(result.outcome, MessageOutcome.NO_SUBSCRIBERS)
        self.assertIsNone(self._last_sent_at("G2"))
        self.assertTrue(self.limiter.can_send("G2"))

    def test_persist_failure_does_not_block_notification(self):
        with patch.object(MessageRepository, 'save', side_effect=SQLAlchemyError("disk full")):
            result = self.orchestrator.on_message(make_event())

        self.assertFalse(result.persisted)
        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)

    def test_exclusion_lookup_failure_is_contained(self):
        with patch.object(self.exclusions, 'is_excluded', side_effect=StoreError("down")):
            result = self.orchestrator.on_message(make_event())

        self.assertEqual(result.outcome, MessageOutcome.ERROR)
        self.assertEqual(self.transport.attempts, [])

    def test_rate_limit_lookup_failure_is_contained(self):
        with patch.object(self.limiter, 'can_send', side_effect=StoreError("down")):
            result = self.orchestrator.on_message(make_event())

        self.assertEqual(result.outcome, MessageOutcome.ERROR)
        self.assertEqual(self.transport.attempts, [])

        # Next event is served normally
        result = self.orchestrator.on_message(make_event(message_id="m2"))
        self.assertEqual(result.outcome, MessageOutcome.DELIVERED)

    def test_notification_body_describes_message(self):
        self.orchestrator.on_message(make_event(content="deploy finished"))

        _, _, subject, body = self.transport.sent[0]
        self.assertEqual(subject, "New Discord message notification")
        self.assertIn("Content: deploy finished", body)
        self.assertIn("Channel: #general", body)
        self.assertIn("URL: https://discord.com/channels/G1/C/m1", body)


class TestConcurrentEvents(unittest.TestCase):
    """Two simultaneous events for one production guild yield one fan-out."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = Store(f"sqlite:///{os.path.join(self.tmpdir, 'messages.db')}")
        self.store.create_all()
        self.clock = FakeClock()
        # Slow sends widen the window between canSend and recordSend
        self.transport = RecordingTransport(delay=0.05)
        self.orchestrator, subscribers, _, _, _ = build_orchestrator(self.store, self.clock, self.transport)
        subscribers.register("u1", "G1", "a@b.com")

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_single_fanout_under_race(self):
        barrier = threading.Barrier(4)
        outcomes = []
        outcomes_lock = threading.Lock()

        def worker(i):
            barrier.wait()
            result = self.orchestrator.on_message(make_event(message_id=f"m{i}"))
            with outcomes_lock:
                outcomes.append(result.outcome)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        self.assertEqual(len(self.transport.sent), 1)
        self.assertEqual(outcomes.count(MessageOutcome.DELIVERED), 1)
        self.assertEqual(outcomes.count(MessageOutcome.RATE_LIMITED), 3)


if __name__ == '__main__':
    unittest.main()
