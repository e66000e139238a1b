#!/usr/bin/env python3
"""
Unit tests for SubscriberRegistry.
"""

import unittest

from core.exceptions import ValidationError, DuplicateSubscriptionError
from core.subscribers import SubscriberRegistry, validate_email
from tests.mocks.notifier_mocks import make_store


class TestValidateEmail(unittest.TestCase):

    def test_accepts_any_address_with_at_sign(self):
        self.assertEqual(validate_email("a@b.com"), "a@b.com")
        self.assertEqual(validate_email("odd@local"), "odd@local")

    def test_strips_whitespace(self):
        self.assertEqual(validate_email("  a@b.com \n"), "a@b.com")

    def test_rejects_missing_at_sign(self):
        for bad in ("notanemail", "", "   ", None):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    validate_email(bad)


class TestSubscriberRegistry(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.registry = SubscriberRegistry(self.store)

    def tearDown(self):
        self.store.close()

    def test_register_and_list(self):
        stored = self.registry.register("u1", "G1", "a@b.com")

        self.assertEqual(stored, "a@b.com")
        self.assertEqual(self.registry.list_emails("G1"), {"a@b.com"})

    def test_invalid_email_creates_nothing(self):
        with self.assertRaises(ValidationError):
            self.registry.register("u1", "G1", "notanemail")

        self.assertEqual(self.registry.list_emails("G1"), set())

    def test_duplicate_triple_rejected(self):
        self.registry.register("u1", "G1", "a@b.com")

        with self.assertRaises(DuplicateSubscriptionError):
            self.registry.register("u1", "G1", "a@b.com")

        self.assertEqual(self.registry.list_emails("G1"), {"a@b.com"})

    def test_same_user_second_address_allowed(self):
        self.registry.register("u1", "G1", "a@b.com")
        self.registry.register("u1", "G1", "c@d.com")

        self.assertEqual(self.registry.list_emails("G1"), {"a@b.com", "c@d.com"})

    def test_same_email_other_guild_allowed(self):
        self.registry.register("u1", "G1", "a@b.com")
        self.registry.register("u1", "G2", "a@b.com")

        self.assertEqual(self.registry.list_emails("G2"), {"a@b.com"})

    def test_list_emails_is_distinct_across_users(self):
        self.registry.register("u1", "G1", "shared@b.com")
        self.registry.register("u2", "G1", "shared@b.com")

        self.assertEqual(self.registry.list_emails("G1"), {"shared@b.com"})

    def test_unregister_removes_all_user_addresses(self):
        self.registry.register("u1", "G1", "a@b.com")
        self.registry.register("u1", "G1", "c@d.com")
        self.registry.register("u2", "G1", "e@f.com")

        removed = self.registry.unregister("u1", "G1")

        self.assertEqual(removed, 2)
        self.assertEqual(self.registry.list_emails("G1"), {"e@f.com"})

    def test_unregister_without_subscription_is_noop(self):
        self.assertEqual(self.registry.unregister("u1", "G1"), 0)

    def test_unregister_is_scoped_to_guild(self):
        self.registry.register("u1", "G1", "a@b.com")
        self.registry.register("u1", "G2", "a@b.com")

        self.registry.unregister("u1", "G1")

        self.assertIsNone(self.registry.status_for("u1", "G1"))
        self.assertEqual(self.registry.status_for("u1", "G2"), "a@b.com")

    def test_status_returns_first_registered(self):
        self.assertIsNone(self.registry.status_for("u1", "G1"))

        self.registry.register("u1", "G1", "z@b.com")
        self.registry.register("u1", "G1", "a@b.com")

        self.assertEqual(self.registry.status_for("u1", "G1"), "z@b.com")

    def test_reregister_after_cancel(self):
        self.registry.register("u1", "G1", "a@b.com")
        self.registry.unregister("u1", "G1")

        self.registry.register("u1", "G1", "a@b.com")

        self.assertEqual(self.registry.status_for("u1", "G1"), "a@b.com")


if __name__ == '__main__':
    unittest.main()
