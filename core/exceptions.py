#!/usr/bin/env python3
"""
Error taxonomy shared by the gating, registry and delivery layers.

Validation and duplicate errors go back to the command caller for rendering.
StoreError aborts the current operation. DeliveryError is scoped to a single
recipient and never aborts a fan-out.
"""

from typing import Optional


class GuildMailError(Exception):
    """Base exception for all guildmail errors."""
    pass


class ValidationError(GuildMailError):
    """Raised when user input (e.g. an email address) is malformed."""
    pass


class DuplicateSubscriptionError(GuildMailError):
    """Raised when the exact (user, guild, email) subscription already exists."""
    pass


class NotFoundError(GuildMailError):
    """Raised when removing something that does not exist."""
    pass


class StoreError(GuildMailError):
    """Raised when a persisted-store operation fails."""
    pass


class DeliveryError(GuildMailError):
    """Raised when the mail transport could not deliver to one recipient."""

    def __init__(self, recipient: str, message: str, attempts: Optional[int] = None):
        super().__init__(message)
        self.recipient = recipient
        self.attempts = attempts
