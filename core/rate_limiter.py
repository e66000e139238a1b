#!/usr/bin/env python3
"""
Per-guild notification rate limiting.

A guild may receive at most one notification fan-out per cooldown window.
The window is tracked with a single last-sent timestamp per guild; guilds in
development mode bypass it entirely.

canSend and recordSend are a check-then-act pair. Callers that act on the
answer must hold the guild's lock from GuildLockRegistry across both calls,
otherwise two concurrent events can both observe an open window.
"""

import contextlib
import logging
import threading
from datetime import timedelta
from typing import Dict, Iterator, Optional

from core.clock import Clock, utc_now, as_utc
from core.guild_mode import GuildModeStore
from database.database import Store
from database.repositories import CooldownRepository

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = timedelta(hours=1)


class GuildLockRegistry:
    """
    Hands out one lock per guild.

    Events for different guilds never wait on each other; events for the
    same guild are serialized.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get(self, guild_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(guild_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[guild_id] = lock
            return lock

    @contextlib.contextmanager
    def hold(self, guild_id: str) -> Iterator[None]:
        lock = self.get(guild_id)
        with lock:
            yield


class RateLimiter:
    """Cooldown gate over the guild's last notification attempt."""

    def __init__(
        self,
        store: Store,
        guild_modes: GuildModeStore,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        clock: Optional[Clock] = None
    ):
        self.store = store
        self.guild_modes = guild_modes
        self.cooldown = cooldown
        self.clock = clock or utc_now

    def can_send(self, guild_id: str) -> bool:
        """True in development mode, or when the last send is at least one window old."""
        if self.guild_modes.get_mode(guild_id):
            return True

        with self.store.session_scope() as session:
            last_sent_at = CooldownRepository(session).get_last_sent_at(guild_id)

        if last_sent_at is None:
            return True

        elapsed = as_utc(self.clock()) - as_utc(last_sent_at)
        if elapsed >= self.cooldown:
            return True

        logger.debug(f"Guild {guild_id} in cooldown ({self.cooldown - elapsed} remaining)")
        return False

    def record_send(self, guild_id: str) -> None:
        now = as_utc(self.clock())
        with self.store.session_scope() as session:
            CooldownRepository(session).upsert(guild_id, now)
        logger.debug(f"Recorded send for guild {guild_id} at {now.isoformat()}")
