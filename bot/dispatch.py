"""
Per-guild event scheduling for the Discord adapter.

Events for one guild wait on an asyncio.Lock on the event loop, so at most
one worker thread per guild is ever busy with gating and fan-out. Queued
events of a busy guild hold no thread, and other guilds (and slash commands,
which use the loop's default executor) are never stuck behind them.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from core.events import MessageEvent
from core.orchestrator import NotificationOrchestrator, MessageResult

logger = logging.getLogger(__name__)

DEFAULT_EVENT_WORKERS = 8


class GuildEventDispatcher:
    def __init__(
        self,
        orchestrator: NotificationOrchestrator,
        max_workers: int = DEFAULT_EVENT_WORKERS,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.orchestrator = orchestrator
        self.executor = executor or ThreadPoolExecutor(max_workers=max_workers,
                                                       thread_name_prefix="guild-event")
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, guild_id: str) -> asyncio.Lock:
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[guild_id] = lock
        return lock

    async def submit(self, event: MessageEvent) -> MessageResult:
        """Run the orchestrator for event once its guild's earlier events are done."""
        async with self._lock_for(event.guild_id):
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self.executor, self.orchestrator.on_message, event)

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False)
        logger.info("Guild event executor stopped")
