import logging
from typing import List

from core.exceptions import NotFoundError
from database.database import Store
from database.repositories import ExclusionRepository

logger = logging.getLogger(__name__)


class ExclusionFilter:
    """Per-guild set of channels whose messages are ignored."""

    def __init__(self, store: Store):
        self.store = store

    def is_excluded(self, guild_id: str, channel_id: str) -> bool:
        with self.store.session_scope() as session:
            return ExclusionRepository(session).exists(guild_id, channel_id)

    def add(self, guild_id: str, channel_id: str) -> bool:
        """Exclude a channel. Idempotent; returns False if it was already excluded."""
        with self.store.session_scope() as session:
            created = ExclusionRepository(session).add(guild_id, channel_id)
        if created:
            logger.info(f"Excluded channel {channel_id} in guild {guild_id}")
        return created

    def remove(self, guild_id: str, channel_id: str) -> None:
        """Stop excluding a channel.

        Raises:
            NotFoundError: If the channel is not currently excluded.
        """
        with self.store.session_scope() as session:
            removed = ExclusionRepository(session).remove(guild_id, channel_id)
            if removed == 0:
                raise NotFoundError(f"Channel {channel_id} is not excluded in guild {guild_id}")
        logger.info(f"Removed exclusion for channel {channel_id} in guild {guild_id}")

    def list(self, guild_id: str) -> List[str]:
        with self.store.session_scope() as session:
            return ExclusionRepository(session).list_channels(guild_id)
