import logging

from database.database import Store
from database.repositories import GuildModeRepository

logger = logging.getLogger(__name__)


class GuildModeStore:
    """Development-mode flag per guild. Guilds without a row are in production mode."""

    def __init__(self, store: Store):
        self.store = store

    def get_mode(self, guild_id: str) -> bool:
        with self.store.session_scope() as session:
            dev_mode = GuildModeRepository(session).get_dev_mode(guild_id)
        return bool(dev_mode)

    def set_mode(self, guild_id: str, dev_mode: bool) -> None:
        with self.store.session_scope() as session:
            GuildModeRepository(session).upsert(guild_id, dev_mode)
        logger.info(f"Guild {guild_id} switched to {'development' if dev_mode else 'production'} mode")
