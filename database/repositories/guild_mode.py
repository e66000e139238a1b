from typing import Optional

from sqlalchemy import select, func

from database.models import GuildMode
from database.repositories.base import BaseRepository


class GuildModeRepository(BaseRepository):
    def get_dev_mode(self, guild_id: str) -> Optional[bool]:
        stmt = select(GuildMode.dev_mode).where(GuildMode.guild_id == guild_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(self, guild_id: str, dev_mode: bool) -> None:
        stmt = self.insert(GuildMode).values(
            guild_id=guild_id,
            dev_mode=dev_mode
        ).on_conflict_do_update(
            index_elements=['guild_id'],
            set_={'dev_mode': dev_mode, 'updated_at': func.now()}
        )
        self.db.execute(stmt)
