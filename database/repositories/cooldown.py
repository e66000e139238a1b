from datetime import datetime
from typing import Optional

from sqlalchemy import select

from database.models import Cooldown
from database.repositories.base import BaseRepository


class CooldownRepository(BaseRepository):
    def get_last_sent_at(self, guild_id: str) -> Optional[datetime]:
        stmt = select(Cooldown.last_sent_at).where(Cooldown.guild_id == guild_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(self, guild_id: str, sent_at: datetime) -> None:
        """Replace the guild's single cooldown row (last write wins)."""
        stmt = self.insert(Cooldown).values(
            guild_id=guild_id,
            last_sent_at=sent_at
        ).on_conflict_do_update(
            index_elements=['guild_id'],
            set_={'last_sent_at': sent_at}
        )
        self.db.execute(stmt)
