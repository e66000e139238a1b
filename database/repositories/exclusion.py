from typing import List

from sqlalchemy import select, delete

from database.models import ExclusionEntry
from database.repositories.base import BaseRepository


class ExclusionRepository(BaseRepository):
    def exists(self, guild_id: str, channel_id: str) -> bool:
        stmt = select(ExclusionEntry.id).where(
            ExclusionEntry.guild_id == guild_id,
            ExclusionEntry.channel_id == channel_id
        ).limit(1)
        return self.db.execute(stmt).first() is not None

    def add(self, guild_id: str, channel_id: str) -> bool:
        """Insert the pair unless present. Returns True if a row was created."""
        stmt = self.insert(ExclusionEntry).values(
            guild_id=guild_id,
            channel_id=channel_id
        ).on_conflict_do_nothing(index_elements=['guild_id', 'channel_id'])
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def remove(self, guild_id: str, channel_id: str) -> int:
        stmt = delete(ExclusionEntry).where(
            ExclusionEntry.guild_id == guild_id,
            ExclusionEntry.channel_id == channel_id
        )
        return self.db.execute(stmt).rowcount

    def list_channels(self, guild_id: str) -> List[str]:
        stmt = select(ExclusionEntry.channel_id).where(
            ExclusionEntry.guild_id == guild_id
        ).order_by(ExclusionEntry.id)
        return list(self.db.execute(stmt).scalars().all())
