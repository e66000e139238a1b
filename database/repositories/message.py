from typing import Optional

from database.models import Message
from database.repositories.base import BaseRepository


class MessageRepository(BaseRepository):
    def save(
        self,
        message_id: str,
        guild_id: str,
        channel_id: str,
        author_id: str,
        content: Optional[str]
    ) -> bool:
        """Append to the message log. A message id already logged is ignored."""
        stmt = self.insert(Message).values(
            id=message_id,
            guild_id=guild_id,
            channel_id=channel_id,
            author_id=author_id,
            content=content
        ).on_conflict_do_nothing(index_elements=['id'])
        return self.db.execute(stmt).rowcount == 1

    def get(self, message_id: str) -> Optional[Message]:
        return self.db.get(Message, message_id)
