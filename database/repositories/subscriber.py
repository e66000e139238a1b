from typing import List, Optional

from sqlalchemy import select, delete

from database.models import Subscriber
from database.repositories.base import BaseRepository


class SubscriberRepository(BaseRepository):
    def exists(self, user_id: str, guild_id: str, email: str) -> bool:
        stmt = select(Subscriber.id).where(
            Subscriber.user_id == user_id,
            Subscriber.guild_id == guild_id,
            Subscriber.email == email
        ).limit(1)
        return self.db.execute(stmt).first() is not None

    def add(self, user_id: str, guild_id: str, email: str) -> Subscriber:
        subscriber = Subscriber(user_id=user_id, guild_id=guild_id, email=email)
        self.db.add(subscriber)
        self.db.flush()
        return subscriber

    def delete_for_user(self, user_id: str, guild_id: str) -> int:
        stmt = delete(Subscriber).where(
            Subscriber.user_id == user_id,
            Subscriber.guild_id == guild_id
        )
        return self.db.execute(stmt).rowcount

    def get_email_for_user(self, user_id: str, guild_id: str) -> Optional[str]:
        stmt = select(Subscriber.email).where(
            Subscriber.user_id == user_id,
            Subscriber.guild_id == guild_id
        ).order_by(Subscriber.id).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_distinct_emails(self, guild_id: str) -> List[str]:
        stmt = select(Subscriber.email).where(
            Subscriber.guild_id == guild_id
        ).distinct().order_by(Subscriber.email)
        return list(self.db.execute(stmt).scalars().all())
