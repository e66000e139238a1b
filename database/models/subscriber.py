from sqlalchemy import Column, Integer, Text, TIMESTAMP, UniqueConstraint, Index, func

from .base import Base

class Subscriber(Base):
    """
    Email opt-in for a guild's notifications.

    A user may hold several distinct addresses per guild; the
    (user, guild, email) triple is unique.
    """
    __tablename__ = 'notification_settings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False)
    guild_id = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'guild_id', 'email', name='uq_subscriber_user_guild_email'),
        Index('idx_subscriber_guild', 'guild_id'),
    )
