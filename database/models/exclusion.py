from sqlalchemy import Column, Integer, Text, TIMESTAMP, UniqueConstraint, func

from .base import Base

class ExclusionEntry(Base):
    """Channel whose messages are neither logged nor notified."""
    __tablename__ = 'excluded_channels'

    id = Column(Integer, primary_key=True, autoincrement=True)
    guild_id = Column(Text, nullable=False, index=True)
    channel_id = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('guild_id', 'channel_id', name='uq_exclusion_guild_channel'),
    )
