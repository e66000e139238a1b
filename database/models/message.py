from sqlalchemy import Column, Text, TIMESTAMP, Index, func

from .base import Base

class Message(Base):
    __tablename__ = 'messages'

    id = Column(Text, primary_key=True)
    guild_id = Column(Text, nullable=False)
    channel_id = Column(Text, nullable=False)
    author_id = Column(Text, nullable=False)
    content = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_messages_guild_created', 'guild_id', 'created_at'),
    )
