from sqlalchemy import Column, Text, Boolean, TIMESTAMP, func

from .base import Base

class GuildMode(Base):
    __tablename__ = 'debug_settings'

    guild_id = Column(Text, primary_key=True)
    dev_mode = Column(Boolean, nullable=False, default=False)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
