from sqlalchemy import Column, Text, TIMESTAMP

from .base import Base

class Cooldown(Base):
    """Last notification attempt per guild. One row per guild, replaced on every send."""
    __tablename__ = 'email_history'

    guild_id = Column(Text, primary_key=True)
    last_sent_at = Column(TIMESTAMP(timezone=True), nullable=False)
