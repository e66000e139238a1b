from database.repositories.base import BaseRepository
from database.repositories.exclusion import ExclusionRepository
from database.repositories.guild_mode import GuildModeRepository
from database.repositories.cooldown import CooldownRepository
from database.repositories.subscriber import SubscriberRepository
from database.repositories.message import MessageRepository

__all__ = [
    'BaseRepository',
    'ExclusionRepository',
    'GuildModeRepository',
    'CooldownRepository',
    'SubscriberRepository',
    'MessageRepository',
]
