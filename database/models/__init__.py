from .base import Base
from .subscriber import Subscriber
from .cooldown import Cooldown
from .guild_mode import GuildMode
from .exclusion import ExclusionEntry
from .message import Message

__all__ = [
    'Base',
    'Subscriber',
    'Cooldown',
    'GuildMode',
    'ExclusionEntry',
    'Message',
]
