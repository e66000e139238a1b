from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MessageEvent:
    """An inbound chat message as delivered by the platform adapter."""
    id: str
    guild_id: str
    channel_id: str
    author_id: str
    author_is_bot: bool
    content: str
    permalink_url: str
    guild_name: str = ""
    channel_name: str = ""
    author_tag: Optional[str] = None

    @property
    def author_display(self) -> str:
        return self.author_tag or self.author_id
