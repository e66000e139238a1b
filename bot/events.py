from typing import Any, Optional

from core.events import MessageEvent


def to_message_event(message: Any) -> Optional[MessageEvent]:
    """Translate a discord.Message into a MessageEvent. Returns None outside guilds."""
    guild = getattr(message, "guild", None)
    if guild is None:
        return None

    author = message.author
    channel = message.channel
    return MessageEvent(
        id=str(message.id),
        guild_id=str(guild.id),
        channel_id=str(channel.id),
        author_id=str(author.id),
        author_is_bot=bool(getattr(author, "bot", False)),
        content=message.content or "",
        permalink_url=message.jump_url,
        guild_name=guild.name or "",
        channel_name=getattr(channel, "name", "") or "",
        author_tag=str(author),
    )
