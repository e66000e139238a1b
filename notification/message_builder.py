from typing import Optional

from pydantic import BaseModel

from core.events import MessageEvent
from core.utils import truncate

MAX_CONTENT_CHARS = 4000


class NotificationBody(BaseModel):
    subject: str
    text: str


class NotificationMessageBuilder:
    """Renders the plain-text emails sent to subscribers."""

    def __init__(
        self,
        notification_subject: str = "New Discord message notification",
        confirmation_subject: str = "Discord notification setup complete"
    ):
        self.notification_subject = notification_subject
        self.confirmation_subject = confirmation_subject

    def build_new_message(self, event: MessageEvent) -> NotificationBody:
        """Body for a guild-wide new-message notification."""
        lines = [
            "New message:",
            f"Server: {event.guild_name or event.guild_id}",
            f"Channel: {self.format_channel(event)}",
            f"Author: {event.author_display}",
            f"Content: {truncate(event.content or '', MAX_CONTENT_CHARS)}",
            f"URL: {event.permalink_url}",
        ]
        return NotificationBody(subject=self.notification_subject, text="\n".join(lines))

    def build_confirmation(self, guild_name: str, cancel_command: str = "/cancel") -> NotificationBody:
        text = "\n".join([
            "Discord message notifications are now set up.",
            f"Server: {guild_name}",
            "New messages on this server will be notified to this address.",
            f"To stop notifications, run {cancel_command} on Discord.",
            "",
            "If you did not request this, please reply to this email to let us know.",
        ])
        return NotificationBody(subject=self.confirmation_subject, text=text)

    @staticmethod
    def format_channel(event: MessageEvent) -> str:
        name: Optional[str] = event.channel_name
        return f"#{name}" if name else event.channel_id
