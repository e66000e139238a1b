"""Turns CommandResults into the reply text shown on Discord."""

from typing import Dict, List

from commands.base import (
    CommandResult, INVALID_EMAIL, DUPLICATE_SUBSCRIPTION, NOT_FOUND,
    FORBIDDEN, MISSING_OPTION, INVALID_OPTION, UNKNOWN_COMMAND
)

ABOUT_LINES = [
    "## This bot sends an email notification when new messages are posted on this server",
    "Notifications are sent at most once per hour, so your inbox will not be flooded.",
    "Channels can be excluded so that low-priority channels are not notified.",
    "Exclusions apply to the whole server and are managed by administrators.",
]

FAILURE_MESSAGES: Dict[str, str] = {
    "register": "Failed to set up email notifications.",
    "cancel": "Failed to cancel email notifications.",
    "check": "Failed to check your registration status.",
    "mode": "Failed to change the server mode.",
    "exclusion": "Failed to update channel exclusions.",
}


def channel_mention(channel_id: str) -> str:
    return f"<#{channel_id}>"


def render_command_list(commands: List[Dict[str, str]], admin: bool) -> str:
    header = "**Administrator commands:**" if admin else "**Available commands:**"
    lines = [header]
    lines.extend(f"- `/{c['name']}` - {c['description']}" for c in commands)
    return "\n".join(lines)


def _render_error(result: CommandResult) -> str:
    if result.error == FORBIDDEN:
        return "This command requires administrator permission."
    if result.error == INVALID_EMAIL:
        return "Invalid email address."
    if result.error == DUPLICATE_SUBSCRIPTION:
        return "This email address is already registered on this server."
    if result.error == NOT_FOUND:
        return "That channel is not in the exclusion list."
    if result.error == MISSING_OPTION:
        if result.detail == "channel":
            return "Please specify a channel."
        return f"Missing option: {result.detail}."
    if result.error == INVALID_OPTION:
        return f"Invalid option: {result.detail}."
    if result.error == UNKNOWN_COMMAND:
        return "Unknown command."
    # store_failure and internal errors
    return FAILURE_MESSAGES.get(result.command, "Something went wrong. Please try again later.")


def render_result(result: CommandResult) -> str:
    if not result.ok:
        return _render_error(result)

    data = result.data
    if result.command == "ping":
        return "Pong!"
    if result.command == "register":
        text = "Email notifications have been set up."
        if not data.get("confirmation_sent", True):
            text += " (The confirmation email could not be sent.)"
        return text
    if result.command == "cancel":
        return "Email notifications for this server have been cancelled."
    if result.command == "check":
        if data.get("registered"):
            return f"Email notifications on this server are registered to {data['email']}."
        return "No email notifications are registered on this server."
    if result.command == "mode":
        return f"Server mode changed to {'development' if data.get('dev_mode') else 'production'}."
    if result.command == "exclusion":
        return _render_exclusion(data)
    if "commands" in data:
        if data.get("public"):
            return "\n".join(ABOUT_LINES + [render_command_list(data["commands"], admin=False)])
        return render_command_list(data["commands"], admin=data.get("admin", False))
    return "Done."


def _render_exclusion(data: dict) -> str:
    action = data.get("action")
    if action == "list":
        channel_ids = data.get("channel_ids") or []
        if not channel_ids:
            return "No channels are excluded."
        return "Excluded channels:\n" + "\n".join(channel_mention(c) for c in channel_ids)

    channel = channel_mention(data["channel_id"])
    if action == "add":
        return f"{channel} has been added to the notification exclusion list."
    return f"{channel} has been removed from the exclusion list."
