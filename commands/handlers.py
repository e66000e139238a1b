import logging
from typing import List

from core.exclusions import ExclusionFilter
from core.guild_mode import GuildModeStore
from core.subscribers import SubscriberRegistry
from commands.base import (
    CommandHandler, CommandContext, CommandResult, CommandRegistry,
    MISSING_OPTION, INVALID_OPTION
)
from notification.message_builder import NotificationMessageBuilder
from notification.service import DeliveryFanout

logger = logging.getLogger(__name__)

MODE_PRODUCTION = "prod"
MODE_DEVELOPMENT = "dev"

EXCLUSION_ADD = "add"
EXCLUSION_REMOVE = "remove"
EXCLUSION_LIST = "list"


class PingHandler(CommandHandler):
    name = "ping"
    description = "Replies with pong!"

    def handle(self, ctx: CommandContext) -> CommandResult:
        return CommandResult.success(self.name)


class RegisterHandler(CommandHandler):
    """Subscribe the caller's email, then send a confirmation to it."""
    name = "register"
    description = "Register email for message notifications"

    def __init__(self, subscribers: SubscriberRegistry, fanout: DeliveryFanout,
                 message_builder: NotificationMessageBuilder):
        self.subscribers = subscribers
        self.fanout = fanout
        self.message_builder = message_builder

    def handle(self, ctx: CommandContext) -> CommandResult:
        email = ctx.option("email")
        if not email:
            return CommandResult.failure(self.name, MISSING_OPTION, "email")

        email = self.subscribers.register(ctx.user_id, ctx.guild_id, email)

        body = self.message_builder.build_confirmation(ctx.guild_name or ctx.guild_id)
        confirmation_sent = self.fanout.send_confirmation(email, body)
        return CommandResult.success(self.name, email=email, confirmation_sent=confirmation_sent)


class CancelHandler(CommandHandler):
    name = "cancel"
    description = "Cancel email notifications for this server"

    def __init__(self, subscribers: SubscriberRegistry):
        self.subscribers = subscribers

    def handle(self, ctx: CommandContext) -> CommandResult:
        removed = self.subscribers.unregister(ctx.user_id, ctx.guild_id)
        return CommandResult.success(self.name, removed=removed)


class CheckHandler(CommandHandler):
    name = "check"
    description = "Check your email notification registration status"

    def __init__(self, subscribers: SubscriberRegistry):
        self.subscribers = subscribers

    def handle(self, ctx: CommandContext) -> CommandResult:
        email = self.subscribers.status_for(ctx.user_id, ctx.guild_id)
        return CommandResult.success(self.name, registered=email is not None, email=email)


class ModeHandler(CommandHandler):
    name = "mode"
    description = "Set server mode"
    admin_only = True

    def __init__(self, guild_modes: GuildModeStore):
        self.guild_modes = guild_modes

    def handle(self, ctx: CommandContext) -> CommandResult:
        mode = ctx.option("type")
        if mode is None:
            return CommandResult.failure(self.name, MISSING_OPTION, "type")
        if mode not in (MODE_PRODUCTION, MODE_DEVELOPMENT):
            return CommandResult.failure(self.name, INVALID_OPTION, f"type={mode}")

        dev_mode = mode == MODE_DEVELOPMENT
        self.guild_modes.set_mode(ctx.guild_id, dev_mode)
        return CommandResult.success(self.name, dev_mode=dev_mode)


class ExclusionHandler(CommandHandler):
    name = "exclusion"
    description = "Manage channel exclusion settings"
    admin_only = True

    def __init__(self, exclusions: ExclusionFilter):
        self.exclusions = exclusions

    def handle(self, ctx: CommandContext) -> CommandResult:
        action = ctx.option("action")
        channel_id = ctx.option("channel_id")
        channel_name = ctx.option("channel_name", channel_id)

        if action == EXCLUSION_LIST:
            return CommandResult.success(self.name, action=action,
                                         channel_ids=self.exclusions.list(ctx.guild_id))

        if action not in (EXCLUSION_ADD, EXCLUSION_REMOVE):
            return CommandResult.failure(self.name, INVALID_OPTION, f"action={action}")
        if not channel_id:
            return CommandResult.failure(self.name, MISSING_OPTION, "channel", action=action)

        if action == EXCLUSION_ADD:
            created = self.exclusions.add(ctx.guild_id, str(channel_id))
            return CommandResult.success(self.name, action=action, channel_id=str(channel_id),
                                         channel_name=channel_name, created=created)

        # NotFoundError surfaces through the registry as not_found
        self.exclusions.remove(ctx.guild_id, str(channel_id))
        return CommandResult.success(self.name, action=action, channel_id=str(channel_id),
                                     channel_name=channel_name)


class HelpHandler(CommandHandler):
    """Lists commands. With admin_commands=True, lists the administrator commands."""

    def __init__(self, registry: CommandRegistry, name: str, description: str,
                 admin_commands: bool = False, admin_only: bool = False, post_publicly: bool = False):
        self.registry = registry
        self.name = name
        self.description = description
        self.admin_commands = admin_commands
        self.admin_only = admin_only
        self.post_publicly = post_publicly

    def handle(self, ctx: CommandContext) -> CommandResult:
        handlers: List[CommandHandler] = self.registry.list_handlers(admin_only=self.admin_commands)
        commands = [{"name": h.name, "description": h.description} for h in handlers]
        return CommandResult.success(self.name, commands=commands, admin=self.admin_commands,
                                     public=self.post_publicly)


def build_command_registry(
    subscribers: SubscriberRegistry,
    guild_modes: GuildModeStore,
    exclusions: ExclusionFilter,
    fanout: DeliveryFanout,
    message_builder: NotificationMessageBuilder
) -> CommandRegistry:
    registry = CommandRegistry()
    registry.register(PingHandler())
    registry.register(RegisterHandler(subscribers, fanout, message_builder))
    registry.register(CancelHandler(subscribers))
    registry.register(CheckHandler(subscribers))
    registry.register(ModeHandler(guild_modes))
    registry.register(ExclusionHandler(exclusions))
    registry.register(HelpHandler(registry, "help", "Show all available commands and their descriptions"))
    registry.register(HelpHandler(registry, "readme", "Post a description of this bot to the channel",
                                  admin_only=True, post_publicly=True))
    registry.register(HelpHandler(registry, "readme_adminoptions",
                                  "Show administrator-only commands and their descriptions",
                                  admin_commands=True, admin_only=True))
    return registry
