#!/usr/bin/env python3
"""
Discord adapter.

Translates gateway events into MessageEvents for the orchestrator and slash
commands into CommandRegistry dispatches. Orchestrator and command calls do
blocking store and SMTP I/O. Message events go through GuildEventDispatcher,
which queues them per guild on the loop and runs them on its own executor;
commands run via asyncio.to_thread.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import discord
from discord import app_commands

from bot.dispatch import GuildEventDispatcher
from bot.events import to_message_event
from bot.rendering import render_result
from commands.base import CommandContext, CommandResult
from core.app_context import AppContext

logger = logging.getLogger(__name__)

STARTUP_MESSAGE = "Discord bot has started."


class NotifierBot(discord.Client):
    def __init__(self, context: AppContext):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.context = context
        self.settings = context.config.discord
        self.events = GuildEventDispatcher(context.orchestrator, max_workers=self.settings.event_workers)
        self.tree = app_commands.CommandTree(self)
        self._register_commands()

    async def setup_hook(self) -> None:
        if self.settings.sync_commands:
            logger.info("Started refreshing application (/) commands.")
            synced = await self.tree.sync()
            logger.info(f"Successfully reloaded {len(synced)} application (/) commands.")

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user}!")
        await self.change_presence(activity=discord.Game(name=self.settings.activity_name))
        await self._send_startup_log()

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        event = to_message_event(message)
        if event is None:
            return
        await self.events.submit(event)

    async def close(self) -> None:
        await super().close()
        self.events.shutdown()

    async def _send_startup_log(self) -> None:
        if not (self.settings.log_guild_id and self.settings.log_channel_id):
            return
        try:
            guild = await self.fetch_guild(int(self.settings.log_guild_id))
            channel = await guild.fetch_channel(int(self.settings.log_channel_id))
            await channel.send(STARTUP_MESSAGE)
            logger.info("Startup notification sent to Discord channel")
        except (discord.HTTPException, ValueError) as e:
            logger.error(f"Error sending startup notification to Discord: {e}")

    async def dispatch_command(
        self,
        interaction: discord.Interaction,
        name: str,
        options: Optional[Dict[str, Any]] = None
    ) -> CommandResult:
        if interaction.guild is None:
            await interaction.response.send_message("This command can only be used in a server.", ephemeral=True)
            return CommandResult.failure(name, "no_guild")

        await interaction.response.defer(ephemeral=True, thinking=True)

        permissions = getattr(interaction.user, "guild_permissions", None)
        ctx = CommandContext(
            guild_id=str(interaction.guild.id),
            user_id=str(interaction.user.id),
            guild_name=interaction.guild.name,
            is_admin=bool(permissions and permissions.administrator),
            options=options or {}
        )
        result = await asyncio.to_thread(self.context.commands.dispatch, name, ctx)

        text = render_result(result)
        if result.ok and result.data.get("public") and interaction.channel is not None:
            await interaction.channel.send(text)
            text = "Posted the details."
        await interaction.followup.send(text, ephemeral=True)
        return result

    def _register_commands(self) -> None:
        tree = self.tree

        @tree.command(name="ping", description="Replies with pong!")
        async def ping(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "ping")

        @tree.command(name="register", description="Register email for message notifications")
        @app_commands.describe(email="Email address to receive notifications")
        async def register(interaction: discord.Interaction, email: str):
            await self.dispatch_command(interaction, "register", {"email": email})

        @tree.command(name="cancel", description="Cancel email notifications for this server")
        async def cancel(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "cancel")

        @tree.command(name="check", description="Check your email notification registration status")
        async def check(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "check")

        @tree.command(name="mode", description="Set server mode")
        @app_commands.describe(type="Server mode type")
        @app_commands.choices(type=[
            app_commands.Choice(name="production", value="prod"),
            app_commands.Choice(name="development", value="dev"),
        ])
        async def mode(interaction: discord.Interaction, type: app_commands.Choice[str]):
            await self.dispatch_command(interaction, "mode", {"type": type.value})

        @tree.command(name="exclusion", description="Manage channel exclusion settings")
        @app_commands.describe(action="Action to perform", channel="Target channel")
        @app_commands.choices(action=[
            app_commands.Choice(name="add", value="add"),
            app_commands.Choice(name="remove", value="remove"),
            app_commands.Choice(name="list", value="list"),
        ])
        async def exclusion(
            interaction: discord.Interaction,
            action: app_commands.Choice[str],
            channel: Optional[discord.TextChannel] = None
        ):
            options = {"action": action.value}
            if channel is not None:
                options["channel_id"] = str(channel.id)
                options["channel_name"] = channel.name
            await self.dispatch_command(interaction, "exclusion", options)

        @tree.command(name="help", description="Show all available commands and their descriptions")
        async def help_command(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "help")

        @tree.command(name="readme", description="Post a description of this bot to the channel")
        async def readme(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "readme")

        @tree.command(name="readme_adminoptions",
                      description="Show administrator-only commands and their descriptions")
        async def readme_adminoptions(interaction: discord.Interaction):
            await self.dispatch_command(interaction, "readme_adminoptions")


def run_bot(context: AppContext) -> None:
    token = context.config.discord.token
    if not token:
        raise ValueError("Discord token not configured (set DISCORD_TOKEN)")
    bot = NotifierBot(context)
    # Logging is configured by the entry point
    bot.run(token, log_handler=None)
