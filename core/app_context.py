import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from commands.base import CommandRegistry
from commands.handlers import build_command_registry
from core.clock import Clock, utc_now
from core.config_loader import AppConfig
from core.exclusions import ExclusionFilter
from core.guild_mode import GuildModeStore
from core.orchestrator import NotificationOrchestrator
from core.rate_limiter import RateLimiter, GuildLockRegistry
from core.subscribers import SubscriberRegistry
from database.database import Store
from notification.channels import MailTransport, MailTransportFactory
from notification.message_builder import NotificationMessageBuilder
from notification.service import DeliveryFanout

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Built once at process start. The store is the only resource with a
    lifecycle; close() releases it.
    """
    config: AppConfig
    store: Store
    transport: MailTransport
    exclusions: ExclusionFilter
    guild_modes: GuildModeStore
    rate_limiter: RateLimiter
    subscribers: SubscriberRegistry
    fanout: DeliveryFanout
    orchestrator: NotificationOrchestrator
    commands: CommandRegistry

    @classmethod
    def build(
        cls,
        config: AppConfig,
        store: Optional[Store] = None,
        transport: Optional[MailTransport] = None,
        clock: Optional[Clock] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            store: Pre-built store (tests); defaults to one for config.database
            transport: Pre-built mail transport (tests); defaults to config.mail.transport
            clock: Time source for the rate limiter

        Returns:
            Fully wired AppContext instance
        """
        store = store or Store(config.database.url, echo=config.database.echo)
        transport = transport or MailTransportFactory.create(config.mail)

        exclusions = ExclusionFilter(store)
        guild_modes = GuildModeStore(store)
        rate_limiter = RateLimiter(
            store,
            guild_modes,
            cooldown=timedelta(minutes=config.rate_limit.cooldown_minutes),
            clock=clock or utc_now
        )
        subscribers = SubscriberRegistry(store)
        fanout = DeliveryFanout(subscribers, transport, from_address=config.mail.from_address)
        message_builder = NotificationMessageBuilder(
            notification_subject=config.mail.notification_subject,
            confirmation_subject=config.mail.confirmation_subject
        )

        orchestrator = NotificationOrchestrator(
            store=store,
            exclusions=exclusions,
            rate_limiter=rate_limiter,
            fanout=fanout,
            message_builder=message_builder,
            locks=GuildLockRegistry()
        )
        commands = build_command_registry(subscribers, guild_modes, exclusions, fanout, message_builder)

        logger.info(f"App context built (transport={transport.transport_type}, "
                    f"cooldown={config.rate_limit.cooldown_minutes}m)")
        return cls(
            config=config,
            store=store,
            transport=transport,
            exclusions=exclusions,
            guild_modes=guild_modes,
            rate_limiter=rate_limiter,
            subscribers=subscribers,
            fanout=fanout,
            orchestrator=orchestrator,
            commands=commands
        )

    def close(self) -> None:
        self.store.close()
