"""
Notification Module

Mail transports, message rendering and guild-wide delivery fan-out.

Usage:
    from notification import DeliveryFanout, MailTransportFactory, NotificationMessageBuilder

    transport = MailTransportFactory.create(config.mail)
    fanout = DeliveryFanout(subscribers, transport, config.mail.from_address)
    report = fanout.deliver(guild_id, NotificationMessageBuilder().build_new_message(event))
"""

from notification.channels import (
    MailTransport,
    SmtpMailTransport,
    DryRunMailTransport,
    MailTransportFactory,
)

from notification.message_builder import (
    NotificationBody,
    NotificationMessageBuilder,
)

from notification.service import (
    DeliveryFanout,
    DeliveryReport,
)

__all__ = [
    # Transports
    'MailTransport',
    'SmtpMailTransport',
    'DryRunMailTransport',
    'MailTransportFactory',
    # Messages
    'NotificationBody',
    'NotificationMessageBuilder',
    # Fan-out
    'DeliveryFanout',
    'DeliveryReport',
]
