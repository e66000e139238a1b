from commands.base import (
    CommandContext,
    CommandResult,
    CommandHandler,
    CommandRegistry,
)
from commands.handlers import build_command_registry

__all__ = [
    'CommandContext',
    'CommandResult',
    'CommandHandler',
    'CommandRegistry',
    'build_command_registry',
]
