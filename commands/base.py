#!/usr/bin/env python3
"""
Command handling contract.

The platform adapter turns an interaction into a CommandContext, asks the
CommandRegistry to dispatch it, and renders the returned CommandResult.
Handlers never produce user-facing text and never raise to the adapter.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.exceptions import (
    GuildMailError, ValidationError, DuplicateSubscriptionError,
    NotFoundError, StoreError
)

logger = logging.getLogger(__name__)

# Error codes returned to the adapter
INVALID_EMAIL = "invalid_email"
DUPLICATE_SUBSCRIPTION = "duplicate_subscription"
NOT_FOUND = "not_found"
STORE_FAILURE = "store_failure"
FORBIDDEN = "forbidden"
MISSING_OPTION = "missing_option"
INVALID_OPTION = "invalid_option"
UNKNOWN_COMMAND = "unknown_command"
INTERNAL_ERROR = "internal_error"


@dataclass
class CommandContext:
    """Who invoked a command, where, and with which options."""
    guild_id: str
    user_id: str
    guild_name: str = ""
    is_admin: bool = False
    options: Dict[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        value = self.options.get(name)
        return default if value is None else value


@dataclass
class CommandResult:
    command: str
    ok: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, command: str, **data: Any) -> "CommandResult":
        return cls(command=command, ok=True, data=data)

    @classmethod
    def failure(cls, command: str, error: str, detail: Optional[str] = None, **data: Any) -> "CommandResult":
        return cls(command=command, ok=False, error=error, detail=detail, data=data)


class CommandHandler(ABC):
    """A single command exposed to the platform."""

    name: str = ""
    description: str = ""
    admin_only: bool = False

    @abstractmethod
    def handle(self, ctx: CommandContext) -> CommandResult:
        pass


class CommandRegistry:
    """Maps a command identifier to its handler."""

    def __init__(self):
        self._handlers: Dict[str, CommandHandler] = {}

    def register(self, handler: CommandHandler) -> None:
        if not handler.name:
            raise ValueError(f"{handler.__class__.__name__} has no command name")
        if handler.name in self._handlers:
            raise ValueError(f"Command already registered: {handler.name}")
        self._handlers[handler.name] = handler
        logger.debug(f"Registered command /{handler.name}")

    def get(self, name: str) -> Optional[CommandHandler]:
        return self._handlers.get(name)

    def list_handlers(self, admin_only: Optional[bool] = None) -> List[CommandHandler]:
        handlers = list(self._handlers.values())
        if admin_only is None:
            return handlers
        return [h for h in handlers if h.admin_only == admin_only]

    def dispatch(self, name: str, ctx: CommandContext) -> CommandResult:
        handler = self._handlers.get(name)
        if handler is None:
            return CommandResult.failure(name, UNKNOWN_COMMAND)

        if handler.admin_only and not ctx.is_admin:
            logger.info(f"User {ctx.user_id} denied /{name} in guild {ctx.guild_id}")
            return CommandResult.failure(name, FORBIDDEN)

        try:
            return handler.handle(ctx)
        except ValidationError as e:
            return CommandResult.failure(name, INVALID_EMAIL, str(e))
        except DuplicateSubscriptionError as e:
            return CommandResult.failure(name, DUPLICATE_SUBSCRIPTION, str(e))
        except NotFoundError as e:
            return CommandResult.failure(name, NOT_FOUND, str(e))
        except StoreError as e:
            logger.error(f"/{name} failed in guild {ctx.guild_id}: {e}")
            return CommandResult.failure(name, STORE_FAILURE)
        except GuildMailError as e:
            logger.error(f"/{name} failed in guild {ctx.guild_id}: {e}")
            return CommandResult.failure(name, INTERNAL_ERROR, str(e))
        except Exception:
            logger.exception(f"Unexpected error in /{name}")
            return CommandResult.failure(name, INTERNAL_ERROR)
