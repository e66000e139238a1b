import logging
from typing import Optional, Set

from sqlalchemy.exc import IntegrityError

from core.exceptions import ValidationError, DuplicateSubscriptionError
from core.utils import mask_email
from database.database import Store
from database.repositories import SubscriberRepository

logger = logging.getLogger(__name__)


def validate_email(email: str) -> str:
    """Loose syntactic check: the address only has to contain '@'.

    Existing subscribers may hold addresses a strict RFC validator would
    reject, so this must not be tightened silently.
    """
    email = (email or "").strip()
    if '@' not in email:
        raise ValidationError(f"Invalid email address: {email!r}")
    return email


class SubscriberRegistry:
    """Per-guild, per-user email subscriptions."""

    def __init__(self, store: Store):
        self.store = store

    def register(self, user_id: str, guild_id: str, email: str) -> str:
        """
        Subscribe an email address to a guild's notifications.

        Returns:
            The stored (stripped) email. The caller is expected to send a
            confirmation to it.

        Raises:
            ValidationError: If the email has no '@'.
            DuplicateSubscriptionError: If the exact triple already exists.
        """
        email = validate_email(email)
        with self.store.session_scope() as session:
            repo = SubscriberRepository(session)
            if repo.exists(user_id, guild_id, email):
                raise DuplicateSubscriptionError(
                    f"{mask_email(email)} is already registered for guild {guild_id}"
                )
            try:
                repo.add(user_id, guild_id, email)
            except IntegrityError as e:
                # Concurrent registration of the same triple
                raise DuplicateSubscriptionError(
                    f"{mask_email(email)} is already registered for guild {guild_id}"
                ) from e

        logger.info(f"Registered {mask_email(email)} for user {user_id} in guild {guild_id}")
        return email

    def unregister(self, user_id: str, guild_id: str) -> int:
        """Remove every subscription the user holds in the guild. Returns rows removed."""
        with self.store.session_scope() as session:
            removed = SubscriberRepository(session).delete_for_user(user_id, guild_id)
        logger.info(f"Unregistered user {user_id} from guild {guild_id} ({removed} address(es))")
        return removed

    def status_for(self, user_id: str, guild_id: str) -> Optional[str]:
        with self.store.session_scope() as session:
            return SubscriberRepository(session).get_email_for_user(user_id, guild_id)

    def list_emails(self, guild_id: str) -> Set[str]:
        with self.store.session_scope() as session:
            return set(SubscriberRepository(session).get_distinct_emails(guild_id))
