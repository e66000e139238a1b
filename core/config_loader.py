import yaml
import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from database.database import DEFAULT_DATABASE_URL, is_in_memory_sqlite


class DatabaseConfig(BaseModel):
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False

    @field_validator("url")
    @classmethod
    def reject_in_memory_sqlite(cls, v: str) -> str:
        # Events are served from several threads; an in-memory database cannot be shared safely
        if is_in_memory_sqlite(v):
            raise ValueError("in-memory SQLite is not supported; use a file URL such as sqlite:///data/messages.db")
        return v


class MailConfig(BaseModel):
    """
    Outbound mail settings.

    Every send is bounded by timeout_seconds and retried at most
    max_attempts times with exponential backoff.
    """
    transport: str = "smtp"  # "smtp" or "dry_run"
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    use_starttls: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    from_address: str = "noreply@example.com"

    timeout_seconds: float = 30.0
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = 2.0
    backoff_max_seconds: float = 30.0

    notification_subject: str = "New Discord message notification"
    confirmation_subject: str = "Discord notification setup complete"


class RateLimitConfig(BaseModel):
    cooldown_minutes: int = Field(default=60, ge=0)  # One notification per guild per window


class DiscordConfig(BaseModel):
    token: Optional[str] = None
    # Channel that receives the startup message
    log_guild_id: Optional[str] = None
    log_channel_id: Optional[str] = None
    sync_commands: bool = True
    activity_name: str = "/help"
    # Threads for message gating and fan-out; one guild never uses more than one
    event_workers: int = Field(default=8, ge=1)


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    log_level: str = "INFO"


# env var -> (section, key); first match wins for aliases
ENV_OVERRIDES = [
    ("DATABASE_URL", "database", "url"),
    ("MAIL_TRANSPORT", "mail", "transport"),
    ("SMTP_SERVER", "mail", "smtp_server"),
    ("SMTP_PORT", "mail", "smtp_port"),
    ("SMTP_USERNAME", "mail", "username"),
    ("SMTP_PASSWORD", "mail", "password"),
    ("GOOGLE_APP_PASSWORD", "mail", "password"),
    ("MAIL_FROM", "mail", "from_address"),
    ("DISCORD_TOKEN", "discord", "token"),
    ("DISCORD_LOG_SERVERID", "discord", "log_guild_id"),
    ("DISCORD_LOG_CHANNELID", "discord", "log_channel_id"),
]


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another directory), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    applied = set()
    for env_name, section, key in ENV_OVERRIDES:
        value = os.environ.get(env_name)
        if not value or (section, key) in applied:
            continue
        if data.get(section) is None:
            data[section] = {}
        data[section][key] = value
        applied.add((section, key))

    env_log_level = os.environ.get("LOG_LEVEL")
    if env_log_level:
        data['log_level'] = env_log_level

    return AppConfig(**data)
