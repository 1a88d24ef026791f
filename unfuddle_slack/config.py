"""Configuration management."""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from .db import ConnectionParams, PostgresParams, PostgresUrlParams, SQLiteParams


@dataclass
class DatabaseConfig:
    """Cursor database configuration."""
    params: ConnectionParams


@dataclass
class UnfuddleConfig:
    """Unfuddle API configuration."""
    subdomain: str
    project_id: str
    username: str
    password: str
    max_results: int = 50
    boundary_pad_seconds: int = 1  # start_date is inclusive upstream
    timeout_seconds: int = 30

    @property
    def base_url(self) -> str:
        return f"https://{self.subdomain}.unfuddle.com"


@dataclass
class SlackConfig:
    """Slack incoming webhook configuration."""
    webhook_url: str
    channel: Optional[str] = None
    icon_url: Optional[str] = None
    username: str = "Unfuddle"


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""
    poll_interval_seconds: int = 60


@dataclass
class AppConfig:
    """Complete application configuration."""
    log_level: str
    database: DatabaseConfig
    unfuddle: UnfuddleConfig
    slack: SlackConfig
    scheduler: SchedulerConfig


def _int_env(key: str, default: int) -> int:
    """Parse an integer environment variable, falling back on empty values."""
    value = os.getenv(key, "")
    if not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}") from None


def _load_database_params() -> ConnectionParams:
    # DATABASE_URL wins over discrete DB_* settings, SQLite is the fallback
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return PostgresUrlParams(url=database_url)

    db_host = os.getenv("DB_HOST")
    if db_host:
        return PostgresParams(
            host=db_host,
            port=_int_env("DB_PORT", 5432),
            dbname=os.getenv("DB_NAME", ""),
            user=os.getenv("DB_USERNAME", ""),
            password=os.getenv("DB_PASSWORD", ""),
            sslmode=os.getenv("DB_SSL") or "require",
        )

    return SQLiteParams(path=os.getenv("DB_PATH", "unfuddle_slack.db"))


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """
    Load configuration from environment variables.

    Values from a ``.env`` file are loaded first without overriding variables
    that are already set in the process environment.

    Raises:
        ValueError: If required configuration values are missing.
    """
    load_dotenv(env_file)

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    subdomain = os.getenv("UNFUDDLE_SUBDOMAIN")
    project_id = os.getenv("UNFUDDLE_PROJECT_ID")
    username = os.getenv("UNFUDDLE_USERNAME")
    password = os.getenv("UNFUDDLE_PASSWORD")
    webhook_url = os.getenv("SLACK_WEBHOOK_URL")

    missing: List[str] = []
    if not subdomain:
        missing.append("UNFUDDLE_SUBDOMAIN")
    if not project_id:
        missing.append("UNFUDDLE_PROJECT_ID")
    if not username:
        missing.append("UNFUDDLE_USERNAME")
    if not password:
        missing.append("UNFUDDLE_PASSWORD")
    if not webhook_url:
        missing.append("SLACK_WEBHOOK_URL")

    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return AppConfig(
        log_level=log_level,
        database=DatabaseConfig(params=_load_database_params()),
        unfuddle=UnfuddleConfig(
            subdomain=subdomain,
            project_id=project_id,
            username=username,
            password=password,
            max_results=_int_env("MAX_RESULTS", 50),
            boundary_pad_seconds=_int_env("UNFUDDLE_BOUNDARY_PAD_SECONDS", 1),
            timeout_seconds=_int_env("UNFUDDLE_TIMEOUT", 30),
        ),
        slack=SlackConfig(
            webhook_url=webhook_url,
            channel=os.getenv("SLACK_CHANNEL") or None,
            icon_url=os.getenv("ICON_URL") or None,
            username=os.getenv("SLACK_USERNAME") or "Unfuddle",
        ),
        scheduler=SchedulerConfig(
            poll_interval_seconds=_int_env("POLL_INTERVAL", 60),
        ),
    )
