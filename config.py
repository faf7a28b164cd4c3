"""Configuration management."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class Config:
    """Application configuration"""

    # Required
    telegram_bot_token: str
    telegram_chat_id: str

    telegram_parse_mode: str = "Markdown"

    # Fingerprint storage: "file" or "dynamodb"
    storage_backend: str = "file"
    cache_dir: str = ".cache"
    dynamodb_table: str = "changelog_fingerprints"

    request_timeout: int = 30
    check_interval_minutes: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables (and a .env file if present)

        Raises:
            ValueError: if a numeric setting is not an integer
        """
        load_dotenv(env_file)

        return cls(
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", ""),
            telegram_parse_mode=os.getenv("TELEGRAM_PARSE_MODE", "Markdown"),
            storage_backend=os.getenv("STORAGE_BACKEND", "file").lower(),
            cache_dir=os.getenv("CACHE_DIR", ".cache"),
            dynamodb_table=os.getenv("DYNAMODB_TABLE", "changelog_fingerprints"),
            request_timeout=_int_env("REQUEST_TIMEOUT", 30),
            check_interval_minutes=_int_env("CHECK_INTERVAL_MINUTES", 10),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def missing(self) -> list[str]:
        """Names of required settings that are not set."""
        missing = []
        if not self.telegram_bot_token:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not self.telegram_chat_id:
            missing.append("TELEGRAM_CHAT_ID")
        return missing
