#!/usr/bin/env python3
import logging
import re

import requests

logger = logging.getLogger(__name__)

API_BASE = "https://api.telegram.org"

CODE_SPAN = re.compile(r"(`[^`\n]+`)")
MARKDOWN_SPECIAL = re.compile(r"([_*\[`])")
MARKDOWN_V2_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_html(text: str) -> str:
    """Escape HTML special characters for Telegram."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_markdown(text: str) -> str:
    """
    Escape legacy Markdown entities outside of `code spans`.

    Code spans are sent untouched so inline identifiers keep their formatting;
    a lone backtick is escaped like any other entity marker.
    """
    parts = CODE_SPAN.split(text)
    for i in range(0, len(parts), 2):
        parts[i] = MARKDOWN_SPECIAL.sub(r"\\\1", parts[i])
    return "".join(parts)


def escape_markdown_v2(text: str) -> str:
    return MARKDOWN_V2_SPECIAL.sub(r"\\\1", text)


ESCAPERS = {
    "markdown": escape_markdown,
    "markdownv2": escape_markdown_v2,
    "html": escape_html,
}


class TelegramNotifier:
    """Send release notifications to a Telegram chat."""

    def __init__(self, bot_token: str, chat_id: str, parse_mode: str = "Markdown",
                 timeout: int = 10):
        """
        Initialize Telegram notifier.

        Args:
            bot_token: Telegram bot token
            chat_id: Destination chat ID
            parse_mode: Telegram markup dialect for message text
            timeout: Seconds to wait for the Bot API

        Raises:
            ValueError: if the token or chat ID is empty
        """
        if not bot_token or not chat_id:
            raise ValueError(
                "Telegram credentials not found. Set TELEGRAM_BOT_TOKEN and "
                "TELEGRAM_CHAT_ID environment variables."
            )

        self.bot_token = bot_token
        self.chat_id = chat_id
        self.parse_mode = parse_mode
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "TelegramNotifier":
        return cls(config.telegram_bot_token, config.telegram_chat_id,
                   parse_mode=config.telegram_parse_mode)

    @property
    def api_url(self) -> str:
        return f"{API_BASE}/bot{self.bot_token}/sendMessage"

    def format_text(self, message: str) -> str:
        """Escape plain message text for the configured parse mode."""
        escape = ESCAPERS.get((self.parse_mode or "").lower())
        return escape(message) if escape else message

    def send(self, message: str) -> bool:
        """
        Send a plain-text message, escaped for the parse mode.

        Args:
            message: Message text

        Returns:
            True if successful, False otherwise
        """
        payload = {
            'chat_id': self.chat_id,
            'text': self.format_text(message),
            'disable_web_page_preview': True,
        }
        if self.parse_mode:
            payload['parse_mode'] = self.parse_mode

        try:
            response = requests.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            logger.info("Telegram notification sent")
            return True

        except requests.RequestException as e:
            # Request errors embed the URL, which contains the token
            error = str(e).replace(self.bot_token, "***")
            logger.error(f"Telegram notification failed: {error}")
            return False
