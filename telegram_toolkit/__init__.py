"""
Telegram delivery for changelog notifications.
"""

from .telegram import TelegramNotifier

__all__ = ["TelegramNotifier"]
