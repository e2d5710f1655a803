from .client import TelegramClient
from .session import TelegramSession

__all__ = ["TelegramClient", "TelegramSession"]
