"""HTTP host for the assistant: Telegram webhook and Google OAuth callback."""

from .server import app, create_app
from .services import BotServices

__all__ = ["BotServices", "app", "create_app"]
