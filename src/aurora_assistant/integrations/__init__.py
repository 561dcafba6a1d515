"""Clients for the external services the assistant talks to."""

from .google_calendar import GoogleCalendarClient
from .google_oauth import AccessToken, AuthUrl, GoogleOAuthClient, TokenSet
from .telegram import (
    TelegramClient,
    TelegramMessage,
    TelegramUpdate,
    url_button_markup,
)
from .transcription import Transcriber

__all__ = [
    "AccessToken",
    "AuthUrl",
    "GoogleCalendarClient",
    "GoogleOAuthClient",
    "TelegramClient",
    "TelegramMessage",
    "TelegramUpdate",
    "TokenSet",
    "Transcriber",
    "url_button_markup",
]
