"""Long-lived collaborators shared by the webhook and OAuth routes."""

from dataclasses import dataclass, field
from typing import Callable

import httpx

from ..config import Settings, load_yaml_config
from ..driver import MessageHandler
from ..integrations.google_calendar import GoogleCalendarClient
from ..integrations.google_oauth import GoogleOAuthClient
from ..integrations.telegram import TelegramClient
from ..integrations.transcription import Transcriber
from ..network import AgentClients
from ..storage import Storage


@dataclass
class BotServices:
    """Everything a request handler needs, built once per process."""
    settings: Settings
    storage: Storage
    telegram: TelegramClient
    oauth_factory: Callable[[], GoogleOAuthClient]
    handler: MessageHandler
    bot_username: str | None = field(default=None)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BotServices":
        """Wire real clients from settings.

        Raises:
            ValueError: If a required setting is missing.
        """
        settings.require(
            "telegram_bot_token",
            "openai_api_key",
            "google_oauth_client_id",
            "google_oauth_client_secret",
            "google_oauth_redirect_uri",
        )

        http = httpx.Client(timeout=30.0)
        storage = Storage(settings.database_path)
        storage.create_all_tables()
        telegram = TelegramClient(settings.telegram_bot_token, http_client=http)

        def oauth_factory() -> GoogleOAuthClient:
            return GoogleOAuthClient(
                client_id=settings.google_oauth_client_id,
                client_secret=settings.google_oauth_client_secret,
                redirect_uri=settings.google_oauth_redirect_uri,
                http_client=http,
            )

        handler = MessageHandler(
            settings=settings,
            storage=storage,
            telegram=telegram,
            clients=AgentClients.from_settings(settings, load_yaml_config()),
            oauth_factory=oauth_factory,
            calendar=GoogleCalendarClient(http_client=http),
            transcriber=Transcriber(
                api_key=settings.openai_api_key, model=settings.transcription_model
            ),
        )
        return cls(
            settings=settings,
            storage=storage,
            telegram=telegram,
            oauth_factory=oauth_factory,
            handler=handler,
            bot_username=settings.telegram_bot_username,
        )
